"""Test package for legend_guesser."""
