"""Adaptive 20-questions engine for guessing NBA players."""
