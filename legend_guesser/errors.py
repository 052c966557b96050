from __future__ import annotations


class LegendGuesserError(Exception):
    """Base class for errors raised by the guessing engine."""


class InvalidStateError(LegendGuesserError):
    """Raised when an operation is called on a session or candidate set that cannot support it."""


class DatasetError(LegendGuesserError):
    """Raised when the player dataset cannot be read or normalized."""
