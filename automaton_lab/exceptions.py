from typing import Optional, Dict


class AutomatonLabError(Exception):
    """Base class for errors raised by the automaton lab."""


class AutomatonValidationError(AutomatonLabError, ValueError):
    """
    Raised when an automaton definition fails structural validation.

    Subclasses ValueError so the views can keep treating it as a bad request.
    """

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class UnknownElementError(AutomatonLabError, LookupError):
    """Raised when a state or transition id does not exist in the automaton."""


class EditLockedError(AutomatonLabError):
    """Raised on structural edits while a run is in progress."""
