"""
Exceptions raised by the competition engine and its services.
"""


class MatchdayError(Exception):
    """Base exception for all Matchday errors.

    Catching this catches every application-specific error.
    """

    pass


class InvalidInput(MatchdayError, ValueError):
    """Raised when caller-supplied data is malformed.

    Too few participants, negative or non-integer scores, blank names.
    """

    pass


class InvalidOperation(MatchdayError, RuntimeError):
    """Raised when an operation is illegal in the current state."""

    pass


class NotFound(MatchdayError, LookupError):
    """Raised when a referenced competition, participant or match is absent."""

    def __init__(self, kind: str, identifier: str):
        super().__init__(f"{kind} not found: {identifier}")
        self.kind = kind
        self.identifier = identifier


class StorageError(MatchdayError):
    """Raised when the storage backend fails to load or write a collection."""

    pass
