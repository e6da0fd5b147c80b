"""Exception types raised by the abbrlink engine."""

from pathlib import Path


class AbbrlinkError(Exception):
    """Base class for abbrlink engine errors."""


class DocumentIOError(AbbrlinkError, OSError):
    """A document could not be read or written."""

    def __init__(self, path: Path, operation: str, cause: BaseException):
        self.path = path
        self.operation = operation
        self.cause = cause
        super().__init__(f"Failed to {operation} {path}: {cause}")

