"""Exceptions raised while building or loading a network."""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    STRUCTURAL = "structural"
    FORMAT = "format"


class NetworkError(Exception):
    """Base class for every network error; `kind` tells the two families apart."""

    kind: ErrorKind = ErrorKind.STRUCTURAL


class StructuralError(NetworkError, ValueError):
    """
    A registration or assignment precondition was violated.
    
    Examples: negative capacity, duplicate name, adding a house whose demand
    would exceed the total registered capacity, moving a house from a
    generator it is not connected to.
    """

    kind = ErrorKind.STRUCTURAL


class NetworkFormatError(NetworkError):
    """Malformed record in the text representation of a network."""

    kind = ErrorKind.FORMAT

    def __init__(self, reason: str, line_number: Optional[int] = None):
        self.reason = reason
        self.line_number = line_number
        if line_number is None:
            super().__init__(reason)
        else:
            super().__init__(f"line {line_number}: {reason}")
