"""
advisor/exceptions.py
---------------------
Error taxonomy for the allocation core.

The transport layer maps each kind to its own response:

  * ``InvalidProfileError`` – caller supplied a bad profile (client error)
  * ``StorageError``        – persisted record could not be written or read
  * ``NotFoundError``       – nothing has been computed yet
"""

from __future__ import annotations

from typing import Optional

from advisor.enums import ProfileErrorKind


class AdvisorError(Exception):
    """Base class for all allocation-core errors."""


class InvalidProfileError(AdvisorError, ValueError):
    """
    Raised when an investor profile fails a presence, range, or semantic
    consistency check.  Never retried automatically.
    """

    def __init__(
        self,
        message: str,
        kind: ProfileErrorKind = ProfileErrorKind.OUT_OF_RANGE,
        field: Optional[str] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.field = field

    def __str__(self) -> str:
        base = super().__str__()
        return f"[{self.kind.value}] {base}"


class StorageError(AdvisorError):
    """Raised on I/O or (de)serialisation failure in the result store."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class NotFoundError(AdvisorError):
    """Raised by ``load()`` when no allocation has ever been saved."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path
