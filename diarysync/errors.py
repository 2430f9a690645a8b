"""
Error types for diarysync.

Store failures are surfaced immediately and never retried; callers decide
what to report to the user.
"""

from typing import Optional


class DiarySyncError(Exception):
    """Base class for all diarysync errors."""


class NotFoundError(DiarySyncError):
    """A referenced block or notebook does not exist in the store."""


class PolicyViolation(DiarySyncError):
    """A relocation was rejected by the configured list-item policy."""


class UnknownVariant(DiarySyncError, ValueError):
    """The renderer factory was given a variant it does not know."""


class ExternalStoreError(DiarySyncError):
    """
    A call to the external document store failed.

    Operations performed before the failing call are not rolled back.
    """

    def __init__(self, message: str, endpoint: Optional[str] = None, code: Optional[int] = None):
        super().__init__(message)
        self.endpoint = endpoint
        self.code = code
