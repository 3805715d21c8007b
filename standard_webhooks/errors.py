"""
Error kinds and verification results.

Verification never raises for bad input; it returns a VerificationResult
carrying one of the ErrorKind values. Exceptions are reserved for key
decoding at construction time and for callers that opt in via
raise_for_error().
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Reasons a key or a delivery can be rejected."""

    INVALID_KEY = "invalid_key"
    MISSING_HEADER = "missing_header"
    INVALID_TIMESTAMP = "invalid_timestamp"
    TIMESTAMP_TOO_OLD = "timestamp_too_old"
    TIMESTAMP_TOO_NEW = "timestamp_too_new"
    MALFORMED_SIGNATURE = "malformed_signature"
    NO_MATCHING_SIGNATURE = "no_matching_signature"


class WebhookVerificationError(ValueError):
    """Raised when a webhook key or delivery fails verification."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.kind.name}, {self.message!r})"


class InvalidKeyError(WebhookVerificationError):
    """Raised when a signing key cannot be decoded."""

    def __init__(self, message: str):
        super().__init__(ErrorKind.INVALID_KEY, message)


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of a single verify() call."""

    is_valid: bool
    kind: Optional[ErrorKind] = None
    message: Optional[str] = None

    @classmethod
    def success(cls) -> "VerificationResult":
        return cls(is_valid=True)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "VerificationResult":
        return cls(is_valid=False, kind=kind, message=message)

    def __bool__(self) -> bool:
        return self.is_valid

    def raise_for_error(self) -> None:
        """Raise WebhookVerificationError if this result is a failure."""
        if not self.is_valid:
            raise WebhookVerificationError(self.kind, self.message)
