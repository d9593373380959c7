"""Exception types shared by the transports, the resilience layer and the CLI.

Transports raise `UpstreamError` with an explicit status code and failure
kind; the resilience layer decides what to do from the kind alone.
"""

from enum import Enum
from typing import Optional

# Status codes that mean the credential itself is unusable.
INVALID_CREDENTIAL_STATUSES = frozenset({400, 401, 403, 404})
RATE_LIMITED_STATUS = 429
OVERLOADED_STATUS = 503


class FailureKind(str, Enum):
    """What an upstream failure says about the credential that was used."""
    INVALID_CREDENTIAL = "invalid_credential"
    RATE_LIMITED = "rate_limited"
    OVERLOADED = "overloaded"
    EMPTY_RESPONSE = "empty_response"
    UNKNOWN = "unknown"


class AceDeckError(Exception):
    """Base class for all errors raised by acedeck."""


class NoCredentialsAvailableError(AceDeckError):
    """Raised when configuration yields no usable (non-blacklisted) credential."""

    def __init__(self, provider: Optional[str] = None):
        self.provider = provider
        where = f" for provider '{provider}'" if provider else ""
        super().__init__(f"No usable API credentials available{where}. Check your API key configuration.")


class ExhaustedRetriesError(AceDeckError):
    """Raised when the attempt budget is spent without a single success."""

    def __init__(self, last_error: Optional[BaseException], attempts: int):
        self.last_error = last_error
        self.attempts = attempts
        super().__init__(f"Max attempts ({attempts}) exceeded. Last error: {last_error}")


class UpstreamError(AceDeckError):
    """Structured failure reported by a transport."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        kind: FailureKind = FailureKind.UNKNOWN,
        provider: Optional[str] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.kind = kind
        self.provider = provider
        super().__init__(message)

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"[{self.status_code}] {self.message}"
        return self.message

    @classmethod
    def from_status(cls, status_code: Optional[int], message: str, provider: Optional[str] = None) -> "UpstreamError":
        """Builds an error whose kind is derived from the HTTP status code.

        Falls back to the message text only when no status code is known.
        """
        if status_code is None:
            return cls(message, None, kind_from_message(message), provider)
        return cls(message, status_code, kind_from_status(status_code), provider)


class StorageQuotaExceededError(AceDeckError):
    """Raised by the response store when a write would exceed its quota."""


class UnsupportedContentError(AceDeckError):
    """Raised when the selected transport cannot produce a media type."""


def kind_from_status(status_code: int) -> FailureKind:
    """Maps an HTTP status code to a failure kind."""
    if status_code in INVALID_CREDENTIAL_STATUSES:
        return FailureKind.INVALID_CREDENTIAL
    if status_code == RATE_LIMITED_STATUS:
        return FailureKind.RATE_LIMITED
    if status_code == OVERLOADED_STATUS:
        return FailureKind.OVERLOADED
    return FailureKind.UNKNOWN


def kind_from_message(message: str) -> FailureKind:
    """Best-effort kind for vendor errors that carry no status code."""
    text = (message or "").lower()
    if "overloaded" in text:
        return FailureKind.OVERLOADED
    if "quota" in text or "limit" in text:
        return FailureKind.RATE_LIMITED
    if "invalid" in text or "not found" in text:
        return FailureKind.INVALID_CREDENTIAL
    return FailureKind.UNKNOWN
