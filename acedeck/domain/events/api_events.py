"""Domain Events related to upstream calls and credential rotation.

Examples include events for when a credential is rotated away from,
blacklisted, when a retry is scheduled, or when a call succeeds or fails.
"""

from dataclasses import dataclass, field
import time
from typing import Optional


@dataclass
class DomainEvent:
    """Base class for domain events."""
    pass


@dataclass
class ApiCallSucceeded(DomainEvent):
    """Event triggered when an upstream call succeeds."""
    provider: str
    credential: str  # masked
    attempt_number: int
    latency_ms: Optional[float] = None
    timestamp: float = field(default_factory=time.time)


@dataclass
class ApiCallFailed(DomainEvent):
    """Event triggered when an execution gives up (no credentials or budget spent)."""
    provider: str
    error_type: str
    error_message: str
    attempts: int
    timestamp: float = field(default_factory=time.time)


@dataclass
class CredentialRotated(DomainEvent):
    """Event triggered when the cursor moves on after a failed attempt."""
    provider: str
    from_credential: str  # masked
    reason: str
    timestamp: float = field(default_factory=time.time)


@dataclass
class CredentialBlacklisted(DomainEvent):
    """Event triggered when a credential is permanently excluded."""
    provider: str
    credential: str  # masked
    reason: str
    remaining_credentials: int
    timestamp: float = field(default_factory=time.time)


@dataclass
class RetryScheduled(DomainEvent):
    """Event triggered when a retry is delayed (server overloaded)."""
    provider: str
    attempt_number: int
    delay_seconds: float
    timestamp: float = field(default_factory=time.time)
