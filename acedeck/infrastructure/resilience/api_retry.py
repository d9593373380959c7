"""Service for executing upstream calls with credential rotation and retries.

Every attempt picks a credential from the live pool at a rotating cursor.
Invalid credentials are blacklisted for the life of the process, rate
limits and server overload rotate to the next credential, and any other
failure rotates as well. The total number of attempts is bounded.
"""

import asyncio
import logging
import random
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Set, TypeVar

from acedeck.domain.events.api_events import (
    ApiCallFailed, ApiCallSucceeded, CredentialBlacklisted,
    CredentialRotated, DomainEvent, RetryScheduled
)
from acedeck.domain.models.common import Credential, RotationStatus
from acedeck.domain.models.errors import (
    ExhaustedRetriesError, FailureKind, NoCredentialsAvailableError, UpstreamError
)
from acedeck.infrastructure.resilience.credential_pool import CredentialPool, mask_credential

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 20
DEFAULT_OVERLOAD_DELAY_S = 0.8


class RetryPolicy(Enum):
    """What the layer does with a failed attempt."""
    HARD = "hard"                  # blacklist, rotate
    TRANSIENT = "transient"        # rotate (and wait on overload)
    UNCLASSIFIED = "unclassified"  # rotate


def classify_failure(error: BaseException) -> RetryPolicy:
    """Maps a failure to a retry policy from its structured kind only."""
    if not isinstance(error, UpstreamError):
        return RetryPolicy.UNCLASSIFIED
    if error.kind is FailureKind.INVALID_CREDENTIAL:
        return RetryPolicy.HARD
    if error.kind in (FailureKind.RATE_LIMITED, FailureKind.OVERLOADED):
        return RetryPolicy.TRANSIENT
    return RetryPolicy.UNCLASSIFIED


def rotation_reason(error: BaseException) -> str:
    """Human readable cause of a rotation, e.g. 'Limit Reached (429)'."""
    if not isinstance(error, UpstreamError):
        return f"Error ({type(error).__name__})"
    code = error.status_code
    if error.kind is FailureKind.RATE_LIMITED:
        return f"Limit Reached ({code or 429})"
    if error.kind is FailureKind.OVERLOADED:
        return f"Server Busy ({code or 503})"
    if error.kind is FailureKind.INVALID_CREDENTIAL:
        return f"Invalid Key ({code})" if code else "Invalid Key"
    if error.kind is FailureKind.EMPTY_RESPONSE:
        return "Empty Response"
    return f"Error ({code})" if code else "Error"


@dataclass
class ResilienceState:
    """Rotation cursor, blacklist and last rotation reason of one layer."""
    cursor: int = 0
    blacklist: Set[str] = field(default_factory=set)
    last_reason: Optional[str] = None

    @classmethod
    def with_random_offset(cls) -> "ResilienceState":
        """State whose cursor starts at a random offset to spread load."""
        return cls(cursor=random.randrange(0, 1 << 16))


class RequestResilienceLayer:
    """Executes idempotent upstream requests across a pool of credentials."""

    def __init__(
        self,
        pool: CredentialPool,
        state: Optional[ResilienceState] = None,
        provider_name: Optional[str] = None,
        overload_delay_s: float = DEFAULT_OVERLOAD_DELAY_S,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        event_listener: Optional[Callable[[DomainEvent], None]] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """Initializes the RequestResilienceLayer.

        Args:
            pool: Live credential pool for the provider.
            state: Rotation state; a fresh one is created if omitted.
            provider_name: Name of the provider (for logging/events).
            overload_delay_s: Fixed wait after a 503 before the next attempt.
            max_attempts: Default attempt budget for `execute`.
            event_listener: Optional callable receiving domain events.
            sleep: Awaitable used for the overload wait.
        """
        self.pool = pool
        self.state = state or ResilienceState()
        self.provider_name = provider_name or pool.provider
        self.overload_delay_s = overload_delay_s
        self.max_attempts = max_attempts
        self.event_listener = event_listener
        self._sleep = sleep

        logger.info(
            f"RequestResilienceLayer initialized: provider='{self.provider_name}', "
            f"max_attempts={max_attempts}, overload_delay={overload_delay_s}s"
        )

    def _dispatch(self, event: DomainEvent) -> None:
        logger.debug(f"EVENT: {event}")
        if self.event_listener is not None:
            self.event_listener(event)

    async def execute(
        self,
        request_fn: Callable[[Credential], Awaitable[T]],
        max_attempts: Optional[int] = None,
    ) -> T:
        """Runs `request_fn` until it succeeds or the attempt budget is spent.

        Args:
            request_fn: Async callable taking one credential. Must be idempotent.
            max_attempts: Upper bound on attempts across all credentials.

        Returns:
            The first successful result, unchanged.

        Raises:
            ValueError: If `max_attempts` is less than 1.
            NoCredentialsAvailableError: If no usable credential remains.
            ExhaustedRetriesError: If every attempt failed.
        """
        budget = self.max_attempts if max_attempts is None else max_attempts
        if budget < 1:
            raise ValueError(f"max_attempts must be at least 1, got {budget}")

        state = self.state
        attempts = 0
        last_error: Optional[BaseException] = None

        while True:
            credentials = self.pool.active(state.blacklist)
            if not credentials:
                logger.error(f"No usable credentials for {self.provider_name} after {attempts} attempt(s).")
                self._dispatch(ApiCallFailed(
                    provider=self.provider_name, error_type=NoCredentialsAvailableError.__name__,
                    error_message="credential pool is empty", attempts=attempts
                ))
                raise NoCredentialsAvailableError(self.provider_name) from last_error

            if attempts >= budget:
                logger.error(
                    f"Max attempts ({budget}) reached for {self.provider_name}. Last error: {last_error}"
                )
                self._dispatch(ApiCallFailed(
                    provider=self.provider_name, error_type=type(last_error).__name__,
                    error_message=str(last_error), attempts=attempts
                ))
                raise ExhaustedRetriesError(last_error, attempts) from last_error

            credential = credentials[state.cursor % len(credentials)]
            attempts += 1
            start_time = time.perf_counter()
            try:
                result = await request_fn(credential)
            except Exception as e:
                last_error = e
            else:
                latency_ms = (time.perf_counter() - start_time) * 1000
                state.last_reason = None
                self._dispatch(ApiCallSucceeded(
                    provider=self.provider_name, credential=mask_credential(credential),
                    attempt_number=attempts, latency_ms=latency_ms
                ))
                return result

            policy = classify_failure(last_error)
            reason = rotation_reason(last_error)
            masked = mask_credential(credential)
            logger.warning(
                f"Attempt {attempts}/{budget} on {self.provider_name} with {masked} failed: "
                f"{reason} ({type(last_error).__name__}: {last_error})"
            )

            state.last_reason = reason
            state.cursor += 1

            if policy is RetryPolicy.HARD:
                state.blacklist.add(credential)
                self._dispatch(CredentialBlacklisted(
                    provider=self.provider_name, credential=masked, reason=reason,
                    remaining_credentials=len(credentials) - 1
                ))
            else:
                self._dispatch(CredentialRotated(
                    provider=self.provider_name, from_credential=masked, reason=reason
                ))

            if (
                policy is RetryPolicy.TRANSIENT
                and isinstance(last_error, UpstreamError)
                and last_error.kind is FailureKind.OVERLOADED
                and attempts < budget
            ):
                self._dispatch(RetryScheduled(
                    provider=self.provider_name, attempt_number=attempts + 1,
                    delay_seconds=self.overload_delay_s
                ))
                await self._sleep(self.overload_delay_s)

    def status(self) -> RotationStatus:
        """Snapshot of the live pool size, 1-based cursor position and last reason."""
        credentials = self.pool.active(self.state.blacklist)
        index = (self.state.cursor % len(credentials)) + 1 if credentials else 0
        return RotationStatus(
            active_credentials=len(credentials),
            current_index=index,
            last_rotation_reason=self.state.last_reason,
        )
