import asyncio
import pytest
from unittest.mock import MagicMock

from acedeck.domain.events.api_events import (
    ApiCallFailed, ApiCallSucceeded, CredentialBlacklisted, CredentialRotated, RetryScheduled
)
from acedeck.domain.models.errors import (
    ExhaustedRetriesError, FailureKind, NoCredentialsAvailableError, UpstreamError
)
from acedeck.infrastructure.resilience.api_retry import (
    RequestResilienceLayer, ResilienceState, RetryPolicy, classify_failure
)
from acedeck.infrastructure.resilience.credential_pool import CredentialPool

KEY_A = "keyA-0000000000"
KEY_B = "keyB-0000000000"
KEY_C = "keyC-0000000000"

RATE_LIMITED = UpstreamError.from_status(429, "Resource exhausted")
OVERLOADED = UpstreamError.from_status(503, "The model is overloaded")
FORBIDDEN = UpstreamError.from_status(403, "API key not valid")


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


def scripted(outcomes):
    """Builds a request_fn answering per credential; the last scripted outcome repeats."""
    calls = []

    async def request_fn(credential):
        calls.append(credential)
        script = outcomes[credential]
        outcome = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    return request_fn, calls


def pool_of(*keys):
    raw = ",".join(keys)
    return CredentialPool(source=lambda: raw, provider="gemini")


@pytest.fixture
def sleep():
    return RecordingSleep()


def layer_for(pool, sleep, **kwargs):
    return RequestResilienceLayer(pool, provider_name="gemini", sleep=sleep, **kwargs)


# --- classification ---

@pytest.mark.parametrize("error, expected", [
    (UpstreamError.from_status(400, "bad"), RetryPolicy.HARD),
    (UpstreamError.from_status(401, "unauthenticated"), RetryPolicy.HARD),
    (FORBIDDEN, RetryPolicy.HARD),
    (UpstreamError.from_status(404, "model not found"), RetryPolicy.HARD),
    (RATE_LIMITED, RetryPolicy.TRANSIENT),
    (OVERLOADED, RetryPolicy.TRANSIENT),
    (UpstreamError.from_status(500, "internal"), RetryPolicy.UNCLASSIFIED),
    (UpstreamError("Empty response from AI", kind=FailureKind.EMPTY_RESPONSE), RetryPolicy.UNCLASSIFIED),
    (RuntimeError("network down"), RetryPolicy.UNCLASSIFIED),
])
def test_classify_failure(error, expected):
    assert classify_failure(error) is expected


def test_classify_failure_ignores_message_text():
    """A 500 mentioning 'quota' is still unclassified; only the kind counts."""
    error = UpstreamError.from_status(500, "quota backend invalid")
    assert classify_failure(error) is RetryPolicy.UNCLASSIFIED


# --- execution ---

def test_success_keeps_selection_sticky(sleep):
    request_fn, calls = scripted({KEY_A: ["one"], KEY_B: ["two"]})
    layer = layer_for(pool_of(KEY_A, KEY_B), sleep)

    assert asyncio.run(layer.execute(request_fn)) == "one"
    assert asyncio.run(layer.execute(request_fn)) == "one"

    assert calls == [KEY_A, KEY_A]
    assert layer.state.cursor == 0


def test_rate_limit_rotates_to_next_key_then_succeeds(sleep):
    request_fn, calls = scripted({KEY_A: [RATE_LIMITED], KEY_B: ["notes text"]})
    layer = layer_for(pool_of(KEY_A, KEY_B), sleep)

    result = asyncio.run(layer.execute(request_fn))

    assert result == "notes text"
    assert calls == [KEY_A, KEY_B]
    assert layer.state.cursor == 1
    assert layer.state.blacklist == set()
    assert layer.state.last_reason is None
    assert sleep.delays == []

    # The successful key stays selected for the next call
    asyncio.run(layer.execute(request_fn))
    assert calls[-1] == KEY_B


def test_overload_rotates_and_waits_fixed_delay(sleep):
    request_fn, calls = scripted({KEY_A: [OVERLOADED], KEY_B: ["ok"]})
    layer = layer_for(pool_of(KEY_A, KEY_B), sleep, overload_delay_s=0.8)

    assert asyncio.run(layer.execute(request_fn)) == "ok"
    assert calls == [KEY_A, KEY_B]
    assert sleep.delays == [0.8]


def test_rotation_wraps_around_pool(sleep):
    request_fn, calls = scripted({KEY_A: [RATE_LIMITED], KEY_B: [RATE_LIMITED], KEY_C: [RATE_LIMITED, "ok"]})
    layer = layer_for(pool_of(KEY_A, KEY_B, KEY_C), sleep)
    layer.state.cursor = 1

    assert asyncio.run(layer.execute(request_fn)) == "ok"
    assert calls == [KEY_B, KEY_C, KEY_A, KEY_B, KEY_C]


def test_invalid_key_is_removed_permanently(sleep):
    request_fn, calls = scripted({KEY_A: [FORBIDDEN], KEY_B: ["ok"]})
    # The key stays in configuration the whole time
    layer = layer_for(pool_of(KEY_A, KEY_B), sleep)

    assert asyncio.run(layer.execute(request_fn)) == "ok"
    assert KEY_A in layer.state.blacklist

    for _ in range(3):
        asyncio.run(layer.execute(request_fn))
    assert calls.count(KEY_A) == 1
    assert layer.status().active_credentials == 1


def test_single_invalid_key_raises_no_credentials(sleep):
    request_fn, calls = scripted({KEY_A: [FORBIDDEN]})
    layer = layer_for(pool_of(KEY_A), sleep)

    with pytest.raises(NoCredentialsAvailableError) as exc_info:
        asyncio.run(layer.execute(request_fn))

    assert calls == [KEY_A]
    assert exc_info.value.__cause__ is FORBIDDEN


def test_all_invalid_keys_end_in_no_credentials(sleep):
    request_fn, calls = scripted({KEY_A: [FORBIDDEN], KEY_B: [FORBIDDEN], KEY_C: [FORBIDDEN]})
    layer = layer_for(pool_of(KEY_A, KEY_B, KEY_C), sleep)

    with pytest.raises(NoCredentialsAvailableError):
        asyncio.run(layer.execute(request_fn))

    assert sorted(calls) == sorted([KEY_A, KEY_B, KEY_C])
    assert layer.state.blacklist == {KEY_A, KEY_B, KEY_C}


def test_empty_configuration_raises_before_any_call(sleep):
    request_fn, calls = scripted({})
    layer = layer_for(pool_of("short", ""), sleep)

    with pytest.raises(NoCredentialsAvailableError):
        asyncio.run(layer.execute(request_fn))
    assert calls == []


def test_budget_exhaustion_carries_last_error(sleep):
    request_fn, calls = scripted({KEY_A: [RATE_LIMITED], KEY_B: [RATE_LIMITED]})
    layer = layer_for(pool_of(KEY_A, KEY_B), sleep)

    with pytest.raises(ExhaustedRetriesError) as exc_info:
        asyncio.run(layer.execute(request_fn, max_attempts=3))

    assert len(calls) == 3
    assert exc_info.value.attempts == 3
    assert exc_info.value.last_error is RATE_LIMITED
    assert exc_info.value.__cause__ is RATE_LIMITED
    assert layer.state.last_reason == "Limit Reached (429)"


def test_unclassified_errors_rotate_without_blacklisting(sleep):
    boom = RuntimeError("connection reset")
    request_fn, calls = scripted({KEY_A: [boom], KEY_B: ["ok"]})
    layer = layer_for(pool_of(KEY_A, KEY_B), sleep)

    assert asyncio.run(layer.execute(request_fn)) == "ok"
    assert calls == [KEY_A, KEY_B]
    assert layer.state.blacklist == set()


@pytest.mark.parametrize("max_attempts", [0, -1])
def test_max_attempts_must_be_positive(sleep, max_attempts):
    request_fn, _ = scripted({KEY_A: ["ok"]})
    layer = layer_for(pool_of(KEY_A), sleep)
    with pytest.raises(ValueError):
        asyncio.run(layer.execute(request_fn, max_attempts=max_attempts))


def test_pool_is_reread_between_attempts(sleep):
    config = {"value": KEY_A}
    pool = CredentialPool(source=lambda: config["value"], provider="gemini")
    calls = []

    async def request_fn(credential):
        calls.append(credential)
        if credential == KEY_A:
            # Operator adds a second key while the first is rate limited
            config["value"] = f"{KEY_A},{KEY_B}"
            raise RATE_LIMITED
        return "ok"

    layer = layer_for(pool, sleep)
    assert asyncio.run(layer.execute(request_fn)) == "ok"
    assert calls == [KEY_A, KEY_B]


def test_events_are_sent_to_listener(sleep):
    listener = MagicMock()
    # After KEY_A is dropped the cursor (1) lands on KEY_C in the live pool [KEY_B, KEY_C]
    request_fn, _ = scripted({KEY_A: [FORBIDDEN], KEY_B: ["ok"], KEY_C: [OVERLOADED]})
    layer = layer_for(pool_of(KEY_A, KEY_B, KEY_C), sleep, event_listener=listener)

    asyncio.run(layer.execute(request_fn))

    events = [c.args[0] for c in listener.call_args_list]
    kinds = [type(e) for e in events]
    assert kinds == [CredentialBlacklisted, CredentialRotated, RetryScheduled, ApiCallSucceeded]
    assert events[0].reason == "Invalid Key (403)"
    assert events[1].reason == "Server Busy (503)"
    # Credentials are never exposed in full
    assert all(KEY_A not in repr(e) and KEY_B not in repr(e) for e in events)


def test_failure_event_on_exhaustion(sleep):
    listener = MagicMock()
    request_fn, _ = scripted({KEY_A: [RATE_LIMITED]})
    layer = layer_for(pool_of(KEY_A), sleep, event_listener=listener)

    with pytest.raises(ExhaustedRetriesError):
        asyncio.run(layer.execute(request_fn, max_attempts=2))

    last = listener.call_args_list[-1].args[0]
    assert isinstance(last, ApiCallFailed)
    assert last.attempts == 2


# --- status ---

def test_status_reports_one_based_index_and_reason(sleep):
    request_fn, _ = scripted({KEY_A: [RATE_LIMITED], KEY_B: [RATE_LIMITED]})
    layer = layer_for(pool_of(KEY_A, KEY_B), sleep)

    status = layer.status()
    assert (status.active_credentials, status.current_index, status.last_rotation_reason) == (2, 1, None)

    with pytest.raises(ExhaustedRetriesError):
        asyncio.run(layer.execute(request_fn, max_attempts=1))

    status = layer.status()
    assert status.current_index == 2
    assert status.last_rotation_reason == "Limit Reached (429)"


def test_status_with_empty_pool(sleep):
    layer = layer_for(pool_of(), sleep)
    status = layer.status()
    assert status.active_credentials == 0
    assert status.current_index == 0


def test_random_offset_state_starts_within_range():
    state = ResilienceState.with_random_offset()
    assert state.cursor >= 0
    assert state.blacklist == set()
