import httpx
import pytest

from pokemon_investigation.errors import (
    CriteriaNotMatchedError,
    FetchTimeoutError,
    HTTPStatusError,
    NetworkError,
    NonRetryableError,
    RecordValidationError,
    RetryExhaustedError,
)
from pokemon_investigation.retry import is_transient_error, with_retry


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def flaky(failures: list[Exception], result: str = "ok"):
    calls: list[int] = []

    async def operation() -> str:
        calls.append(len(calls) + 1)
        if failures:
            raise failures.pop(0)
        return result

    return operation, calls


@pytest.mark.parametrize(
    "exc",
    [
        NetworkError("network error fetching 'pikachu'", name="pikachu"),
        FetchTimeoutError("request timeout for 'pikachu'", name="pikachu"),
        HTTPStatusError("pikachu", 429),
        HTTPStatusError("pikachu", 500),
        HTTPStatusError("pikachu", 503),
        httpx.ConnectError("connection refused"),
        httpx.ReadTimeout("read timed out"),
        TimeoutError(),
    ],
)
def test_transient_errors(exc: Exception) -> None:
    assert is_transient_error(exc) is True


@pytest.mark.parametrize(
    "exc",
    [
        HTTPStatusError("pikachu", 400),
        HTTPStatusError("pikachu", 404),
        RecordValidationError("pikachu", "1 invalid field(s)"),
        CriteriaNotMatchedError("bulbasaur", "NO_MATCHING_TYPE"),
        ValueError("bad payload"),
    ],
)
def test_permanent_errors(exc: Exception) -> None:
    assert is_transient_error(exc) is False


@pytest.mark.asyncio
async def test_returns_first_success_without_retrying() -> None:
    operation, calls = flaky([])
    sleep = RecordingSleep()

    result = await with_retry(operation, max_attempts=3, base_delay=1, context="test", sleep=sleep)

    assert result == "ok"
    assert calls == [1]
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_succeeds_on_third_attempt_after_transient_failures() -> None:
    operation, calls = flaky([HTTPStatusError("pikachu", 503), NetworkError("down", name="pikachu")])
    sleep = RecordingSleep()

    result = await with_retry(operation, max_attempts=3, base_delay=0.5, context="test", sleep=sleep)

    assert result == "ok"
    assert calls == [1, 2, 3]
    assert sleep.delays == [0.5, 1.0]


@pytest.mark.asyncio
async def test_permanent_failure_aborts_immediately() -> None:
    cause = HTTPStatusError("missingno", 404)
    operation, calls = flaky([cause])
    sleep = RecordingSleep()

    with pytest.raises(NonRetryableError) as excinfo:
        await with_retry(operation, max_attempts=3, base_delay=1, context="pokemon 'missingno'", sleep=sleep)

    assert calls == [1]
    assert sleep.delays == []
    assert excinfo.value.__cause__ is cause
    assert excinfo.value.attempts == 1
    assert "attempt 1/3" in str(excinfo.value)
    assert "pokemon 'missingno'" in str(excinfo.value)


@pytest.mark.asyncio
async def test_exhausted_attempts_wrap_last_error() -> None:
    last = FetchTimeoutError("request timeout for 'pikachu'", name="pikachu")
    operation, calls = flaky([HTTPStatusError("pikachu", 500), HTTPStatusError("pikachu", 429), last])
    sleep = RecordingSleep()

    with pytest.raises(RetryExhaustedError) as excinfo:
        await with_retry(operation, max_attempts=3, base_delay=1, context="pokemon 'pikachu'", sleep=sleep)

    assert calls == [1, 2, 3]
    assert excinfo.value.__cause__ is last
    assert excinfo.value.attempts == 3
    assert str(excinfo.value) == "all 3 attempts failed for pokemon 'pikachu'"


@pytest.mark.asyncio
async def test_backoff_doubles_each_attempt() -> None:
    failures: list[Exception] = [NetworkError("down", name="x") for _ in range(5)]
    operation, _ = flaky(failures)
    sleep = RecordingSleep()

    with pytest.raises(RetryExhaustedError):
        await with_retry(operation, max_attempts=5, base_delay=0.25, context="test", sleep=sleep)

    assert sleep.delays == [0.25, 0.5, 1.0, 2.0]


@pytest.mark.asyncio
async def test_single_attempt_never_sleeps() -> None:
    operation, calls = flaky([NetworkError("down", name="x")])
    sleep = RecordingSleep()

    with pytest.raises(RetryExhaustedError):
        await with_retry(operation, max_attempts=1, base_delay=1, context="test", sleep=sleep)

    assert calls == [1]
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_attempt_failures_are_reported() -> None:
    operation, _ = flaky([NetworkError("down", name="x")])
    seen: list[tuple[int, str]] = []

    await with_retry(
        operation,
        max_attempts=2,
        base_delay=0,
        context="test",
        on_attempt_failure=lambda attempt, exc: seen.append((attempt, type(exc).__name__)),
        sleep=RecordingSleep(),
    )

    assert seen == [(1, "NetworkError")]
