"""retry_with_backoff delays, exception filtering and argument checks."""

from __future__ import annotations

import pytest

from content_understanding_pipeline.utils.retry import retry_with_backoff

pytestmark = pytest.mark.unit


class _Flaky:
    def __init__(self, failures: list[Exception], result: str = "ok") -> None:
        self.failures = failures
        self.result = result
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        if self.failures:
            raise self.failures.pop(0)
        return self.result


def test_delays_grow_and_are_capped() -> None:
    sleeps: list[float] = []
    retried: list[tuple[int, float]] = []
    func = _Flaky([ConnectionError()] * 4)

    wrapped = retry_with_backoff(
        max_attempts=5,
        initial_delay=2,
        backoff_multiplier=2.0,
        max_delay=5,
        on_retry=lambda attempt, delay, e: retried.append((attempt, delay)),
        sleep=sleeps.append,
    )(func)

    assert wrapped() == "ok"
    assert sleeps == [2, 4, 5, 5]
    assert retried == [(1, 2), (2, 4), (3, 5), (4, 5)]


def test_last_exception_propagates_after_max_attempts() -> None:
    func = _Flaky([ConnectionError("one"), ConnectionError("two")])

    wrapped = retry_with_backoff(2, 1, 2.0, 4, sleep=lambda _: None)(func)

    with pytest.raises(ConnectionError, match="two"):
        wrapped()
    assert func.calls == 2


def test_unlisted_exceptions_are_not_retried() -> None:
    func = _Flaky([KeyError("boom")])

    wrapped = retry_with_backoff(
        3, 1, 2.0, 4, exceptions=(ConnectionError,), sleep=lambda _: None
    )(func)

    with pytest.raises(KeyError):
        wrapped()
    assert func.calls == 1


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_attempts": 0, "initial_delay": 1, "backoff_multiplier": 2, "max_delay": 4},
        {"max_attempts": 3, "initial_delay": 0, "backoff_multiplier": 2, "max_delay": 4},
        {"max_attempts": 3, "initial_delay": 1, "backoff_multiplier": 0, "max_delay": 4},
        {"max_attempts": 3, "initial_delay": 5, "backoff_multiplier": 2, "max_delay": 4},
    ],
)
def test_invalid_arguments_fail_fast(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        retry_with_backoff(**kwargs)
