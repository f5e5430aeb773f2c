"""Retry utilities for the Content Understanding Pipeline.

Provides a retry decorator with exponential backoff. The HTTP client uses it
to resubmit documents when the service reports a transient error (5xx, 429 or
a dropped connection).
"""

from collections.abc import Callable
from functools import wraps
import logging
import time

logger = logging.getLogger(__name__)


def retry_with_backoff(
    max_attempts: int,
    initial_delay: float,
    backoff_multiplier: float,
    max_delay: float,
    exceptions: tuple[type[Exception], ...] = (Exception,),
    on_retry: Callable[[int, float, Exception], None] | None = None,
    sleep: Callable[[float], None] | None = None,
) -> Callable:
    """Decorator that retries a function with exponential backoff on failure.

    The delay before retry ``n`` (1-indexed) is
    ``min(initial_delay * backoff_multiplier ** (n - 1), max_delay)``.

    Args:
        max_attempts: Maximum number of attempts, including the first one.
        initial_delay: Delay in seconds before the first retry.
        backoff_multiplier: Factor applied to the delay after each retry.
        max_delay: Upper bound for any single delay, in seconds.
        exceptions: Exception types that trigger a retry. Anything else
            propagates immediately.
        on_retry: Optional callback invoked before each retry with the attempt
            number, the delay and the exception. Exceptions raised by the
            callback propagate and stop the retry loop.
        sleep: Function used to wait between attempts. Defaults to
            time.sleep, looked up at call time.

    Returns:
        Decorator function that wraps the target function with retry logic.

    Raises:
        ValueError: If the parameters are inconsistent.
        The last exception raised by the decorated function if all attempts fail.

    Example:
        >>> @retry_with_backoff(
        ...     max_attempts=3,
        ...     initial_delay=2.0,
        ...     backoff_multiplier=2.0,
        ...     max_delay=16.0,
        ...     exceptions=(APIError,),
        ... )
        ... def submit(document_bytes):
        ...     return client.submit(document_bytes, "application/pdf", "invoice")
    """
    # Fail fast on invalid configs
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
    if initial_delay <= 0:
        raise ValueError(f"initial_delay must be greater than 0, got {initial_delay}")
    if backoff_multiplier <= 0:
        raise ValueError(
            f"backoff_multiplier must be greater than 0, got {backoff_multiplier}"
        )
    if max_delay < initial_delay:
        raise ValueError(
            f"max_delay ({max_delay}) must be greater than or equal to "
            f"initial_delay ({initial_delay})"
        )

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            for attempt in range(1, max_attempts + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt == max_attempts:
                        logger.debug(f"{func.__name__} failed after {attempt} attempts")
                        raise

                    delay = min(
                        initial_delay * (backoff_multiplier ** (attempt - 1)), max_delay
                    )
                    if on_retry is not None:
                        on_retry(attempt, delay, e)
                    (sleep or time.sleep)(delay)

        return wrapper

    return decorator
