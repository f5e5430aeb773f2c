"""
Polling of long-running analysis operations.

OperationPoller fetches an operation's status repeatedly until it reaches a
terminal state, the deadline passes, or the run is cancelled. Errors raised
while fetching a snapshot are treated as transient: they are logged and the
next attempt happens after the normal interval.
"""

import logging
import threading
import time
from collections.abc import Callable

from ..clients.exceptions import OperationFailedError, PollingTimedOutError
from ..domain.config import PollingConfig
from ..domain.models import (
    Operation,
    OperationStatus,
    PollFailed,
    PollOutcome,
    PollSucceeded,
    PollTimedOut,
)
from ..utils.documents import operation_id_from_handle
from ..utils.logging import log_operation_status

logger = logging.getLogger(__name__)


class OperationPoller:
    """Waits for an operation to reach a terminal state.

    Args:
        fetch_status: Callable returning the current Operation snapshot for
            a handle, usually ``AnalysisClient.fetch_status``.
        config: Timeout, interval and backoff settings.
        clock: Monotonic clock in seconds.
        cancel_event: Event that aborts the current wait when set.
        sleep: ``sleep(seconds) -> bool`` used between attempts; returns True
            when the wait was cancelled. Defaults to waiting on
            ``cancel_event``.

    Example:
        >>> poller = OperationPoller(client.fetch_status, PollingConfig())
        >>> operation = poller.poll(handle)
        >>> operation.result["contents"][0]["fields"]
    """

    def __init__(
        self,
        fetch_status: Callable[[str], Operation],
        config: PollingConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
        cancel_event: threading.Event | None = None,
        sleep: Callable[[float], bool] | None = None,
    ) -> None:
        self.fetch_status = fetch_status
        self.config = config or PollingConfig()
        self.clock = clock
        self.cancel_event = cancel_event or threading.Event()
        self._sleep = sleep or self.cancel_event.wait

    def wait(
        self,
        handle: str,
        timeout_seconds: float | None = None,
        interval_seconds: float | None = None,
    ) -> PollOutcome:
        """Poll until a terminal state, the deadline or cancellation.

        Args:
            handle: Operation handle returned when the document was submitted.
            timeout_seconds: Overrides the configured timeout.
            interval_seconds: Overrides the configured interval.

        Returns:
            PollSucceeded, PollFailed or PollTimedOut. Never raises for
            remote or transport failures.

        Raises:
            ValueError: If the handle is empty or the overrides are not
                positive.
        """
        if not handle or not handle.strip():
            raise ValueError("Operation handle cannot be empty")

        timeout = self.config.timeout_seconds if timeout_seconds is None else timeout_seconds
        interval = self.config.interval_seconds if interval_seconds is None else interval_seconds
        if timeout <= 0 or interval <= 0:
            raise ValueError("timeout_seconds and interval_seconds must be greater than 0")

        operation_id = operation_id_from_handle(handle) or handle
        start = self.clock()
        deadline = start + timeout
        attempts = 0

        while True:
            now = self.clock()
            if now >= deadline:
                break

            attempts += 1
            try:
                operation = self.fetch_status(handle)
            except Exception as e:
                logger.warning(f"Status check {attempts} for operation {operation_id} failed: {e}")
            else:
                if operation.status is OperationStatus.SUCCEEDED:
                    logger.info(
                        f"Operation {operation_id} succeeded after {now - start:.1f}s "
                        f"({attempts} checks)"
                    )
                    return PollSucceeded(operation)
                if operation.status is OperationStatus.FAILED:
                    logger.error(
                        f"Operation {operation_id} failed: "
                        f"{operation.failure_code}: {operation.failure_message}"
                    )
                    return PollFailed(
                        handle,
                        operation.failure_code or "Unknown",
                        operation.failure_message or "None",
                    )
                log_operation_status(logger, operation_id, operation.status_text)

            remaining = deadline - self.clock()
            if remaining <= 0:
                break
            if self._sleep(min(interval, remaining)):
                logger.warning(f"Polling cancelled for operation {operation_id}")
                return PollTimedOut(handle, self.clock() - start, cancelled=True)
            interval = min(
                interval * self.config.backoff_multiplier,
                max(self.config.max_interval_seconds, interval),
            )

        elapsed = self.clock() - start
        logger.warning(
            f"Polling timed out after {elapsed:.1f}s for operation {operation_id}"
        )
        return PollTimedOut(handle, elapsed)

    def poll(
        self,
        handle: str,
        timeout_seconds: float | None = None,
        interval_seconds: float | None = None,
    ) -> Operation:
        """Like wait(), but returns the succeeded operation or raises.

        Raises:
            OperationFailedError: If the service reports the operation failed.
            PollingTimedOutError: If the deadline passed or the wait was
                cancelled.
        """
        outcome = self.wait(handle, timeout_seconds, interval_seconds)
        if isinstance(outcome, PollSucceeded):
            return outcome.operation
        if isinstance(outcome, PollFailed):
            raise OperationFailedError(outcome.handle, outcome.code, outcome.message)

        timeout = self.config.timeout_seconds if timeout_seconds is None else timeout_seconds
        raise PollingTimedOutError(outcome.handle, timeout, cancelled=outcome.cancelled)
