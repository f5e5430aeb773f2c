"""
Domain models for the Content Understanding Pipeline.

This module defines the core data structures that flow through the pipeline:
operation snapshots returned by the remote service, the terminal outcomes of
polling, exported artifact locations, and the per-document batch rows that
make up a run summary.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class OperationStatus(Enum):
    """Lifecycle state of a remote analysis operation.

    Only SUCCEEDED and FAILED are terminal. Status strings are matched
    case-insensitively; anything the client does not recognise is treated as
    PENDING so that new service states never end a poll early.
    """

    PENDING = "Pending"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"

    @classmethod
    def from_text(cls, status: str | None) -> OperationStatus:
        """Map a raw service status string onto the enum."""
        token = (status or "").strip().lower()
        if token == "succeeded":
            return cls.SUCCEEDED
        if token == "failed":
            return cls.FAILED
        if token == "running":
            return cls.RUNNING
        return cls.PENDING

    @property
    def is_terminal(self) -> bool:
        return self in (OperationStatus.SUCCEEDED, OperationStatus.FAILED)


@dataclass(frozen=True)
class Operation:
    """Immutable snapshot of a remote operation at one point in time.

    A new snapshot replaces the previous one on every poll; nothing mutates a
    snapshot after it has been built.
    """

    handle: str
    """Operation location URL (or bare operation id) used to fetch status."""

    status: OperationStatus
    """Parsed lifecycle state."""

    payload: dict[str, Any] = field(default_factory=dict)
    """Raw snapshot body exactly as returned by the service."""

    status_text: str = ""
    """Status string as reported by the service, kept for logging."""

    failure_code: str | None = None
    """Error code reported by the service. Only set when status is FAILED."""

    failure_message: str | None = None
    """Error message reported by the service. Only set when status is FAILED."""

    @classmethod
    def from_payload(cls, handle: str, payload: dict[str, Any]) -> Operation:
        """Build a snapshot from a parsed status response.

        Failure details are read from ``payload["error"]`` and default to
        ``"Unknown"`` and ``"None"`` when the service omits them.
        """
        if not isinstance(payload, dict):
            payload = {}
        raw_status = payload.get("status")
        status_text = raw_status if isinstance(raw_status, str) else ""
        status = OperationStatus.from_text(status_text)

        failure_code = None
        failure_message = None
        if status is OperationStatus.FAILED:
            error = payload.get("error")
            if not isinstance(error, dict):
                error = {}
            failure_code = error.get("code") or "Unknown"
            failure_message = error.get("message") or "None"

        return cls(
            handle=handle,
            status=status,
            payload=payload,
            status_text=status_text,
            failure_code=failure_code,
            failure_message=failure_message,
        )

    @property
    def result(self) -> dict[str, Any] | None:
        """The ``result`` section of the payload, present only on success."""
        if self.status is not OperationStatus.SUCCEEDED:
            return None
        result = self.payload.get("result")
        return result if isinstance(result, dict) else None


@dataclass(frozen=True)
class PollSucceeded:
    """Terminal outcome: the operation finished successfully."""

    operation: Operation


@dataclass(frozen=True)
class PollFailed:
    """Terminal outcome: the service reported the operation as failed."""

    handle: str
    code: str
    message: str


@dataclass(frozen=True)
class PollTimedOut:
    """The deadline passed (or the wait was cancelled) before a terminal
    state was seen. The handle stays valid for checking again later."""

    handle: str
    elapsed_seconds: float
    cancelled: bool = False


PollOutcome = PollSucceeded | PollFailed | PollTimedOut


@dataclass(frozen=True)
class ExportPaths:
    """Locations of the two artifacts written for one analysis result."""

    json_path: str
    """Verbatim, pretty-printed copy of the operation payload."""

    formatted_path: str
    """Rendered HTML view of the extracted fields."""


class ItemState(Enum):
    """Per-document progress within a batch run."""

    NOT_STARTED = "NotStarted"
    SUBMITTED = "Submitted"
    POLLING = "Polling"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"


@dataclass(frozen=True)
class BatchRow:
    """Outcome record for one input document of a batch run.

    Rows are built once the document has been fully processed and never
    change afterwards. Serialized as one entry of the batch summary file.
    """

    file: str
    """Input file name."""

    status: str
    """``"Succeeded"`` or ``"Failed"``."""

    duration_ms: int
    """Wall-clock processing time for this document in milliseconds."""

    operation_id: str | None = None
    """Operation id, usable later with the check-operation command."""

    json_path: str | None = None
    """Path of the structured *_results.json artifact."""

    formatted_path: str | None = None
    """Path of the rendered *_formatted.html artifact."""

    error: str | None = None
    """Error message for failed documents."""

    def __post_init__(self) -> None:
        if self.status == ItemState.SUCCEEDED.value:
            if not self.json_path or not self.formatted_path:
                raise ValueError("Succeeded rows require both artifact paths")
            if self.error is not None:
                raise ValueError("Succeeded rows cannot carry an error")
        elif self.status == ItemState.FAILED.value:
            if not self.error:
                raise ValueError("Failed rows require an error message")
        else:
            raise ValueError(f"Invalid batch row status: {self.status!r}")

    @property
    def succeeded(self) -> bool:
        return self.status == ItemState.SUCCEEDED.value

    def to_dict(self) -> dict[str, Any]:
        """Convert the row to a JSON-serializable dictionary."""
        return asdict(self)


@dataclass
class BatchReport:
    """Aggregate outcome of one batch run."""

    analyzer: str
    """Analyzer (processing profile) used for every document."""

    rows: list[BatchRow]
    """One row per input document, in input order."""

    total_time: float
    """Total run duration in seconds."""

    summary_path: str | None = None
    """Location of the summary artifact, or None if writing it failed."""

    @property
    def succeeded_count(self) -> int:
        return sum(1 for row in self.rows if row.succeeded)

    @property
    def failed_count(self) -> int:
        return len(self.rows) - self.succeeded_count
