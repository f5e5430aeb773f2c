"""Operation snapshots and batch row invariants."""

from __future__ import annotations

import pytest

from content_understanding_pipeline.domain.models import (
    BatchReport,
    BatchRow,
    Operation,
    OperationStatus,
)

pytestmark = pytest.mark.unit


class TestOperation:
    @pytest.mark.parametrize(
        ("status", "expected"),
        [
            ("Succeeded", OperationStatus.SUCCEEDED),
            ("SUCCEEDED", OperationStatus.SUCCEEDED),
            ("failed", OperationStatus.FAILED),
            ("Running", OperationStatus.RUNNING),
            ("NotStarted", OperationStatus.PENDING),
            ("SomethingNew", OperationStatus.PENDING),
            (None, OperationStatus.PENDING),
        ],
    )
    def test_status_is_case_insensitive(
        self, status: str | None, expected: OperationStatus
    ) -> None:
        operation = Operation.from_payload("h", {"status": status})

        assert operation.status is expected
        assert operation.status.is_terminal == (
            expected in (OperationStatus.SUCCEEDED, OperationStatus.FAILED)
        )

    def test_failure_details_default_when_missing(self) -> None:
        operation = Operation.from_payload("h", {"status": "Failed", "error": "oops"})

        assert operation.failure_code == "Unknown"
        assert operation.failure_message == "None"

    def test_result_only_on_success(self) -> None:
        running = Operation.from_payload("h", {"status": "Running", "result": {"a": 1}})
        done = Operation.from_payload("h", {"status": "Succeeded", "result": {"a": 1}})

        assert running.result is None
        assert done.result == {"a": 1}
        assert running.failure_code is None

    def test_non_dict_payload_is_pending(self) -> None:
        operation = Operation.from_payload("h", ["unexpected"])  # type: ignore[arg-type]

        assert operation.status is OperationStatus.PENDING
        assert operation.payload == {}


class TestBatchRow:
    def test_succeeded_row_requires_both_paths(self) -> None:
        with pytest.raises(ValueError):
            BatchRow(file="a.pdf", status="Succeeded", duration_ms=1, json_path="a.json")

    def test_succeeded_row_cannot_carry_error(self) -> None:
        with pytest.raises(ValueError):
            BatchRow(
                file="a.pdf",
                status="Succeeded",
                duration_ms=1,
                json_path="a.json",
                formatted_path="a.html",
                error="boom",
            )

    def test_failed_row_requires_error(self) -> None:
        with pytest.raises(ValueError):
            BatchRow(file="a.pdf", status="Failed", duration_ms=1)

    def test_unknown_status_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            BatchRow(file="a.pdf", status="Polling", duration_ms=1, error="x")

    def test_report_counts(self) -> None:
        report = BatchReport(
            analyzer="invoice",
            rows=[
                BatchRow("a.pdf", "Succeeded", 1, json_path="a.json", formatted_path="a.html"),
                BatchRow("b.pdf", "Failed", 1, error="x"),
                BatchRow("c.pdf", "Failed", 1, error="y"),
            ],
            total_time=1.5,
        )

        assert (report.succeeded_count, report.failed_count) == (1, 2)
