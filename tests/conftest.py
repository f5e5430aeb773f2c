"""Pytest configuration and fixtures.

Provides test doubles for the analysis client and the clock, plus sample
operation payloads shaped like real Content Understanding responses. No test
touches the network.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import pytest

from content_understanding_pipeline.domain.config import (
    AppConfig,
    OutputConfig,
    PollingConfig,
)
from content_understanding_pipeline.domain.models import Operation

RESULTS_URL = "https://example.services.ai.azure.com/contentunderstanding/analyzerResults"
FIXED_NOW = datetime(2025, 1, 2, 3, 4, 5)

# =============================================================================
# Test Doubles
# =============================================================================


@dataclass
class FakeClock:
    """Manual clock for poller tests.

    ``sleep`` advances time instantly and records each requested delay.
    Returns False (not cancelled) unless ``cancel_after`` sleeps have been
    taken.
    """

    now: float = 0.0
    sleeps: list[float] = field(default_factory=list)
    cancel_after: int | None = None

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> bool:
        if self.cancel_after is not None and len(self.sleeps) >= self.cancel_after:
            return True
        self.sleeps.append(seconds)
        self.now += seconds
        return False


def handle_for(operation_id: str) -> str:
    return f"{RESULTS_URL}/{operation_id}?api-version=2025-05-01-preview"


def snapshot(handle: str, status: str, **extra: Any) -> Operation:
    return Operation.from_payload(handle, {"status": status, **extra})


@dataclass
class FakeClient:
    """AnalysisClient test double.

    ``submissions`` maps document bytes to either a handle or an exception.
    ``statuses`` maps a handle to a list of snapshots/exceptions returned in
    order; the last entry repeats once the list is exhausted.
    """

    submissions: dict[bytes, str | Exception] = field(default_factory=dict)
    statuses: dict[str, list[Operation | Exception]] = field(default_factory=dict)
    submit_calls: list[tuple[bytes, str, str]] = field(default_factory=list)
    fetch_calls: list[str] = field(default_factory=list)

    def submit(self, document_bytes: bytes, content_type: str, analyzer: str) -> str:
        self.submit_calls.append((document_bytes, content_type, analyzer))
        outcome = self.submissions[document_bytes]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def fetch_status(self, handle: str) -> Operation:
        self.fetch_calls.append(handle)
        script = self.statuses[handle]
        entry = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(entry, Exception):
            raise entry
        return entry


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _ascii_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep log output predictable regardless of the terminal encoding."""
    monkeypatch.setenv("FORCE_ASCII", "1")


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def polling_config() -> PollingConfig:
    return PollingConfig(timeout_seconds=60, interval_seconds=5)


@pytest.fixture
def app_config(tmp_path) -> AppConfig:
    return AppConfig(output=OutputConfig(output_dir=str(tmp_path / "Output")))


@pytest.fixture
def invoice_payload() -> dict[str, Any]:
    """A succeeded operation with scalar, object and array fields."""
    return {
        "id": "op-a",
        "status": "Succeeded",
        "result": {
            "analyzerId": "invoice-analyzer",
            "contents": [
                {
                    "markdown": "# Invoice",
                    "fields": {
                        "VendorName": {"type": "string", "valueString": "ACME Corp"},
                        "Total": {"type": "number", "valueNumber": 42.5},
                        "BillTo": {
                            "type": "object",
                            "valueObject": {
                                "Name": {"type": "string", "valueString": "Jane Doe"},
                                "City": {"type": "string", "valueString": "Paris"},
                            },
                        },
                        "Items": {
                            "type": "array",
                            "valueArray": [
                                {
                                    "type": "object",
                                    "valueObject": {
                                        "Description": {
                                            "type": "string",
                                            "valueString": "Widget",
                                        },
                                        "Quantity": {"type": "number", "valueNumber": 2},
                                    },
                                },
                                {
                                    "type": "object",
                                    "valueObject": {
                                        "Description": {
                                            "type": "string",
                                            "valueString": "Gadget",
                                        },
                                    },
                                },
                            ],
                        },
                    },
                }
            ],
        },
    }
