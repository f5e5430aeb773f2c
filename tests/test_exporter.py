"""ResultExporter file naming and artifacts, and the rendered HTML view."""

from __future__ import annotations

import json
from datetime import timedelta
from pathlib import Path
from typing import Any

import pytest

from content_understanding_pipeline.domain.result_renderer import (
    ResultRenderer,
    escape_markdown,
)
from content_understanding_pipeline.domain.tagged_value import TaggedValue
from content_understanding_pipeline.orchestration.exporter import (
    ResultExporter,
    document_token,
    operation_token,
)
from tests.conftest import FIXED_NOW

pytestmark = pytest.mark.unit


@pytest.fixture
def exporter() -> ResultExporter:
    return ResultExporter(clock=lambda: FIXED_NOW)


def _payload_with_fields(fields: dict[str, Any]) -> dict[str, Any]:
    return {"status": "Succeeded", "result": {"contents": [{"fields": fields}]}}


# =============================================================================
# File naming
# =============================================================================


class TestFileNaming:
    @pytest.mark.parametrize(
        ("document_name", "expected"),
        [
            ("invoice.pdf", "invoice"),
            ("scans/receipt.final.png", "receipt.final"),
            ('bad<name>:"x".pdf', "bad-name---x-"),
            (None, "operation"),
            ("   ", "operation"),
        ],
    )
    def test_document_token(self, document_name: str | None, expected: str) -> None:
        assert document_token(document_name) == expected

    @pytest.mark.parametrize(
        ("operation_id", "expected"),
        [
            ("abc123", "abc123"),
            ("abc_123", "abc"),
            ("abc?api-version=2025-05-01-preview", "abc"),
            ("", None),
            (None, None),
        ],
    )
    def test_operation_token(self, operation_id: str | None, expected: str | None) -> None:
        assert operation_token(operation_id) == expected

    def test_export_writes_both_files_with_shared_base_name(
        self, exporter: ResultExporter, tmp_path: Path, invoice_payload: dict[str, Any]
    ) -> None:
        paths = exporter.export(
            invoice_payload, tmp_path / "out", document_name="invoice.pdf", operation_id="op-a"
        )

        assert Path(paths.json_path).name == "invoice_op-a_20250102_030405_results.json"
        assert Path(paths.formatted_path).name == "invoice_op-a_20250102_030405_formatted.html"
        assert Path(paths.json_path).is_file()
        assert Path(paths.formatted_path).is_file()

    def test_export_without_names_uses_defaults(
        self, exporter: ResultExporter, tmp_path: Path
    ) -> None:
        paths = exporter.export({"status": "Succeeded"}, tmp_path)

        assert Path(paths.json_path).name == "operation_20250102_030405_results.json"

    def test_same_document_at_two_timestamps_does_not_collide(
        self, tmp_path: Path, invoice_payload: dict[str, Any]
    ) -> None:
        first = ResultExporter(clock=lambda: FIXED_NOW).export(
            invoice_payload, tmp_path, document_name="invoice.pdf", operation_id="op-a"
        )
        second = ResultExporter(clock=lambda: FIXED_NOW + timedelta(seconds=1)).export(
            invoice_payload, tmp_path, document_name="invoice.pdf", operation_id="op-a"
        )

        assert first.json_path != second.json_path
        assert first.formatted_path != second.formatted_path
        assert Path(second.json_path).name == "invoice_op-a_20250102_030406_results.json"
        for paths in (first, second):
            text = Path(paths.json_path).read_text(encoding="utf-8")
            assert json.loads(text) == invoice_payload
            assert "Total: 42.50" in Path(paths.formatted_path).read_text(encoding="utf-8")
        assert len(list(tmp_path.iterdir())) == 4


# =============================================================================
# Structured artifact
# =============================================================================


def test_structured_file_is_the_verbatim_payload(
    exporter: ResultExporter, tmp_path: Path, invoice_payload: dict[str, Any]
) -> None:
    invoice_payload["result"]["contents"][0]["fields"]["VendorName"]["valueString"] = "Café"

    paths = exporter.export(invoice_payload, tmp_path, document_name="invoice.pdf")
    text = Path(paths.json_path).read_text(encoding="utf-8")

    assert json.loads(text) == invoice_payload
    assert "Café" in text
    assert '\n  "status"' in text


# =============================================================================
# Rendered view
# =============================================================================


class TestRenderedView:
    def test_scalar_object_and_array_fields(
        self, exporter: ResultExporter, tmp_path: Path, invoice_payload: dict[str, Any]
    ) -> None:
        paths = exporter.export(
            invoice_payload, tmp_path, document_name="invoice.pdf", operation_id="op-a"
        )
        html = Path(paths.formatted_path).read_text(encoding="utf-8")

        assert html.startswith("<!DOCTYPE html>")
        assert "<p>Total: 42.50</p>" in html
        assert "<p>VendorName: ACME Corp</p>" in html
        assert "invoice.pdf" in html
        assert "op-a" in html
        assert "2025-01-02 03:04:05" in html
        # Object field: Field/Value table
        assert "Field</th>" in html
        assert "Jane Doe</td>" in html
        # Array of objects: columns from the first element, missing cell empty
        assert "Description</th>" in html
        assert "Quantity</th>" in html
        assert "Widget</td>" in html
        assert "2.00</td>" in html
        assert "Gadget</td>" in html

    def test_primitive_and_empty_arrays(self) -> None:
        payload = _payload_with_fields(
            {
                "Tags": {
                    "type": "array",
                    "valueArray": [
                        {"type": "string", "valueString": "urgent"},
                        {"type": "number", "valueNumber": 7},
                    ],
                },
                "Notes": {"type": "array", "valueArray": []},
            }
        )

        html = ResultRenderer().render_html(payload)

        assert "Value</th>" in html
        assert "urgent</td>" in html
        assert "7.00</td>" in html
        assert "(Empty array)" in html

    def test_non_object_items_are_skipped_in_object_tables(self) -> None:
        payload = _payload_with_fields(
            {
                "Items": {
                    "type": "array",
                    "valueArray": [
                        {
                            "type": "object",
                            "valueObject": {"Sku": {"type": "string", "valueString": "A1"}},
                        },
                        {"type": "string", "valueString": "stray"},
                    ],
                }
            }
        )

        html = ResultRenderer().render_html(payload)

        assert "A1</td>" in html
        assert "stray" not in html

    def test_columns_come_from_first_object_after_leading_primitive(self) -> None:
        payload = _payload_with_fields(
            {
                "Items": {
                    "type": "array",
                    "valueArray": [
                        {"type": "string", "valueString": "stray"},
                        {
                            "type": "object",
                            "valueObject": {"Sku": {"type": "string", "valueString": "A1"}},
                        },
                    ],
                }
            }
        )

        html = ResultRenderer().render_html(payload)

        assert "Sku</th>" in html
        assert "A1</td>" in html
        assert "Value</th>" not in html
        assert "stray" not in html

    def test_missing_fields_produce_a_note(
        self, exporter: ResultExporter, tmp_path: Path
    ) -> None:
        paths = exporter.export(
            {"status": "Succeeded", "result": {"contents": [{"markdown": ""}]}}, tmp_path
        )
        html = Path(paths.formatted_path).read_text(encoding="utf-8")

        assert "No fields were extracted from this document." in html

    def test_values_are_rendered_literally(self) -> None:
        payload = _payload_with_fields(
            {
                "Comment": {"type": "string", "valueString": "<script>*x* | y</script>"},
            }
        )

        html = ResultRenderer().render_html(payload)

        assert "<script>" not in html
        assert "&lt;script&gt;*x* | y&lt;/script&gt;" in html

    def test_escape_markdown_folds_newlines(self) -> None:
        assert escape_markdown("a\nb_c") == "a b\\_c"

    def test_failure_mid_render_keeps_partial_output(
        self, tmp_path: Path
    ) -> None:
        """Both files are still written and the error is appended to the view."""

        class _FailingRenderer(ResultRenderer):
            def _render_field(self, name: str, value: TaggedValue) -> list[str]:
                if name == "Broken":
                    raise RuntimeError("boom")
                return super()._render_field(name, value)

        payload = _payload_with_fields(
            {
                "First": {"type": "string", "valueString": "kept"},
                "Broken": {"type": "string", "valueString": "lost"},
                "Third": {"type": "string", "valueString": "never"},
            }
        )
        exporter = ResultExporter(_FailingRenderer(), clock=lambda: FIXED_NOW)

        paths = exporter.export(payload, tmp_path, document_name="doc.pdf")
        html = Path(paths.formatted_path).read_text(encoding="utf-8")

        assert json.loads(Path(paths.json_path).read_text(encoding="utf-8")) == payload
        assert "First: kept" in html
        assert "Error creating formatted results: boom" in html
        assert "never" not in html
