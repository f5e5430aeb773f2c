"""Document loading, directory listing and operation id helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from content_understanding_pipeline.utils.documents import (
    content_type_for,
    list_supported_documents,
    operation_id_from_handle,
    read_document,
)
from tests.conftest import handle_for

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("a.pdf", "application/pdf"),
        ("scan.JPG", "image/jpeg"),
        ("page.tiff", "image/tiff"),
        ("notes.txt", "application/octet-stream"),
    ],
)
def test_content_type_for(name: str, expected: str) -> None:
    assert content_type_for(name) == expected


class TestReadDocument:
    def test_returns_bytes_and_content_type(self, tmp_path: Path) -> None:
        path = tmp_path / "invoice.pdf"
        path.write_bytes(b"%PDF-1.4")

        assert read_document(path) == (b"%PDF-1.4", "application/pdf")

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            read_document(tmp_path / "missing.pdf")

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.pdf"
        path.write_bytes(b"")

        with pytest.raises(ValueError, match="Document is empty"):
            read_document(path)


class TestListSupportedDocuments:
    def test_filters_by_extension_and_sorts(self, tmp_path: Path) -> None:
        for name in ["b.PDF", "a.png", "notes.txt"]:
            (tmp_path / name).write_bytes(b"x")
        (tmp_path / "nested").mkdir()
        (tmp_path / "nested" / "c.pdf").write_bytes(b"x")

        found = list_supported_documents(tmp_path)

        assert [p.name for p in found] == ["a.png", "b.PDF"]

    def test_custom_extensions(self, tmp_path: Path) -> None:
        for name in ["a.pdf", "b.png"]:
            (tmp_path / name).write_bytes(b"x")

        assert [p.name for p in list_supported_documents(tmp_path, [".PNG"])] == ["b.png"]

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            list_supported_documents(tmp_path / "nope")


@pytest.mark.parametrize(
    ("handle", "expected"),
    [
        (handle_for("abc"), "abc"),
        (handle_for("abc_123"), "abc"),
        ("abc", "abc"),
        ("https://host/analyzerResults/xyz/", "xyz"),
        ("", None),
        (None, None),
    ],
)
def test_operation_id_from_handle(handle: str | None, expected: str | None) -> None:
    assert operation_id_from_handle(handle) == expected
