"""Markdown conversion used by the rendered result view."""

import pytest

from content_understanding_pipeline.domain.markdown_converter import (
    MarkdownConverter,
    convert_markdown_to_html,
)

pytestmark = pytest.mark.unit


def test_headings_and_emphasis() -> None:
    html = convert_markdown_to_html("## Extracted Fields\n\n**Note**: checked")

    assert html == "<h2>Extracted Fields</h2>\n<p><strong>Note</strong>: checked</p>"


def test_pipe_tables_are_rendered() -> None:
    html = convert_markdown_to_html("| Field | Value |\n|---|---|\n| Name | ACME |")

    assert "<table>" in html
    assert "<td>ACME</td>" in html


@pytest.mark.parametrize("source", ["", "   \n"])
def test_blank_input_gives_empty_fragment(source: str) -> None:
    assert convert_markdown_to_html(source) == ""


def test_raw_html_is_escaped_unless_allowed() -> None:
    assert "&lt;b&gt;" in MarkdownConverter().convert("<b>x</b> y")
    assert "<b>x</b>" in MarkdownConverter(allow_html=True).convert("<b>x</b> y")

