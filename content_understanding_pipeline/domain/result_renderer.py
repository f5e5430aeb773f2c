"""
Rendered (human-readable) view of an analysis result.

The named fields of a successful result are laid out as Markdown: scalar
fields as ``name: value`` paragraphs, objects as key/value tables and arrays
as tables (one column per sub-field for arrays of objects, a single
``Value`` column otherwise). The Markdown is then converted to HTML and
wrapped in a small standalone page.

Rendering is best effort. If something goes wrong part-way through, whatever
was already rendered is kept and an ``Error creating formatted results``
paragraph is appended instead of raising.
"""

import html
import logging
import re
from typing import Any

from tabulate import tabulate

from .field_extractor import extract_field_value
from .markdown_converter import convert_markdown_to_html
from .tagged_value import (
    ArrayValue,
    ObjectValue,
    TaggedValue,
    classify,
    resolve_path,
)

logger = logging.getLogger(__name__)

NO_FIELDS_NOTE = (
    "No fields were extracted from this document. "
    "This may be normal depending on the analyzer schema."
)
EMPTY_ARRAY_NOTE = "(Empty array)"
EMPTY_OBJECT_NOTE = "(Empty object)"
RENDER_ERROR_PREFIX = "Error creating formatted results"

# Characters that would otherwise be read as Markdown syntax
_MARKDOWN_SPECIAL = re.compile(r"([\\`*_\[\]<>#|~!&])")

_PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
body {{ font-family: Segoe UI, Helvetica, Arial, sans-serif; margin: 2em; }}
table {{ border-collapse: collapse; margin-bottom: 1em; }}
th, td {{ border: 1px solid #ccc; padding: 4px 8px; text-align: left; }}
th {{ background: #f3f3f3; }}
</style>
</head>
<body>
{body}
</body>
</html>
"""


def escape_markdown(text: str) -> str:
    """Escape text so it renders literally inside Markdown.

    Newlines are folded into spaces so a value can't open a new block.
    """
    text = " ".join(str(text).splitlines())
    return _MARKDOWN_SPECIAL.sub(r"\\\1", text)


class ResultRenderer:
    """Builds the rendered view of a successful operation payload."""

    def __init__(self, fields_path: str = "result.contents.0.fields") -> None:
        """Initialize the renderer.

        Args:
            fields_path: Dotted path to the named-fields collection in the
                payload. Numeric segments index into arrays.
        """
        self.fields_path = fields_path

    def render_markdown(
        self,
        payload: Any,
        document_name: str | None = None,
        operation_id: str | None = None,
        processed_at: str | None = None,
        title: str = "Analysis Results",
    ) -> str:
        """Render the payload's named fields as Markdown.

        Args:
            payload: Full operation payload.
            document_name: Source document shown in the header, if known.
            operation_id: Operation id shown in the header, if known.
            processed_at: Processing time shown in the header.
            title: Heading placed at the top of the view.

        Returns:
            Markdown text. Never raises.
        """
        blocks: list[str] = [f"# {escape_markdown(title)}"]
        header = [
            f"**{label}**: {escape_markdown(value)}"
            for label, value in (
                ("Document", document_name),
                ("Operation", operation_id),
                ("Processed", processed_at),
            )
            if value
        ]
        if header:
            # Trailing backslash is a hard line break
            blocks.append("\\\n".join(header))
        blocks.append("---")
        try:
            fields = resolve_path(payload, self.fields_path)
            if not isinstance(fields, dict) or not fields:
                blocks.append(NO_FIELDS_NOTE)
                return "\n\n".join(blocks)

            blocks.append("## Extracted Fields")
            for name, node in fields.items():
                blocks.extend(self._render_field(str(name), classify(node)))
        except Exception as e:
            logger.warning(f"Rendering stopped early: {e}")
            blocks.append(escape_markdown(f"{RENDER_ERROR_PREFIX}: {e}"))
        return "\n\n".join(blocks)

    def render_html(
        self,
        payload: Any,
        document_name: str | None = None,
        operation_id: str | None = None,
        processed_at: str | None = None,
        title: str = "Analysis Results",
    ) -> str:
        """Render the payload's named fields as a standalone HTML page.

        Takes the same arguments as ``render_markdown``.

        Returns:
            Complete HTML document. Never raises.
        """
        markdown = self.render_markdown(
            payload, document_name, operation_id, processed_at, title
        )
        try:
            body = convert_markdown_to_html(markdown)
        except Exception as e:
            logger.warning(f"Markdown conversion failed: {e}")
            body = f"<p>{html.escape(f'{RENDER_ERROR_PREFIX}: {e}')}</p>"
        return _PAGE_TEMPLATE.format(title=html.escape(title), body=body)

    def _render_field(self, name: str, value: TaggedValue) -> list[str]:
        heading = f"### {escape_markdown(name)}"

        if isinstance(value, ObjectValue):
            if not value.fields:
                return [heading, EMPTY_OBJECT_NOTE]
            rows = [
                [escape_markdown(key), escape_markdown(extract_field_value(sub))]
                for key, sub in value.fields.items()
            ]
            return [heading, self._table(["Field", "Value"], rows)]

        if isinstance(value, ArrayValue):
            return [heading, self._render_array(value)]

        return [f"{escape_markdown(name)}: {escape_markdown(extract_field_value(value))}"]

    def _render_array(self, value: ArrayValue) -> str:
        if not value.items:
            return EMPTY_ARRAY_NOTE

        first = next((item for item in value.items if isinstance(item, ObjectValue)), None)
        if first is not None:
            # Columns come from the first object element; other shapes are skipped
            columns = list(first.fields.keys())
            rows = []
            for item in value.items:
                if not isinstance(item, ObjectValue):
                    continue
                rows.append(
                    [
                        escape_markdown(extract_field_value(item.fields[col]))
                        if col in item.fields
                        else ""
                        for col in columns
                    ]
                )
            if not columns:
                return EMPTY_OBJECT_NOTE
            return self._table([escape_markdown(col) for col in columns], rows)

        rows = [[escape_markdown(extract_field_value(item))] for item in value.items]
        return self._table(["Value"], rows)

    def _table(self, headers: list[str], rows: list[list[str]]) -> str:
        return tabulate(rows, headers=headers, tablefmt="github", disable_numparse=True)
