"""
Markdown to HTML conversion for rendered analysis results.

ResultRenderer assembles the rendered view as Markdown; this module turns it
into the HTML fragment placed inside the exported page. Raw HTML in the
source is never passed through: field values come from analysed documents
and must show up as text.

Example usage:
    >>> convert_markdown_to_html("## Extracted Fields\\n\\n**Note**: checked")
    '<h2>Extracted Fields</h2>\\n<p><strong>Note</strong>: checked</p>'
"""

import logging
import re

from markdown_it import MarkdownIt

logger = logging.getLogger(__name__)

_BLANK_RUNS = re.compile(r"\n{3,}")
_BETWEEN_TAGS = re.compile(r">\s+<")


class MarkdownConverter:
    """CommonMark renderer with pipe tables switched on.

    Covers the constructs ResultRenderer produces: headings, paragraphs with
    hard breaks, strong emphasis, rules and tables.
    """

    def __init__(self, allow_html: bool = False) -> None:
        self.md = MarkdownIt("commonmark", {"html": allow_html}).enable("table")

    def convert(self, markdown_content: str) -> str:
        """Render Markdown to an HTML fragment.

        Returns:
            The fragment with one block element per line, or "" for blank
            input.
        """
        if not markdown_content or not markdown_content.strip():
            return ""

        fragment = self.md.render(markdown_content)
        fragment = _BLANK_RUNS.sub("\n\n", fragment)
        return _BETWEEN_TAGS.sub(">\n<", fragment).strip()


_converter: MarkdownConverter | None = None


def convert_markdown_to_html(markdown_content: str) -> str:
    """Convert Markdown with a shared, lazily built converter."""
    global _converter

    if _converter is None:
        logger.debug("Building shared Markdown converter")
        _converter = MarkdownConverter()
    return _converter.convert(markdown_content)
