"""
Export of analysis results to disk.

Each successful operation produces two files in the output directory:

- ``{base}_results.json``: the full operation payload, verbatim, indented.
- ``{base}_formatted.html``: the rendered view of the extracted fields.

``base`` is ``{document}_{operation}_{YYYYMMDD_HHMMSS}``, or
``{document}_{YYYYMMDD_HHMMSS}`` when no operation id is known.
"""

import json
import logging
import re
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any

from ..domain.models import ExportPaths
from ..domain.result_renderer import ResultRenderer

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
DEFAULT_DOCUMENT_TOKEN = "operation"

# Characters not allowed in file names on common platforms, plus control chars
_ILLEGAL_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def sanitize_filename(name: str, replacement: str = "-") -> str:
    """Replace characters that are not valid in file names."""
    return _ILLEGAL_FILENAME_CHARS.sub(replacement, name)


def document_token(document_name: str | None) -> str:
    """File-name token for a document: its base name without extension."""
    if not document_name or not document_name.strip():
        return DEFAULT_DOCUMENT_TOKEN
    stem = Path(document_name.strip()).stem.strip()
    return sanitize_filename(stem) if stem else DEFAULT_DOCUMENT_TOKEN


def operation_token(operation_id: str | None) -> str | None:
    """File-name token for an operation id: query string dropped, cut at
    the first underscore."""
    if not operation_id or not operation_id.strip():
        return None
    token = operation_id.strip().split("?", 1)[0].split("_", 1)[0]
    return sanitize_filename(token) or None


class ResultExporter:
    """Writes the structured and rendered artifacts for an operation.

    Args:
        renderer: Renderer for the formatted view.
        clock: Returns the current local time; used for file names and the
            "Processed" header line.
    """

    def __init__(
        self,
        renderer: ResultRenderer | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.renderer = renderer or ResultRenderer()
        self.clock = clock

    def base_name(
        self,
        document_name: str | None,
        operation_id: str | None,
        timestamp: datetime,
    ) -> str:
        """Build the shared base name of the two artifacts."""
        parts = [document_token(document_name)]
        op = operation_token(operation_id)
        if op:
            parts.append(op)
        parts.append(timestamp.strftime(TIMESTAMP_FORMAT))
        return "_".join(parts)

    def export(
        self,
        payload: dict[str, Any],
        output_dir: str | Path,
        document_name: str | None = None,
        operation_id: str | None = None,
    ) -> ExportPaths:
        """Write both artifacts for a payload.

        The structured file is written first, so it exists even if the
        rendered view can't be written.

        Args:
            payload: Full operation payload.
            output_dir: Destination directory, created if absent.
            document_name: Source document name, used in the file names.
            operation_id: Operation id, used in the file names.

        Returns:
            Paths of the two files.

        Raises:
            OSError: If a file can't be written.
            TypeError: If the payload is not JSON-serializable.
        """
        output_path = Path(output_dir)
        output_path.mkdir(parents=True, exist_ok=True)

        timestamp = self.clock()
        base = self.base_name(document_name, operation_id, timestamp)
        json_path = output_path / f"{base}_results.json"
        formatted_path = output_path / f"{base}_formatted.html"

        with open(json_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
        logger.debug(f"Wrote structured results to {json_path}")

        rendered = self.renderer.render_html(
            payload,
            document_name=document_name,
            operation_id=operation_id,
            processed_at=timestamp.strftime("%Y-%m-%d %H:%M:%S"),
        )
        formatted_path.write_text(rendered, encoding="utf-8")
        logger.debug(f"Wrote formatted results to {formatted_path}")

        return ExportPaths(json_path=str(json_path), formatted_path=str(formatted_path))
