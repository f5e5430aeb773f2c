"""Writes the JSON summary file of a batch run."""

import json
import logging
import re
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from ..domain.models import BatchRow

logger = logging.getLogger(__name__)

_UNSAFE_TOKEN_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f\s]')


def _token(value: str | None, default: str) -> str:
    token = _UNSAFE_TOKEN_CHARS.sub("_", (value or "").strip())
    return token or default


class BatchSummaryWriter:
    """Writes ``{collection}_{analyzer}_{YYYYMMDD_HHMMSS}_summary.json``.

    The file holds the run metadata and one entry per batch row. Writing is
    best effort: any failure is logged and reported by returning None, so a
    batch never fails because of its summary.
    """

    def __init__(
        self, output_dir: str | Path, clock: Callable[[], datetime] = datetime.now
    ) -> None:
        self.output_dir = Path(output_dir)
        self.clock = clock

    def write(
        self, collection_id: str, analyzer: str, rows: list[BatchRow]
    ) -> str | None:
        """Write the summary file.

        Args:
            collection_id: Name of the batch (usually the input directory).
            analyzer: Analyzer used for the run.
            rows: Batch rows in input order.

        Returns:
            Path of the written file, or None if it couldn't be written.
        """
        try:
            timestamp = self.clock()
            name = (
                f"{_token(collection_id, 'batch')}_{_token(analyzer, 'analyzer')}_"
                f"{timestamp.strftime('%Y%m%d_%H%M%S')}_summary.json"
            )
            summary = {
                "collection": collection_id,
                "analyzer": analyzer,
                "generated_at": timestamp.isoformat(timespec="seconds"),
                "total": len(rows),
                "succeeded": sum(1 for row in rows if row.succeeded),
                "failed": sum(1 for row in rows if not row.succeeded),
                "results": [row.to_dict() for row in rows],
            }

            self.output_dir.mkdir(parents=True, exist_ok=True)
            path = self.output_dir / name
            with open(path, "w", encoding="utf-8") as f:
                json.dump(summary, f, indent=2, ensure_ascii=False)
        except Exception as e:
            logger.error(f"Failed to write batch summary: {e}")
            return None

        logger.debug(f"Wrote batch summary to {path}")
        return str(path)
