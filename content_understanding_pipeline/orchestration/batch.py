"""
BatchOrchestrator runs documents through the analysis pipeline one at a time.

For every document: read the file → submit it to the analyzer → poll the
operation → export the structured and rendered results → log the extracted
fields. Documents are isolated from each other: a failure is recorded as a
Failed row and the run moves on. Only configuration problems
(``ConfigError``) abort the whole batch.

Example usage:
    >>> orchestrator = BatchOrchestrator(
    ...     client, poller, ResultExporter(), BatchSummaryWriter("./Output"), cfg
    ... )
    >>> report = orchestrator.run(paths, "invoice-analyzer", "Invoices")
    >>> print(f"{report.succeeded_count}/{len(report.rows)} succeeded")
"""

import logging
import threading
import time
from collections.abc import Callable
from pathlib import Path

from ..clients.analysis_client import AnalysisClient
from ..domain.config import AppConfig, ConfigError
from ..domain.field_extractor import extract_named_fields
from ..domain.models import BatchReport, BatchRow, ItemState
from ..utils.documents import (
    operation_id_from_handle,
    read_document,
)
from ..utils.logging import (
    log_error,
    log_export,
    log_field_summary,
    log_item_start,
)
from ..utils.progress import ProgressBar
from .exporter import ResultExporter
from .poller import OperationPoller
from .summary_writer import BatchSummaryWriter


class BatchOrchestrator:
    """Processes a list of documents sequentially with per-document isolation.

    Attributes:
        client: Analysis service client used to submit documents.
        poller: Poller that waits for each operation.
        exporter: Writes the per-document artifacts.
        summary_writer: Writes the batch summary file.
        config: Application configuration (output directory, fields path).
        document_loader: ``loader(path) -> (bytes, content_type)``.
        cancel_event: When set, documents not yet started are recorded as
            Failed without being submitted.
    """

    def __init__(
        self,
        client: AnalysisClient | None,
        poller: OperationPoller,
        exporter: ResultExporter,
        summary_writer: BatchSummaryWriter,
        config: AppConfig,
        document_loader: Callable[[Path], tuple[bytes, str]] = read_document,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self.client = client
        self.poller = poller
        self.exporter = exporter
        self.summary_writer = summary_writer
        self.config = config
        self.document_loader = document_loader
        self.cancel_event = cancel_event
        self.logger = logging.getLogger(__name__)

    def run(
        self, documents: list[str | Path], analyzer: str, collection_id: str
    ) -> BatchReport:
        """Process every document in order and write the batch summary.

        Args:
            documents: Document paths, processed in the given order.
            analyzer: Analyzer applied to every document.
            collection_id: Batch name used in the summary file name.

        Returns:
            BatchReport with exactly one row per input document.

        Raises:
            ConfigError: If no client is configured, or a configuration
                problem surfaces while processing a document.
        """
        if self.client is None:
            raise ConfigError("No analysis client configured")

        start_time = time.perf_counter()
        rows: list[BatchRow] = []
        total = len(documents)

        self.logger.info(f"Processing {total} documents with analyzer '{analyzer}'")

        with ProgressBar(total=total, desc="Analyzing", unit="doc", disable=total == 0) as pbar:
            for index, document in enumerate(documents, start=1):
                path = Path(document)
                if self.cancel_event is not None and self.cancel_event.is_set():
                    row = BatchRow(
                        file=path.name,
                        status=ItemState.FAILED.value,
                        duration_ms=0,
                        error="Cancelled before processing",
                    )
                else:
                    log_item_start(self.logger, path.name, index, total)
                    row = self.process_document(path, analyzer)
                rows.append(row)
                pbar.advance(row.succeeded)

        summary_path = self.summary_writer.write(collection_id, analyzer, rows)
        return BatchReport(
            analyzer=analyzer,
            rows=rows,
            total_time=time.perf_counter() - start_time,
            summary_path=summary_path,
        )

    def process_document(self, path: str | Path, analyzer: str) -> BatchRow:
        """Run one document through submit → poll → export.

        Any failure other than ConfigError is captured in the returned row.

        Args:
            path: Document path.
            analyzer: Analyzer name.

        Returns:
            A Succeeded row with both artifact paths, or a Failed row with
            the error message (and the operation id, if one was obtained).

        Raises:
            ConfigError: For configuration problems, which affect every
                document alike.
        """
        if self.client is None:
            raise ConfigError("No analysis client configured")

        path = Path(path)
        state = ItemState.NOT_STARTED
        operation_id: str | None = None
        started = time.perf_counter()

        def elapsed_ms() -> int:
            return int((time.perf_counter() - started) * 1000)

        try:
            document_bytes, content_type = self.document_loader(path)

            handle = self.client.submit(document_bytes, content_type, analyzer)
            state = ItemState.SUBMITTED
            operation_id = operation_id_from_handle(handle)
            self.logger.info(f"Submitted {path.name} (operation {operation_id})")

            state = ItemState.POLLING
            operation = self.poller.poll(handle)

            paths = self.exporter.export(
                operation.payload,
                self.config.output.output_dir,
                document_name=path.name,
                operation_id=operation_id,
            )
            log_export(self.logger, paths.json_path, paths.formatted_path)
            log_field_summary(
                self.logger,
                extract_named_fields(operation.payload, self.config.output.fields_path),
            )

            state = ItemState.SUCCEEDED
            return BatchRow(
                file=path.name,
                status=ItemState.SUCCEEDED.value,
                duration_ms=elapsed_ms(),
                operation_id=operation_id,
                json_path=paths.json_path,
                formatted_path=paths.formatted_path,
            )
        except ConfigError:
            raise
        except Exception as e:
            log_error(
                self.logger,
                e,
                {"document": path.name, "operation_id": operation_id, "step": state.value},
            )
            return BatchRow(
                file=path.name,
                status=ItemState.FAILED.value,
                duration_ms=elapsed_ms(),
                operation_id=operation_id,
                error=str(e) or type(e).__name__,
            )
