"""Pipeline orchestration and workflow coordination"""

from .batch import BatchOrchestrator
from .exporter import ResultExporter
from .poller import OperationPoller
from .summary_writer import (
    BatchSummaryWriter,
)

__all__ = ["BatchOrchestrator", "ResultExporter", "OperationPoller", "BatchSummaryWriter"]
