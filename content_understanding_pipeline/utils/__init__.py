"""Utility functions and helpers for the Content Understanding Pipeline.

This package provides logging, progress tracking, retry and document file
utilities. Logging helpers integrate with Hydra's logging configuration and
support unicode/emoji for user-friendly terminal output.
"""

from .documents import (
    content_type_for,
    list_supported_documents,
    operation_id_from_handle,
    read_document,
)
from .logging import log_error, log_item_start
from .progress import ProgressBar
from .retry import retry_with_backoff

__all__ = [
    "content_type_for",
    "list_supported_documents",
    "operation_id_from_handle",
    "read_document",
    "log_item_start",
    "log_error",
    "ProgressBar",
    "retry_with_backoff",
]
