"""Domain models and configuration schemas

This module provides the domain layer for the Content Understanding Pipeline,
including type-safe configuration schemas, operation and batch models, the
tagged field-value model and result rendering.
"""

from .config import (
    AppConfig,
    BatchConfig,
    ConfigError,
    OutputConfig,
    PollingConfig,
    RetryConfig,
    RunConfig,
    ServiceConfig,
    register_configs,
)
from .field_extractor import extract_field_value, extract_named_fields
from .markdown_converter import MarkdownConverter, convert_markdown_to_html
from .models import (
    BatchReport,
    BatchRow,
    ExportPaths,
    ItemState,
    Operation,
    OperationStatus,
    PollFailed,
    PollSucceeded,
    PollTimedOut,
)
from .result_renderer import ResultRenderer
from .tagged_value import classify

__all__ = [
    "ServiceConfig",
    "PollingConfig",
    "RetryConfig",
    "OutputConfig",
    "BatchConfig",
    "RunConfig",
    "AppConfig",
    "register_configs",
    "ConfigError",
    "Operation",
    "OperationStatus",
    "PollSucceeded",
    "PollFailed",
    "PollTimedOut",
    "ExportPaths",
    "ItemState",
    "BatchRow",
    "BatchReport",
    "classify",
    "extract_field_value",
    "extract_named_fields",
    "ResultRenderer",
    "convert_markdown_to_html",
    "MarkdownConverter",
]
