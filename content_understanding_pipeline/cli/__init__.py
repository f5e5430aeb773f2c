"""Command-line interface components for the Content Understanding Pipeline.

Commands are called from the main entry point after configuration
validation and client initialization.
"""

from .commands import (
    analyze_command,
    batch_command,
    check_operation_command,
    classify_command,
    classify_directory_command,
    create_analyzer_command,
    create_classifier_command,
    list_analyzers_command,
    list_classifiers_command,
)

__all__ = [
    "analyze_command",
    "batch_command",
    "check_operation_command",
    "classify_command",
    "classify_directory_command",
    "create_analyzer_command",
    "create_classifier_command",
    "list_analyzers_command",
    "list_classifiers_command",
]
