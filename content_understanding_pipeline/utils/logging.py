"""Logging utilities for the Content Understanding Pipeline.

This module provides structured logging functions that integrate with Hydra's
logging system and support unicode/emoji for user-friendly terminal output.
Set ``FORCE_ASCII=1`` to get plain ASCII markers instead of emoji.
"""

import logging
import os
import sys

from tabulate import tabulate

from ..domain.models import BatchReport, BatchRow


def _supports_unicode() -> bool:
    """Detect if terminal supports unicode/emoji.

    Returns:
        True if terminal supports unicode, False otherwise
    """
    # Check for explicit ASCII-only mode
    if os.environ.get("FORCE_ASCII") == "1":
        return False

    encoding = getattr(sys.stdout, "encoding", None)
    if encoding is None:
        return False

    unicode_encodings = {"utf-8", "utf-16", "utf-32", "utf-8-sig"}
    return encoding.lower() in unicode_encodings


def _format_with_emoji(message: str, emoji: str, fallback: str) -> str:
    """Format message with emoji or fallback text.

    Args:
        message: The message text to format
        emoji: Unicode emoji character to prepend
        fallback: ASCII fallback text to use if unicode not supported

    Returns:
        Formatted message with emoji or fallback
    """
    if _supports_unicode():
        return f"{emoji} {message}"
    return f"{fallback} {message}"


def log_startup(logger: logging.Logger, message: str) -> None:
    """Log pipeline startup message.

    Example:
        >>> log_startup(logger, "Starting Content Understanding Pipeline")
        # Output: "🚀 Starting Content Understanding Pipeline" or
        # "[START] Starting Content Understanding Pipeline"
    """
    logger.info(_format_with_emoji(message, "🚀", "[START]"))


def log_item_start(
    logger: logging.Logger, document_name: str, item_number: int, total_items: int
) -> None:
    """Log the start of processing a document.

    Args:
        logger: Logger instance to use for logging
        document_name: File name of the document being processed
        item_number: Current item number (1-indexed)
        total_items: Total number of items to process

    Example:
        >>> log_item_start(logger, "invoice.pdf", 1, 10)
        # Output: "📄 Processing [1/10]: \"invoice.pdf\""
    """
    message = f'Processing [{item_number}/{total_items}]: "{document_name}"'
    logger.info(_format_with_emoji(message, "📄", "[*]"))


def log_operation_status(logger: logging.Logger, operation_id: str, status: str) -> None:
    """Log a non-terminal operation status seen while polling."""
    message = f"Operation {operation_id} status: {status or 'Unknown'}"
    logger.info(_format_with_emoji(message, "🔄", "[POLL]"))


def log_field_summary(
    logger: logging.Logger, fields: dict[str, str] | None, max_fields: int = 10
) -> None:
    """Log the extracted fields of a result as ``name: value`` lines.

    Args:
        logger: Logger instance to use for logging
        fields: Mapping of field name to display string, or None when the
            result has no named-fields collection
        max_fields: Maximum number of fields to list before summarising

    Example:
        >>> log_field_summary(logger, {"Total": "42.50"})
        # Output: "📋 Extracted 1 fields" then "   Total: 42.50"
    """
    if not fields:
        logger.info(_format_with_emoji("No fields extracted", "📋", "[FIELDS]"))
        return

    logger.info(_format_with_emoji(f"Extracted {len(fields)} fields", "📋", "[FIELDS]"))
    for index, (name, value) in enumerate(fields.items()):
        if index >= max_fields:
            logger.info(f"   ... and {len(fields) - max_fields} more")
            break
        # Long values are cut to keep the log readable
        shown = value if len(value) <= 80 else value[:77] + "..."
        logger.info(f"   {name}: {shown}")


def log_export(logger: logging.Logger, json_path: str, formatted_path: str) -> None:
    """Log the two artifacts written for one result.

    Example:
        >>> log_export(logger, "Output/a_results.json", "Output/a_formatted.html")
        # Output: "💾 Saved results: Output/a_results.json" and
        # "💾 Saved formatted view: Output/a_formatted.html"
    """
    logger.info(_format_with_emoji(f"Saved results: {json_path}", "💾", "[SAVE]"))
    logger.info(
        _format_with_emoji(f"Saved formatted view: {formatted_path}", "💾", "[SAVE]")
    )


def log_completion(logger: logging.Logger, message: str = "Pipeline completed") -> None:
    """Log pipeline completion.

    Example:
        >>> log_completion(logger)
        # Output: "✅ Pipeline completed" or "[DONE] Pipeline completed"
    """
    logger.info(_format_with_emoji(message, "✅", "[DONE]"))


def log_error(logger: logging.Logger, error: Exception, context: dict) -> None:
    """Log an error with structured context information.

    Formats a detailed error message including the exception details and
    relevant context (document, operation id, step) for debugging.

    Args:
        logger: Logger instance to use for logging
        error: Exception that was raised
        context: Dictionary containing context information such as:
            - document: File name of the document being processed
            - operation_id: Operation id, if one was obtained
            - step: Processing step where error occurred

    Example:
        >>> context = {"document": "a.pdf", "operation_id": "op-1", "step": "Polling"}
        >>> log_error(logger, ValueError("Invalid format"), context)
        # Output: "❌ Error processing \"a.pdf\" (op-1)\\n   Step: Polling\\n
        # Error: ValueError: Invalid format"
    """
    document = context.get("document", "Unknown")
    operation_id = context.get("operation_id") or "no operation"
    step = context.get("step", "Unknown")

    header = _format_with_emoji(
        f'Error processing "{document}" ({operation_id})', "❌", "[ERROR]"
    )
    message = (
        f"{header}\n   Step: {step}\n   Error: {type(error).__name__}: {error}"
    )
    suggestion = get_error_suggestion(str(error))
    if suggestion:
        message += f"\n   Suggestion: {suggestion}"

    logger.error(message)

    # Include full traceback only when in an active exception context
    if sys.exc_info()[0] is not None:
        logger.debug("Full traceback:", exc_info=True)


def _truncate(text: str | None, width: int) -> str:
    if not text:
        return ""
    return text if len(text) <= width else text[: width - 3] + "..."


def log_batch_summary_table(logger: logging.Logger, rows: list[BatchRow]) -> None:
    """Log a per-document summary table for a batch run.

    Args:
        logger: Logger instance to use for logging
        rows: Batch rows in input order
    """
    if not rows:
        logger.info("Summary: No documents were processed")
        return

    table_data = [
        [
            _truncate(row.file, 40),
            row.status,
            _truncate(row.operation_id, 24),
            f"{row.duration_ms / 1000:.1f}s",
            _truncate(row.error, 50),
        ]
        for row in rows
    ]

    # Choose table format based on unicode support
    tablefmt = "grid" if _supports_unicode() else "simple"
    headers = ["File", "Status", "Operation", "Time", "Error"]

    logger.info("")
    logger.info("Summary:")
    logger.info(tabulate(table_data, headers=headers, tablefmt=tablefmt))


def log_batch_report(logger: logging.Logger, report: BatchReport) -> None:
    """Log counts, the summary table and the summary file location."""
    log_batch_summary_table(logger, report.rows)

    logger.info("")
    logger.info(
        f"Processed {len(report.rows)} documents: "
        f"{report.succeeded_count} succeeded, {report.failed_count} failed"
    )
    if report.summary_path:
        logger.info(
            _format_with_emoji(f"Batch summary: {report.summary_path}", "💾", "[SAVE]")
        )
    else:
        logger.warning("Batch summary could not be written")


def log_timing_summary(logger: logging.Logger, total_time: float) -> None:
    """Log total execution time in a human-readable format.

    Example:
        >>> log_timing_summary(logger, 195.5)
        # Output: "⏱️ Total time: 3m 15s" or "[TIME] Total time: 3m 15s"
    """
    minutes = int(total_time // 60)
    seconds = int(total_time % 60)

    time_str = f"{minutes}m {seconds}s" if minutes > 0 else f"{seconds}s"
    logger.info("")
    logger.info(_format_with_emoji(f"Total time: {time_str}", "⏱️", "[TIME]"))


def get_error_suggestion(error_message: str) -> str:
    """Get actionable suggestion based on error message pattern.

    Args:
        error_message: Error message string to analyze

    Returns:
        Actionable suggestion string, or an empty string when no pattern
        matches.

    Example:
        >>> get_error_suggestion("Authentication failed: 401 Unauthorized")
        'Check CONTENT_UNDERSTANDING_API_KEY and the endpoint it belongs to'
    """
    error_lower = error_message.lower()

    if "authentication" in error_lower or "401" in error_lower or "403" in error_lower:
        return "Check CONTENT_UNDERSTANDING_API_KEY and the endpoint it belongs to"
    if "429" in error_lower or "rate limit" in error_lower:
        return "Wait a minute and retry, or process fewer documents at once"
    if "timed out" in error_lower:
        return (
            "The operation may still finish; check it later with "
            "run.command=check-operation"
        )
    if "not found" in error_lower or "404" in error_lower:
        return "Verify the analyzer name with run.command=analyzers"
    if (
        "connection" in error_lower
        or "network" in error_lower
        or "request failed" in error_lower
    ):
        return "Check network connectivity and service.endpoint"
    return ""
