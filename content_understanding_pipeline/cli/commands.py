"""Command implementations for the Content Understanding Pipeline CLI.

Each command takes the validated configuration, a logger and the collaborators
it needs, and returns a process exit code:

- 0: success
- 1: partial failure (some documents failed)
- 2: complete failure
- 3: configuration or fatal error (returned by main.py)
"""

import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from tabulate import tabulate

from ..clients.analysis_client import AnalysisClient
from ..clients.content_understanding_client import ContentUnderstandingClient
from ..clients.exceptions import APIError, ContentUnderstandingError
from ..domain.config import AppConfig, ConfigError
from ..domain.field_extractor import extract_named_fields
from ..domain.models import BatchReport, OperationStatus
from ..orchestration.batch import BatchOrchestrator
from ..orchestration.exporter import ResultExporter
from ..utils.documents import (
    list_supported_documents,
    operation_id_from_handle,
)
from ..utils.logging import (
    _format_with_emoji,
    _supports_unicode,
    get_error_suggestion,
    log_batch_report,
    log_export,
    log_field_summary,
    log_timing_summary,
)


def _determine_exit_code(report: BatchReport) -> int:
    """Map a batch report onto an exit code.

    Returns:
        0 if every document succeeded (or there were none), 1 for partial
        failure, 2 if every document failed.
    """
    if report.failed_count == 0:
        return 0
    if report.succeeded_count > 0:
        return 1  # Partial failure
    return 2  # Complete failure


def _resolve_input(cfg: AppConfig, value: str) -> Path:
    """Resolve a document or directory argument against batch.input_dir."""
    path = Path(value)
    if path.is_absolute() or path.exists():
        return path
    return Path(cfg.batch.input_dir) / path


def _analyze_one(
    cfg: AppConfig,
    logger: logging.Logger,
    orchestrator: BatchOrchestrator,
    profile: str,
    label: str,
) -> int:
    document = _resolve_input(cfg, cfg.run.document)
    logger.info(f"{label} {document.name} with '{profile}'")

    row = orchestrator.process_document(document, profile)
    if row.succeeded:
        logger.info(
            _format_with_emoji(
                f"{label} completed in {row.duration_ms / 1000:.1f}s", "✅", "[DONE]"
            )
        )
        return 0

    logger.error(_format_with_emoji(f"{label} failed: {row.error}", "❌", "[ERROR]"))
    if row.operation_id:
        logger.info(
            f"Operation id: {row.operation_id} "
            "(check it later with run.command=check-operation)"
        )
    return 2


def _analyze_directory(
    cfg: AppConfig, logger: logging.Logger, orchestrator: BatchOrchestrator, profile: str
) -> int:
    directory = _resolve_input(cfg, cfg.run.directory)
    try:
        documents = list_supported_documents(directory, cfg.batch.supported_extensions)
    except FileNotFoundError as e:
        raise ConfigError(str(e)) from e

    if not documents:
        logger.warning(f"No supported documents found in {directory}")
        return 0

    report = orchestrator.run(documents, profile, directory.name)

    log_batch_report(logger, report)
    log_timing_summary(logger, report.total_time)
    return _determine_exit_code(report)


def analyze_command(
    cfg: AppConfig, logger: logging.Logger, orchestrator: BatchOrchestrator
) -> int:
    """Analyze a single document.

    Returns:
        Exit code: 0 on success, 2 on failure
    """
    return _analyze_one(cfg, logger, orchestrator, cfg.run.analyzer, "Analysis")


def batch_command(
    cfg: AppConfig, logger: logging.Logger, orchestrator: BatchOrchestrator
) -> int:
    """Analyze every supported document in a directory.

    Returns:
        Exit code: 0 for success, 1 for partial failure, 2 for complete failure
    """
    return _analyze_directory(cfg, logger, orchestrator, cfg.run.analyzer)


def classify_command(
    cfg: AppConfig, logger: logging.Logger, orchestrator: BatchOrchestrator
) -> int:
    """Classify a single document.

    The orchestrator must be built around a ClassifierClient.

    Returns:
        Exit code: 0 on success, 2 on failure
    """
    return _analyze_one(cfg, logger, orchestrator, cfg.run.classifier, "Classification")


def classify_directory_command(
    cfg: AppConfig, logger: logging.Logger, orchestrator: BatchOrchestrator
) -> int:
    """Classify every supported document in a directory as one batch.

    Returns:
        Exit code: 0 for success, 1 for partial failure, 2 for complete failure
    """
    return _analyze_directory(cfg, logger, orchestrator, cfg.run.classifier)


def check_operation_command(
    cfg: AppConfig,
    logger: logging.Logger,
    client: AnalysisClient,
    exporter: ResultExporter,
) -> int:
    """Fetch an operation once and export it if it has succeeded.

    Pass a ClassifierClient to resolve bare ids as classifier results.

    Returns:
        Exit code: 0 if the operation succeeded or is still in progress,
        2 if it failed
    """
    handle = cfg.run.operation_id.strip()
    operation_id = operation_id_from_handle(handle) or handle
    operation = client.fetch_status(handle)
    status = operation.status

    logger.info(f"Operation {operation_id} status: {operation.status_text or status.value}")

    if status is OperationStatus.SUCCEEDED:
        paths = exporter.export(
            operation.payload, cfg.output.output_dir, operation_id=operation_id
        )
        log_export(logger, paths.json_path, paths.formatted_path)
        log_field_summary(
            logger, extract_named_fields(operation.payload, cfg.output.fields_path)
        )
        return 0

    if status is OperationStatus.FAILED:
        message = (
            f"Operation failed. Code: {operation.failure_code}, "
            f"Message: {operation.failure_message}"
        )
        logger.error(_format_with_emoji(message, "❌", "[ERROR]"))
        return 2

    logger.info("The operation is still in progress. Check again in a few moments.")
    return 0


def _log_definitions(
    logger: logging.Logger,
    definitions: list[dict[str, Any]],
    id_key: str,
    label: str,
) -> None:
    table_data = [
        [
            definition.get(id_key, ""),
            definition.get("status", ""),
            (definition.get("description") or "")[:60],
        ]
        for definition in definitions
        if isinstance(definition, dict)
    ]
    tablefmt = "grid" if _supports_unicode() else "simple"
    logger.info(
        _format_with_emoji(
            f"{len(table_data)} {label.lower()}s", "📋", f"[{label.upper()}S]"
        )
    )
    logger.info(
        tabulate(table_data, headers=[label, "Status", "Description"], tablefmt=tablefmt)
    )


def _log_definition(
    logger: logging.Logger, definition: dict[str, Any] | None, name: str, label: str
) -> int:
    if definition is None:
        logger.error(_format_with_emoji(f"{label} '{name}' not found", "❌", "[ERROR]"))
        return 2
    logger.info(json.dumps(definition, indent=2, ensure_ascii=False))
    return 0


def list_analyzers_command(
    cfg: AppConfig, logger: logging.Logger, client: ContentUnderstandingClient
) -> int:
    """List the analyzers available on the resource.

    With run.analyzer set, shows that analyzer's full definition instead.

    Returns:
        Exit code: 0, or 2 if the named analyzer doesn't exist
    """
    if cfg.run.analyzer:
        return _log_definition(
            logger, client.get_analyzer(cfg.run.analyzer), cfg.run.analyzer, "Analyzer"
        )

    analyzers = client.list_analyzers()
    if not analyzers:
        logger.info("No analyzers found")
        return 0
    _log_definitions(logger, analyzers, "analyzerId", "Analyzer")
    return 0


def list_classifiers_command(
    cfg: AppConfig, logger: logging.Logger, client: ContentUnderstandingClient
) -> int:
    """List the classifiers, or show one definition when run.classifier is set.

    Returns:
        Exit code: 0, or 2 if the named classifier doesn't exist
    """
    if cfg.run.classifier:
        return _log_definition(
            logger,
            client.get_classifier(cfg.run.classifier),
            cfg.run.classifier,
            "Classifier",
        )

    classifiers = client.list_classifiers()
    if not classifiers:
        logger.info("No classifiers found")
        return 0
    _log_definitions(logger, classifiers, "classifierId", "Classifier")
    return 0


def _load_definition(path: Path, label: str) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            definition = json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"{label} definition not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"{label} definition is not valid JSON: {path}: {e}") from e

    if not isinstance(definition, dict):
        raise ConfigError(f"{label} definition must be a JSON object: {path}")
    return definition


def _create_definition(
    logger: logging.Logger,
    label: str,
    name: str,
    definition: dict[str, Any],
    overwrite: bool,
    create: Callable[[str, dict[str, Any]], dict[str, Any]],
    delete: Callable[[str], bool],
) -> int:
    try:
        response = create(name, definition)
    except APIError as e:
        if e.status_code != 409:
            raise
        if not overwrite:
            logger.error(
                _format_with_emoji(
                    f"{label} '{name}' already exists. "
                    "Set run.overwrite=true to replace it.",
                    "❌",
                    "[ERROR]",
                )
            )
            return 2

        logger.warning(f"{label} '{name}' already exists; deleting and recreating it")
        try:
            delete(name)
        except ContentUnderstandingError as delete_error:
            logger.warning(f"Could not delete {label.lower()} '{name}': {delete_error}")
        response = create(name, definition)

    logger.info(_format_with_emoji(f"{label} '{name}' created or updated", "✅", "[DONE]"))
    if response.get("operationLocation"):
        logger.info(f"Operation-Location: {response['operationLocation']}")
    return 0


def create_analyzer_command(
    cfg: AppConfig, logger: logging.Logger, client: ContentUnderstandingClient
) -> int:
    """Create or update an analyzer from a JSON definition file.

    On a 409 conflict the command fails unless run.overwrite is set, in
    which case the existing analyzer is deleted and created again.

    Returns:
        Exit code: 0 on success, 2 if the analyzer exists and overwrite is off

    Raises:
        ConfigError: If the file is missing, not valid JSON, or not a JSON
            object.
    """
    definition = _load_definition(Path(cfg.run.analyzer_file), "Analyzer")
    return _create_definition(
        logger,
        "Analyzer",
        cfg.run.analyzer,
        definition,
        cfg.run.overwrite,
        client.create_or_update_analyzer,
        client.delete_analyzer,
    )


def create_classifier_command(
    cfg: AppConfig, logger: logging.Logger, client: ContentUnderstandingClient
) -> int:
    """Create or update a classifier from a JSON definition file.

    Same conflict handling as create_analyzer_command.
    """
    definition = _load_definition(Path(cfg.run.classifier_file), "Classifier")
    return _create_definition(
        logger,
        "Classifier",
        cfg.run.classifier,
        definition,
        cfg.run.overwrite,
        client.create_or_update_classifier,
        client.delete_classifier,
    )


def describe_failure(error: Exception) -> str:
    """One-line description of a fatal error with a suggestion, if any."""
    suggestion = get_error_suggestion(str(error))
    return f"{error} ({suggestion})" if suggestion else str(error)
