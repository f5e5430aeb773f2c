"""Main entry point for the Content Understanding Pipeline.

Examples:
    python main.py run.command=analyze run.analyzer=invoice-analyzer \\
        run.document=invoice.pdf
    python main.py run.command=batch run.analyzer=invoice-analyzer \\
        run.directory=Invoices
    python main.py run.command=check-operation run.operation_id=<id>
    python main.py run.command=analyzers
    python main.py run.command=classify-dir run.classifier=doc-router \\
        run.directory=Mixed
"""

import logging
import signal
import sys
import threading

import hydra
from omegaconf import DictConfig, OmegaConf

from content_understanding_pipeline.cli.commands import (
    analyze_command,
    batch_command,
    check_operation_command,
    classify_command,
    classify_directory_command,
    create_analyzer_command,
    create_classifier_command,
    describe_failure,
    list_analyzers_command,
    list_classifiers_command,
)
from content_understanding_pipeline.clients.analysis_client import AnalysisClient
from content_understanding_pipeline.clients.content_understanding_client import (
    ClassifierClient,
    ContentUnderstandingClient,
)
from content_understanding_pipeline.clients.exceptions import ContentUnderstandingError
from content_understanding_pipeline.domain.config import (
    AppConfig,
    BatchConfig,
    ConfigError,
    OutputConfig,
    PollingConfig,
    RetryConfig,
    RunConfig,
    ServiceConfig,
    register_configs,
    validate_run_config,
)
from content_understanding_pipeline.domain.result_renderer import ResultRenderer
from content_understanding_pipeline.orchestration.batch import BatchOrchestrator
from content_understanding_pipeline.orchestration.exporter import ResultExporter
from content_understanding_pipeline.orchestration.poller import OperationPoller
from content_understanding_pipeline.orchestration.summary_writer import (
    BatchSummaryWriter,
)
from content_understanding_pipeline.utils.logging import (
    log_completion,
    log_startup,
)

# Structured configs must be in the ConfigStore before Hydra composes
# conf/config.yaml, which extends base_config
register_configs()


def build_app_config(cfg: DictConfig) -> AppConfig:
    """Convert the composed Hydra config into validated dataclasses.

    Raises:
        ConfigError: If any group fails validation.
    """
    container = OmegaConf.to_container(cfg, resolve=True)
    if not isinstance(container, dict):
        raise ConfigError("Configuration root must be a mapping")

    try:
        return AppConfig(
            service=ServiceConfig(**container.get("service", {})),
            polling=PollingConfig(**container.get("polling", {})),
            retry=RetryConfig(**container.get("retry", {})),
            output=OutputConfig(**container.get("output", {})),
            batch=BatchConfig(**container.get("batch", {})),
            run=RunConfig(**container.get("run", {})),
        )
    except TypeError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def run(app_cfg: AppConfig, logger: logging.Logger, cancel_event: threading.Event) -> int:
    """Build the collaborators and dispatch on run.command.

    Returns:
        Exit code from the selected command
    """
    validate_run_config(app_cfg)
    command = app_cfg.run.command

    client = ContentUnderstandingClient(app_cfg.service, app_cfg.retry)
    try:
        if command == "analyzers":
            return list_analyzers_command(app_cfg, logger, client)
        if command == "create-analyzer":
            return create_analyzer_command(app_cfg, logger, client)
        if command == "classifiers":
            return list_classifiers_command(app_cfg, logger, client)
        if command == "create-classifier":
            return create_classifier_command(app_cfg, logger, client)

        # Classification runs through the same poller and orchestrator
        analysis_client: AnalysisClient = client
        if command in ("classify", "classify-dir") or (
            command == "check-operation" and app_cfg.run.classifier
        ):
            analysis_client = ClassifierClient(client)

        exporter = ResultExporter(ResultRenderer(app_cfg.output.fields_path))
        if command == "check-operation":
            return check_operation_command(app_cfg, logger, analysis_client, exporter)

        poller = OperationPoller(
            analysis_client.fetch_status, app_cfg.polling, cancel_event=cancel_event
        )
        orchestrator = BatchOrchestrator(
            analysis_client,
            poller,
            exporter,
            BatchSummaryWriter(app_cfg.output.output_dir),
            app_cfg,
            cancel_event=cancel_event,
        )
        if command == "analyze":
            return analyze_command(app_cfg, logger, orchestrator)
        if command == "classify":
            return classify_command(app_cfg, logger, orchestrator)
        if command == "classify-dir":
            return classify_directory_command(app_cfg, logger, orchestrator)
        return batch_command(app_cfg, logger, orchestrator)
    finally:
        client.close()


@hydra.main(version_base=None, config_path="conf", config_name="config")
def main(cfg: DictConfig) -> None:
    """Main entry point for the pipeline.

    Exits with 0 for success, 1 for partial failure, 2 for complete failure
    and 3 for configuration or fatal errors.

    Args:
        cfg: Hydra configuration object
    """
    logger = logging.getLogger(__name__)
    cancel_event = threading.Event()

    def _request_cancel(signum, frame) -> None:
        if cancel_event.is_set():
            raise KeyboardInterrupt
        logger.warning("Cancellation requested; stopping after the current step")
        cancel_event.set()

    previous_handler = signal.signal(signal.SIGINT, _request_cancel)
    log_startup(logger, "Starting Content Understanding Pipeline")

    try:
        exit_code = run(build_app_config(cfg), logger, cancel_event)
        if exit_code == 0:
            log_completion(logger)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        exit_code = 3
    except ContentUnderstandingError as e:
        logger.error(f"Fatal error: {describe_failure(e)}")
        exit_code = 3
    except KeyboardInterrupt:
        logger.error("Interrupted")
        exit_code = 3
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        exit_code = 3
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
