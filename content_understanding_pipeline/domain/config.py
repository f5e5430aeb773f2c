"""
Configuration dataclasses for the Content Understanding Pipeline.

This module defines type-safe configuration schemas using Python dataclasses.
These schemas are registered with Hydra to enable validation and IDE autocomplete
support for configuration values.
"""

from dataclasses import dataclass, field

from hydra.core.config_store import ConfigStore


class ConfigError(Exception):
    """Configuration error for the Content Understanding Pipeline.

    Raised when configuration values are invalid or inconsistent, or when a
    required collaborator (such as the analysis client) is not available.
    Errors of this type abort a whole batch instead of being recorded against
    a single document.
    """


@dataclass
class ServiceConfig:
    """Configuration for the remote Content Understanding service.

    Contains the endpoint and credentials used by the HTTP client. The API key
    is normally injected from the environment through the YAML config.
    """

    endpoint: str = ""
    """Service endpoint, e.g. https://<resource>.services.ai.azure.com"""

    api_key: str = ""
    """Subscription key sent as the Ocp-Apim-Subscription-Key header."""

    api_version: str = "2025-05-01-preview"
    """API version appended to every service URL as the api-version query."""

    request_timeout: int = 300
    """Timeout in seconds for a single HTTP request. Document submission can
    take a while for large files."""

    def __post_init__(self) -> None:
        """Validate request settings."""
        if self.request_timeout <= 0:
            raise ConfigError("request_timeout must be greater than 0")
        if not self.api_version or not self.api_version.strip():
            raise ConfigError("api_version is required and cannot be empty")


@dataclass
class PollingConfig:
    """Configuration for waiting on long-running analysis operations.

    The poller fetches the operation status every ``interval_seconds`` until
    a terminal state is observed or ``timeout_seconds`` elapse. With a
    ``backoff_multiplier`` above 1.0 the interval grows on each attempt up to
    ``max_interval_seconds``.
    """

    timeout_seconds: float = 1200
    """Hard wall-clock limit for a single poll. Default 20 minutes."""

    interval_seconds: float = 5
    """Delay between status fetches."""

    backoff_multiplier: float = 1.0
    """Growth factor for the interval. 1.0 keeps the interval fixed."""

    max_interval_seconds: float = 30
    """Upper bound for the interval when backoff is enabled."""

    def __post_init__(self) -> None:
        """Validate polling parameters."""
        if self.timeout_seconds <= 0:
            raise ConfigError("timeout_seconds must be greater than 0")
        if self.interval_seconds <= 0:
            raise ConfigError("interval_seconds must be greater than 0")
        if self.backoff_multiplier < 1.0:
            raise ConfigError("backoff_multiplier must be at least 1.0")
        if self.max_interval_seconds < self.interval_seconds:
            raise ConfigError(
                "max_interval_seconds must be greater than or equal to "
                "interval_seconds"
            )


@dataclass
class RetryConfig:
    """Configuration for retry behavior with exponential backoff."""

    max_attempts: int = 3
    """Maximum number of attempts before giving up."""

    initial_delay: int = 2
    """Initial delay in seconds before first retry."""

    backoff_multiplier: float = 2.0
    """Multiplier for exponential backoff. Delay doubles by default on each retry."""

    max_delay: int = 16
    """Maximum delay cap in seconds to prevent excessively long waits."""

    def __post_init__(self) -> None:
        """Validate retry configuration parameters."""
        if self.max_attempts <= 0:
            raise ConfigError("max_attempts must be greater than 0")
        if self.initial_delay <= 0:
            raise ConfigError("initial_delay must be greater than 0")
        if self.backoff_multiplier <= 0:
            raise ConfigError("backoff_multiplier must be greater than 0")
        if self.max_delay <= 0:
            raise ConfigError("max_delay must be greater than 0")
        if self.max_delay < self.initial_delay:
            raise ConfigError(
                "max_delay must be greater than or equal to initial_delay"
            )


@dataclass
class OutputConfig:
    """Configuration for exported artifacts."""

    output_dir: str = "./Output"
    """Directory receiving *_results.json, *_formatted.html and batch
    summaries. Created automatically if it doesn't exist."""

    fields_path: str = "result.contents.0.fields"
    """Dotted path to the named-fields collection inside a successful
    operation payload. Numeric segments index into arrays. The layout is
    owned by the remote service, so it is kept configurable."""

    def __post_init__(self) -> None:
        """Validate output settings."""
        if not self.output_dir or not self.output_dir.strip():
            raise ConfigError("output_dir is required and cannot be empty")
        if not self.fields_path or not self.fields_path.strip():
            raise ConfigError("fields_path is required and cannot be empty")


@dataclass
class BatchConfig:
    """Configuration for directory batch runs."""

    input_dir: str = "./Data/SampleDocuments"
    """Base directory that batch and single-document paths are resolved
    against when they are not absolute."""

    supported_extensions: list[str] = field(
        default_factory=lambda: [".pdf", ".png", ".jpg", ".jpeg", ".tif", ".tiff", ".bmp"]
    )
    """File extensions picked up by a directory batch run (case-insensitive)."""


@dataclass
class RunConfig:
    """Selects the command to run and its arguments."""

    command: str = "batch"
    """One of: analyze, batch, check-operation, analyzers, create-analyzer,
    classifiers, create-classifier, classify, classify-dir."""

    analyzer: str = ""
    """Analyzer (processing profile) name."""

    document: str = ""
    """Document for the analyze command, relative to batch.input_dir or absolute."""

    directory: str = ""
    """Subdirectory of batch.input_dir for the batch command."""

    operation_id: str = ""
    """Operation id or operation location for check-operation."""

    analyzer_file: str = ""
    """Analyzer definition JSON file for create-analyzer."""

    classifier: str = ""
    """Classifier name for classify, classify-dir and create-classifier.

    Also makes check-operation resolve bare ids as classifier results."""

    classifier_file: str = ""
    """Classifier definition JSON file for create-classifier."""

    overwrite: bool = False
    """Delete and recreate an existing analyzer or classifier on a 409 conflict."""


COMMANDS = (
    "analyze",
    "batch",
    "check-operation",
    "analyzers",
    "create-analyzer",
    "classifiers",
    "create-classifier",
    "classify",
    "classify-dir",
)


@dataclass
class AppConfig:
    """Top-level application configuration.

    Combines all configuration groups into a single type-safe configuration
    object built from the Hydra DictConfig in main.py.
    """

    service: ServiceConfig = field(default_factory=ServiceConfig)
    """Remote service configuration."""

    polling: PollingConfig = field(default_factory=PollingConfig)
    """Operation polling configuration."""

    retry: RetryConfig = field(default_factory=RetryConfig)
    """Submit retry configuration."""

    output: OutputConfig = field(default_factory=OutputConfig)
    """Artifact output configuration."""

    batch: BatchConfig = field(default_factory=BatchConfig)
    """Batch input configuration."""

    run: RunConfig = field(default_factory=RunConfig)
    """Command selection."""


def validate_run_config(cfg: AppConfig) -> None:
    """Validate that the selected command has what it needs.

    Args:
        cfg: Application configuration object

    Raises:
        ConfigError: If the command is unknown or required arguments or
            service settings are missing.
    """
    command = cfg.run.command
    if command not in COMMANDS:
        raise ConfigError(
            f"Unknown command '{command}'. Choose one of: {', '.join(COMMANDS)}"
        )

    if not cfg.service.endpoint or not cfg.service.endpoint.strip():
        raise ConfigError(
            "service.endpoint is required. Set service.endpoint=https://... "
            "or the CONTENT_UNDERSTANDING_ENDPOINT environment variable."
        )
    if not cfg.service.api_key or not cfg.service.api_key.strip():
        raise ConfigError(
            "service.api_key is required. Set the "
            "CONTENT_UNDERSTANDING_API_KEY environment variable."
        )

    required: dict[str, tuple[str, ...]] = {
        "analyze": ("analyzer", "document"),
        "batch": ("analyzer", "directory"),
        "check-operation": ("operation_id",),
        "create-analyzer": ("analyzer", "analyzer_file"),
        "classify": ("classifier", "document"),
        "classify-dir": ("classifier", "directory"),
        "create-classifier": ("classifier", "classifier_file"),
    }
    for name in required.get(command, ()):
        value = getattr(cfg.run, name)
        if not value or not str(value).strip():
            raise ConfigError(f"Command '{command}' requires run.{name}=<value>")


def register_configs() -> None:
    """Register structured configs with Hydra.

    This function must be called before Hydra initializes to enable type-safe
    configuration validation and IDE autocomplete support.
    """
    cs = ConfigStore.instance()

    cs.store(group="service", name="default", node=ServiceConfig)
    cs.store(group="polling", name="default", node=PollingConfig)
    cs.store(group="retry", name="default", node=RetryConfig)
    cs.store(group="output", name="default", node=OutputConfig)
    cs.store(group="batch", name="default", node=BatchConfig)
    cs.store(group="run", name="default", node=RunConfig)

    # Register top-level config schema; conf/config.yaml extends it
    cs.store(name="base_config", node=AppConfig)
