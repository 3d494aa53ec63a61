"""
Loading of the engine configuration from a config directory.

Each YAML file is parsed separately and turned into its pydantic section
model, then the sections are combined into AppConfig so cross-file
references (stream -> index set) are validated in one place.

Files read:
    - config/indexer.yaml: Elasticsearch connection and index sets
    - config/alerts.yaml: Check interval, streams and alert conditions

Environment overrides:
    - ELASTICSEARCH_URL: Elasticsearch base URL
    - ALERT_CHECK_INTERVAL: Alert check interval in seconds
    - LOG_LEVEL: Application log level
    - LOG_FORMAT: Log output format (json, text)

Example:
    >>> from logalert.config.loader import load_config
    >>> config = load_config("config")
    >>> config.alerts.settings.alert_check_interval_seconds
    60
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import structlog
import yaml
from pydantic import ValidationError

from logalert.config.models import (
    AlertConditionConfig,
    AlertsConfig,
    AlertSettings,
    AppConfig,
    ElasticsearchConfig,
    IndexerConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
)
from logalert.models.indices import IndexSetConfig
from logalert.models.streams import Stream

logger = structlog.get_logger(__name__)


class ConfigLoadError(Exception):
    """
    Configuration could not be read, parsed or validated.

    Attributes:
        message: What went wrong.
        file_path: File (or directory) being loaded, if known.
        cause: Underlying exception, if any.
    """

    def __init__(
        self,
        message: str,
        file_path: Optional[Path] = None,
        cause: Optional[Exception] = None,
    ):
        self.message = message
        self.file_path = file_path
        self.cause = cause
        super().__init__(message)


class ConfigLoader:
    """
    Reads indexer.yaml and alerts.yaml from a directory into an AppConfig.

    Layout:
        config/
        ├── indexer.yaml  - Elasticsearch connection and index sets
        └── alerts.yaml   - Alert settings, streams and conditions

    Example:
        >>> loader = ConfigLoader("config")
        >>> config = loader.load()
    """

    def __init__(self, config_dir: Path | str = "config"):
        """
        Bind the loader to a config directory.

        Args:
            config_dir: Directory holding the YAML files.

        Raises:
            ConfigLoadError: If the directory is missing or not a directory.
        """
        self.config_dir = Path(config_dir)
        if not self.config_dir.exists():
            raise ConfigLoadError(
                f"Configuration directory not found: {self.config_dir}",
                file_path=self.config_dir,
            )
        if not self.config_dir.is_dir():
            raise ConfigLoadError(
                f"Configuration path is not a directory: {self.config_dir}",
                file_path=self.config_dir,
            )

    def _load_yaml(self, filename: str) -> Dict[str, Any]:
        """
        Parse one YAML file that must contain a mapping.

        Args:
            filename: Name of YAML file (e.g., 'alerts.yaml').

        Returns:
            The top-level mapping.

        Raises:
            ConfigLoadError: If file not found, empty, or invalid YAML.
        """
        file_path = self.config_dir / filename
        if not file_path.exists():
            raise ConfigLoadError(
                f"Configuration file not found: {file_path}",
                file_path=file_path,
            )

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
                if data is None:
                    raise ConfigLoadError(
                        f"Configuration file is empty: {file_path}",
                        file_path=file_path,
                    )
                if not isinstance(data, dict):
                    raise ConfigLoadError(
                        f"Configuration file must contain a mapping: {file_path}",
                        file_path=file_path,
                    )
                return data
        except yaml.YAMLError as e:
            raise ConfigLoadError(
                f"Invalid YAML syntax in {file_path}: {e}",
                file_path=file_path,
                cause=e,
            ) from e
        except OSError as e:
            raise ConfigLoadError(
                f"Error reading {file_path}: {e}",
                file_path=file_path,
                cause=e,
            ) from e

    def _load_indexer(self) -> IndexerConfig:
        """
        Load Elasticsearch and index set configuration from indexer.yaml.

        Environment variables:
            - ELASTICSEARCH_URL: Overrides elasticsearch.url

        Raises:
            ConfigLoadError: If validation fails or no index sets configured.
        """
        data = self._load_yaml("indexer.yaml")

        try:
            es_data = dict(data.get("elasticsearch") or {})
            es_url = os.getenv("ELASTICSEARCH_URL")
            if es_url:
                es_data["url"] = es_url

            index_sets = [
                IndexSetConfig(**index_set_data)
                for index_set_data in data.get("index_sets") or []
            ]
            if not index_sets:
                raise ConfigLoadError(
                    "No index sets configured in indexer.yaml",
                    file_path=self.config_dir / "indexer.yaml",
                )

            return IndexerConfig(
                elasticsearch=ElasticsearchConfig(**es_data),
                index_sets=index_sets,
            )

        except (ValidationError, TypeError) as e:
            raise ConfigLoadError(
                f"Invalid indexer configuration: {e}",
                file_path=self.config_dir / "indexer.yaml",
                cause=e,
            ) from e

    def _load_alerts(self) -> AlertsConfig:
        """
        Load alert settings, streams and conditions from alerts.yaml.

        Environment variables:
            - ALERT_CHECK_INTERVAL: Overrides settings.alert_check_interval_seconds

        Raises:
            ConfigLoadError: If validation fails.
        """
        data = self._load_yaml("alerts.yaml")

        try:
            settings_data = dict(data.get("settings") or {})
            interval = os.getenv("ALERT_CHECK_INTERVAL")
            if interval:
                try:
                    settings_data["alert_check_interval_seconds"] = int(interval)
                except ValueError as e:
                    raise ConfigLoadError(
                        f"ALERT_CHECK_INTERVAL must be an integer, got {interval!r}",
                        cause=e,
                    ) from e

            streams = [Stream(**stream_data) for stream_data in data.get("streams") or []]
            conditions = [
                AlertConditionConfig(**condition_data)
                for condition_data in data.get("conditions") or []
            ]

            return AlertsConfig(
                settings=AlertSettings(**settings_data),
                streams=streams,
                conditions=conditions,
            )

        except (ValidationError, TypeError) as e:
            raise ConfigLoadError(
                f"Invalid alerts configuration: {e}",
                file_path=self.config_dir / "alerts.yaml",
                cause=e,
            ) from e

    def _get_logging(self) -> LoggingConfig:
        """
        Get logging configuration from environment.

        Environment variables:
            - LOG_LEVEL: Log level (default: INFO)
            - LOG_FORMAT: Log format (default: json)

        Unknown values fall back to the defaults.
        """
        level_str = os.getenv("LOG_LEVEL", "INFO").upper()
        format_str = os.getenv("LOG_FORMAT", "json").lower()
        try:
            level = LogLevel(level_str)
        except ValueError:
            level = LogLevel.INFO
        try:
            log_format = LogFormat(format_str)
        except ValueError:
            log_format = LogFormat.JSON
        return LoggingConfig(level=level, format=log_format)

    def load(self) -> AppConfig:
        """
        Build the full configuration, env overrides applied.

        Returns:
            AppConfig: Validated application configuration.

        Raises:
            ConfigLoadError: If any configuration is invalid or missing.
        """
        try:
            config = AppConfig(
                indexer=self._load_indexer(),
                alerts=self._load_alerts(),
                logging=self._get_logging(),
            )

            logger.debug(
                "config_loaded",
                config_dir=str(self.config_dir),
                index_sets=len(config.indexer.index_sets),
                conditions=len(config.alerts.conditions),
            )
            return config

        except ConfigLoadError:
            raise
        except ValidationError as e:
            raise ConfigLoadError(
                f"Configuration validation failed: {e}",
                cause=e,
            ) from e
        except Exception as e:
            raise ConfigLoadError(
                f"Unexpected error loading configuration: {e}",
                cause=e,
            ) from e


def load_config(config_dir: Path | str = "config") -> AppConfig:
    """
    Load the configuration in ``config_dir``.

    Args:
        config_dir: Path to configuration directory (default: 'config').

    Returns:
        AppConfig: Validated application configuration.

    Raises:
        ConfigLoadError: If configuration loading fails.
    """
    loader = ConfigLoader(config_dir)
    return loader.load()
