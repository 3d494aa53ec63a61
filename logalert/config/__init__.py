"""
Configuration management for the alert evaluation engine.

This module handles loading and validating configuration from YAML files.
All configuration values are validated using Pydantic models to ensure
type safety and catch configuration errors early.

Configuration is loaded from YAML files in the config/ directory:
    - indexer.yaml: Elasticsearch connection and index sets
    - alerts.yaml: Check interval, streams and alert conditions

Environment variables can override settings:
    - ELASTICSEARCH_URL: Elasticsearch base URL
    - ALERT_CHECK_INTERVAL: Alert check interval in seconds
    - LOG_LEVEL: Application log level
    - LOG_FORMAT: Log output format

Example:
    >>> from logalert.config import load_config
    >>> config = load_config()
    >>> config.alerts.settings.alert_check_interval_seconds
    60
"""

from logalert.config.loader import ConfigLoadError, ConfigLoader, load_config
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

__all__: list[str] = [
    # Loader
    "load_config",
    "ConfigLoader",
    "ConfigLoadError",
    # Enums
    "LogFormat",
    "LogLevel",
    # Sections
    "ElasticsearchConfig",
    "IndexerConfig",
    "AlertSettings",
    "AlertConditionConfig",
    "AlertsConfig",
    "LoggingConfig",
    # Root config
    "AppConfig",
]
