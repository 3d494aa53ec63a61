"""
Pydantic models for application configuration.

This module defines all configuration models that are validated when loading
YAML configuration files. The models ensure type safety and provide sensible
defaults for optional settings.

Configuration files:
    - config/indexer.yaml: Elasticsearch connection and index sets
    - config/alerts.yaml: Check interval, streams and alert conditions

Example:
    >>> from logalert.config.models import AppConfig
    >>> config = AppConfig(...)
    >>> config.alerts.settings.alert_check_interval_seconds
    60
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from logalert.models.indices import IndexSetConfig
from logalert.models.streams import Stream


# =============================================================================
# ENUMS
# =============================================================================


class LogFormat(str, Enum):
    """Logging format options."""

    JSON = "json"
    TEXT = "text"


class LogLevel(str, Enum):
    """Logging level options."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# =============================================================================
# INDEXER CONFIGURATION
# =============================================================================


class ElasticsearchConfig(BaseModel):
    """Elasticsearch connection settings."""

    model_config = {"frozen": True, "extra": "forbid"}

    url: str = Field(
        default="http://localhost:9200",
        description="Elasticsearch base URL",
    )
    timeout_seconds: int = Field(
        default=10,
        description="Per-request deadline",
        ge=1,
        le=300,
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Elasticsearch URL must be http(s), got {v!r}")
        return v.rstrip("/")


class IndexerConfig(BaseModel):
    """Complete indexer configuration."""

    model_config = {"frozen": True, "extra": "forbid"}

    elasticsearch: ElasticsearchConfig = Field(
        default_factory=ElasticsearchConfig,
        description="Elasticsearch connection settings",
    )
    index_sets: List[IndexSetConfig] = Field(
        ...,
        description="Managed index sets, in evaluation order",
        min_length=1,
    )

    @model_validator(mode="after")
    def validate_index_sets(self) -> "IndexerConfig":
        """Index set ids and prefixes must be unique."""
        ids = [index_set.id for index_set in self.index_sets]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate index set ids: {ids}")
        prefixes = [index_set.index_prefix for index_set in self.index_sets]
        if len(prefixes) != len(set(prefixes)):
            raise ValueError(f"Duplicate index prefixes: {prefixes}")
        return self


# =============================================================================
# ALERT CONFIGURATION
# =============================================================================


class AlertSettings(BaseModel):
    """Global alert evaluation settings."""

    model_config = {"frozen": True, "extra": "forbid"}

    alert_check_interval_seconds: int = Field(
        default=60,
        description="Seconds between checks; also the look-back window",
        ge=1,
        le=86400,
    )
    check_timeout_seconds: int = Field(
        default=30,
        description="Deadline of a single condition check",
        ge=1,
        le=3600,
    )


class AlertConditionConfig(BaseModel):
    """Persisted parameters of one alert condition."""

    model_config = {"frozen": True, "extra": "forbid"}

    id: str = Field(
        ...,
        description="Condition identifier",
        min_length=1,
    )
    stream_id: str = Field(
        ...,
        description="Stream the condition is scoped to",
        min_length=1,
    )
    type: str = Field(
        ...,
        description="Condition type tag (e.g., field_content_value)",
        min_length=1,
    )
    creator_user_id: str = Field(
        default="admin",
        description="Who created the condition",
    )
    created_at: Optional[datetime] = Field(
        default=None,
        description="Creation time (defaults to load time)",
    )
    parameters: Dict[str, Any] = Field(
        default_factory=dict,
        description="Type-specific parameters",
    )


class AlertsConfig(BaseModel):
    """Complete alerts configuration."""

    model_config = {"frozen": True, "extra": "forbid"}

    settings: AlertSettings = Field(
        default_factory=AlertSettings,
        description="Global alert evaluation settings",
    )
    streams: List[Stream] = Field(
        default_factory=list,
        description="Streams alert conditions can refer to",
    )
    conditions: List[AlertConditionConfig] = Field(
        default_factory=list,
        description="Alert conditions to evaluate",
    )

    @model_validator(mode="after")
    def validate_references(self) -> "AlertsConfig":
        """Conditions must reference known streams and have unique ids."""
        stream_ids = {stream.id for stream in self.streams}
        seen = set()
        for condition in self.conditions:
            if condition.stream_id not in stream_ids:
                raise ValueError(
                    f"Alert condition {condition.id} references unknown stream: {condition.stream_id}"
                )
            if condition.id in seen:
                raise ValueError(f"Duplicate alert condition id: {condition.id}")
            seen.add(condition.id)
        return self

    def get_stream(self, stream_id: str) -> Optional[Stream]:
        """
        Get a stream by id.

        Args:
            stream_id: Stream identifier.

        Returns:
            Optional[Stream]: The stream or None if not configured.
        """
        for stream in self.streams:
            if stream.id == stream_id:
                return stream
        return None


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = {"frozen": True, "extra": "forbid"}

    format: LogFormat = Field(
        default=LogFormat.JSON,
        description="Log output format",
    )
    level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Default log level",
    )


# =============================================================================
# ROOT CONFIGURATION
# =============================================================================


class AppConfig(BaseModel):
    """
    Root application configuration.

    Aggregates all configuration sections into a single validated object.

    Example:
        >>> config = load_config("config")
        >>> [index_set.index_prefix for index_set in config.indexer.index_sets]
        ['graylog']
    """

    model_config = {"frozen": True, "extra": "forbid"}

    indexer: IndexerConfig = Field(
        ...,
        description="Elasticsearch and index set configuration",
    )
    alerts: AlertsConfig = Field(
        ...,
        description="Alert configuration",
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration",
    )

    @model_validator(mode="after")
    def validate_config(self) -> "AppConfig":
        """Streams may only point at configured index sets."""
        index_set_ids = {index_set.id for index_set in self.indexer.index_sets}
        for stream in self.alerts.streams:
            if stream.index_set_id is not None and stream.index_set_id not in index_set_ids:
                raise ValueError(
                    f"Stream {stream.id} references unknown index set: {stream.index_set_id}"
                )
        return self
