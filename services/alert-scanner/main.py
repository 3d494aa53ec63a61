"""
Alert Scanner Service entry point.

This service is responsible for:
- Building the index set registry and refreshing its rotation snapshots
- Building alert conditions from their persisted parameters
- Running one evaluation cycle per alert check interval
- Logging triggered verdicts (notification delivery is a separate concern)

Usage:
    python services/alert-scanner/main.py

Environment Variables:
    CONFIG_PATH: Path to config directory (default: config)
    ELASTICSEARCH_URL: Elasticsearch base URL
    ALERT_CHECK_INTERVAL: Alert check interval in seconds
    LOG_LEVEL: Logging level (default: INFO)
    LOG_FORMAT: json or text (default: json)
"""

from __future__ import annotations

import asyncio
import os
import sys
from pathlib import Path
from typing import List, Optional

import structlog

# Add project root to path for imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from logalert.alerts import AbstractAlertCondition, AlertConditionFactory
from logalert.detection import AlertScanner
from logalert.exceptions import LogAlertError
from logalert.indexer import (
    AliasIndexSet,
    ElasticsearchClient,
    MultiIndexSetRegistry,
    refresh_index_sets,
)
from logalert.models import CheckResult
from logalert.services import ServiceRunner, setup_logging

logger = structlog.get_logger(__name__)


class AlertScannerService(ServiceRunner):
    """
    Periodic alert evaluation service.

    Attributes:
        registry: Index set registry shared read-only by all checks.
        client: Elasticsearch client (search backend and alias metadata).
        scanner: Alert scanner driving the checks.
    """

    def __init__(self, config_path: str = "config") -> None:
        """Initialize the alert scanner service."""
        super().__init__(config_path)
        self.registry: Optional[MultiIndexSetRegistry] = None
        self.client: Optional[ElasticsearchClient] = None
        self.scanner: Optional[AlertScanner] = None

    @property
    def service_name(self) -> str:
        """Return service name."""
        return "alert-scanner"

    async def _initialize(self) -> None:
        """Build registry, backend, conditions and scanner."""
        if self.config is None:
            raise RuntimeError("Service not properly initialized")

        self.registry = MultiIndexSetRegistry(
            AliasIndexSet(index_set_config)
            for index_set_config in self.config.indexer.index_sets
        )
        self.client = ElasticsearchClient(
            base_url=self.config.indexer.elasticsearch.url,
            registry=self.registry,
            timeout_seconds=self.config.indexer.elasticsearch.timeout_seconds,
        )

        settings = self.config.alerts.settings
        factory = AlertConditionFactory(
            search_backend=self.client,
            alert_check_interval=settings.alert_check_interval_seconds,
        )

        self.scanner = AlertScanner(
            conditions=self._build_conditions(factory),
            check_timeout_seconds=settings.check_timeout_seconds,
            on_alert=self._on_alert,
        )

        self.logger.info(
            "alert_components_initialized",
            index_sets=[index_set.id for index_set in self.registry],
            conditions=[condition.id for condition in self.scanner.conditions],
            alert_check_interval=settings.alert_check_interval_seconds,
        )

    def _build_conditions(self, factory: AlertConditionFactory) -> List[AbstractAlertCondition]:
        """Build conditions from configuration, skipping invalid ones."""
        if self.config is None:
            return []

        conditions: List[AbstractAlertCondition] = []
        for condition_config in self.config.alerts.conditions:
            stream = self.config.alerts.get_stream(condition_config.stream_id)
            if stream is None:
                continue
            try:
                conditions.append(
                    factory.create(
                        condition_type=condition_config.type,
                        stream=stream,
                        id=condition_config.id,
                        creator_user_id=condition_config.creator_user_id,
                        parameters=condition_config.parameters,
                        created_at=condition_config.created_at,
                    )
                )
            except LogAlertError as e:
                self.logger.error(
                    "alert_condition_invalid",
                    condition_id=condition_config.id,
                    condition_type=condition_config.type,
                    error=str(e),
                )
        return conditions

    async def _on_alert(self, result: CheckResult) -> None:
        self.logger.warning(
            "alert_triggered",
            condition_id=result.condition_id,
            description=result.result_description,
            triggered_at=result.triggered_at.isoformat() if result.triggered_at else None,
            evidence=[summary.id for summary in result.matching_messages],
        )

    async def _run(self) -> None:
        """
        Main service loop - refresh index sets and run one scan per interval.

        Cycles start at a fixed rate so consecutive look-back windows tile the
        timeline; the time spent refreshing and scanning is taken out of the
        wait. A cycle that overruns the interval is followed immediately by
        the next one.
        """
        if self.config is None or self.scanner is None or self.registry is None or self.client is None:
            raise RuntimeError("Service not properly initialized")

        interval = self.config.alerts.settings.alert_check_interval_seconds
        loop = asyncio.get_running_loop()

        while not self.shutdown_event.is_set():
            started = loop.time()
            try:
                await refresh_index_sets(self.registry, self.client)
                if not self.registry.is_up():
                    self.logger.warning(
                        "index_sets_not_up",
                        write_aliases=self.registry.get_write_index_aliases(),
                    )
                await self.scanner.run_cycle()
            except Exception as e:
                self.logger.error("alert_scan_error", error=str(e))

            elapsed = loop.time() - started
            remaining = interval - elapsed
            if remaining <= 0:
                self.logger.warning(
                    "alert_scan_overran_interval",
                    elapsed_seconds=round(elapsed, 3),
                    interval_seconds=interval,
                )
                continue

            try:
                await asyncio.wait_for(self.shutdown_event.wait(), timeout=remaining)
            except asyncio.TimeoutError:
                pass

    async def _cleanup(self) -> None:
        """Close the Elasticsearch session."""
        if self.client is not None:
            await self.client.close()


async def main() -> None:
    """Main entry point."""
    setup_logging()

    config_path = os.getenv("CONFIG_PATH", "config")

    logger.info(
        "alert_scanner_service_starting",
        version="0.1.0",
        config_path=config_path,
    )

    service = AlertScannerService(config_path=config_path)

    try:
        await service.run()
    except Exception as e:
        service.logger.error("service_failed", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
