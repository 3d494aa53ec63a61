"""
Shared service plumbing.

Provides structured logging setup and the ServiceRunner base class used by
the long-running services under ``services/``.

ServiceRunner lifecycle:
    1. Load configuration
    2. Configure logging from it
    3. ``_initialize()`` (service-specific)
    4. ``_run()`` until it returns or a shutdown signal arrives
    5. ``_cleanup()`` (always)
"""

import asyncio
import logging
import signal
import sys
from abc import ABC, abstractmethod
from typing import Any, Optional

import structlog

from logalert.config import AppConfig, LogFormat, LogLevel, load_config


def setup_logging(
    level: LogLevel | str = LogLevel.INFO,
    fmt: LogFormat | str = LogFormat.JSON,
) -> None:
    """
    Configure structured logging.

    Args:
        level: Minimum log level.
        fmt: ``json`` for machine-readable output, ``text`` for a console renderer.
    """
    level_name = level.value if isinstance(level, LogLevel) else str(level).upper()
    log_format = fmt if isinstance(fmt, LogFormat) else LogFormat(str(fmt).lower())

    renderer: Any
    if log_format == LogFormat.TEXT:
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level_name, logging.INFO),
        force=True,
    )

    # aiohttp logs every connection problem we already report ourselves
    logging.getLogger("aiohttp").setLevel(logging.WARNING)


class ServiceRunner(ABC):
    """
    Base class for long-running services.

    Attributes:
        config_path: Configuration directory.
        config: Loaded configuration, set by ``run()``.
        shutdown_event: Set when the service should stop.
        logger: Logger bound to the service name.
    """

    def __init__(self, config_path: str = "config") -> None:
        self.config_path = config_path
        self.config: Optional[AppConfig] = None
        self.shutdown_event = asyncio.Event()

    @property
    def logger(self) -> Any:
        """
        Logger bound to the service name.

        Bound on every access so it follows the configuration installed by
        the latest ``setup_logging()`` call.
        """
        return structlog.get_logger(__name__).bind(service=self.service_name)

    @property
    @abstractmethod
    def service_name(self) -> str:
        pass

    @abstractmethod
    async def _initialize(self) -> None:
        pass

    @abstractmethod
    async def _run(self) -> None:
        pass

    async def _cleanup(self) -> None:
        """Service-specific cleanup."""
        pass

    def request_shutdown(self) -> None:
        if not self.shutdown_event.is_set():
            self.logger.info("shutdown_requested")
            self.shutdown_event.set()

    def _install_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.request_shutdown)
            except (NotImplementedError, RuntimeError):
                # Not supported on this platform / outside the main thread
                pass

    async def run(self) -> None:
        """Load configuration and run the service until shutdown."""
        self.config = load_config(self.config_path)
        setup_logging(self.config.logging.level, self.config.logging.format)
        self._install_signal_handlers()

        self.logger.info("service_starting", config_path=self.config_path)
        try:
            await self._initialize()
            await self._run()
        finally:
            await self._cleanup()
            self.logger.info("service_stopped")
