"""Tests for the service plumbing and the alert scanner service loop."""

import asyncio
import importlib.util
import logging
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
import structlog

from logalert.services import ServiceRunner, setup_logging

SCANNER_SERVICE_PATH = Path(__file__).resolve().parent.parent / "services" / "alert-scanner" / "main.py"


@pytest.fixture(scope="module")
def scanner_service_module():
    spec = importlib.util.spec_from_file_location("alert_scanner_main", SCANNER_SERVICE_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def restore_logging():
    yield
    structlog.reset_defaults()
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)


class EchoService(ServiceRunner):
    @property
    def service_name(self) -> str:
        return "echo"

    async def _initialize(self) -> None:
        pass

    async def _run(self) -> None:
        pass


class SlowScanner:
    """Scanner stand-in recording cycle start times."""

    def __init__(self, service, duration: float, stop_after: int) -> None:
        self.service = service
        self.duration = duration
        self.stop_after = stop_after
        self.starts = []

    async def run_cycle(self):
        self.starts.append(asyncio.get_running_loop().time())
        if len(self.starts) >= self.stop_after:
            self.service.request_shutdown()
        await asyncio.sleep(self.duration)
        return {}


def build_service(module, monkeypatch, interval: int, duration: float, stop_after: int):
    monkeypatch.setattr(module, "refresh_index_sets", AsyncMock(return_value=1))

    service = module.AlertScannerService(config_path="config")
    service.config = MagicMock()
    service.config.alerts.settings.alert_check_interval_seconds = interval
    service.registry = MagicMock()
    service.registry.is_up.return_value = True
    service.client = MagicMock()
    service.scanner = SlowScanner(service, duration=duration, stop_after=stop_after)
    return service


def gaps(starts):
    return [later - earlier for earlier, later in zip(starts, starts[1:])]


class TestScanLoop:
    @pytest.mark.asyncio
    async def test_cycles_start_one_interval_apart(self, scanner_service_module, monkeypatch):
        service = build_service(
            scanner_service_module, monkeypatch, interval=1, duration=0.5, stop_after=3
        )

        await service._run()

        assert len(service.scanner.starts) == 3
        for gap in gaps(service.scanner.starts):
            assert 0.9 <= gap < 1.2

    @pytest.mark.asyncio
    async def test_overrunning_cycle_starts_next_at_once(self, scanner_service_module, monkeypatch):
        service = build_service(
            scanner_service_module, monkeypatch, interval=1, duration=1.2, stop_after=2
        )

        await service._run()

        assert len(service.scanner.starts) == 2
        assert gaps(service.scanner.starts)[0] < 1.4

    @pytest.mark.asyncio
    async def test_refreshes_index_sets_every_cycle(self, scanner_service_module, monkeypatch):
        service = build_service(
            scanner_service_module, monkeypatch, interval=1, duration=0.0, stop_after=1
        )

        await service._run()

        scanner_service_module.refresh_index_sets.assert_awaited_once_with(
            service.registry, service.client
        )

    @pytest.mark.asyncio
    async def test_uninitialized_service_refuses_to_run(self, scanner_service_module):
        service = scanner_service_module.AlertScannerService(config_path="config")

        with pytest.raises(RuntimeError):
            await service._run()


class TestServiceLogging:
    def test_logger_follows_latest_logging_setup(self, capsys, restore_logging):
        setup_logging("INFO", "json")
        runner = EchoService()
        runner.logger.info("before_switch")

        setup_logging("INFO", "text")
        runner.logger.info("after_switch", k=1)

        lines = capsys.readouterr().out.splitlines()
        before = next(line for line in lines if "before_switch" in line)
        after = next(line for line in lines if "after_switch" in line)
        assert '"event": "before_switch"' in before
        assert '"service": "echo"' in before
        assert '"event"' not in after
        assert not after.lstrip().startswith("{")

    def test_unknown_log_format_rejected(self, restore_logging):
        with pytest.raises(ValueError):
            setup_logging("INFO", "xml")
