"""
Shared fixtures: asset builders and an in-memory data source.
"""

import logging

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from config.settings import Settings
from domain.exceptions.aggregation import SourceFetchError
from domain.models.asset import (
    AggregatedDataset,
    Asset,
    AssetType,
    HealthStatus,
    HistoricalPoint,
    Rate,
    RateType,
)
from infrastructure.monitoring import logger as logger_module
from infrastructure.sources.base import SourceHealthTracker


def build_rate(mid_rate: float, unit: str = 'EGP', spread: float = 0.1) -> Rate:
    return Rate(buying=mid_rate - spread, selling=mid_rate + spread, mid_rate=mid_rate, unit=unit)


def build_asset(
        identifier: str,
        source: str = 'Test-Source',
        rates: dict[RateType, Rate] | None = None,
        name: str | None = None,
        history: list[HistoricalPoint] | None = None,
        asset_type: AssetType = AssetType.CURRENCY,
        timestamp: int = 1_700_000_000_000,
) -> Asset:
    return Asset(
        identifier=identifier,
        name=name or f'{identifier} from {source}',
        type=asset_type,
        source=source,
        timestamp=timestamp,
        rates=rates if rates is not None else {RateType.PARALLEL_MARKET: build_rate(50.6)},
        historical_data=history or [],
    )


def build_dataset(*assets: Asset) -> AggregatedDataset:
    return AggregatedDataset(assets={asset.identifier: asset for asset in assets})


class FakeSource:
    """DataSource double with scripted results and call counters."""

    def __init__(
            self,
            name: str,
            dataset: AggregatedDataset | None = None,
            error: Exception | None = None,
            status: HealthStatus = HealthStatus.HEALTHY,
            probe_status: HealthStatus = HealthStatus.HEALTHY
    ):
        self.name = name
        self.dataset = dataset if dataset is not None else AggregatedDataset()
        self.error = error
        self.probe_status = probe_status
        self.fetch_calls = 0
        self.health_checks = 0
        self.closed = False
        self._health = SourceHealthTracker(name)
        if status == HealthStatus.FAILED:
            self._health.mark_failed(0, 'Marked unusable')
        elif status == HealthStatus.DEGRADED:
            self._health.update(False, 0, 'Previous fetch failed')

    async def fetch_standardized_data(self) -> AggregatedDataset:
        self.fetch_calls += 1
        if self.error is not None:
            self._health.update(False, 1, str(self.error))
            raise SourceFetchError(self.name, str(self.error))
        self._health.update(True, 1)
        return self.dataset

    async def check_health(self) -> None:
        self.health_checks += 1
        if self.probe_status == HealthStatus.FAILED:
            self._health.mark_failed(1, 'Endpoint gone')
        else:
            self._health.update(self.probe_status == HealthStatus.HEALTHY, 1, f'Probe {self.probe_status.value}')

    def get_health(self):
        return self._health.snapshot()

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def make_rate():
    return build_rate


@pytest.fixture
def make_asset():
    return build_asset


@pytest.fixture
def make_dataset():
    return build_dataset


@pytest.fixture
def make_source():
    return FakeSource


@pytest.fixture
def isolated_logging():
    """Undo configure_logging side effects on the root logger."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    previous = logger_module._memory_handler
    yield
    root.handlers = handlers
    root.setLevel(level)
    logger_module._memory_handler = previous


@pytest.fixture
def api_settings():
    return Settings(_env_file=None, LOG_LEVEL='debug', HEALTH_CHECK_INTERVAL_MS=3_600_000)


@pytest.fixture
def client_for(api_settings, isolated_logging):
    """Start the app around the given sources; the lifespan runs on first use."""
    clients = []

    def _client(*sources: FakeSource) -> TestClient:
        client = TestClient(create_app(api_settings, sources=list(sources)))
        client.__enter__()
        clients.append(client)
        return client

    yield _client
    for client in clients:
        client.__exit__(None, None, None)
