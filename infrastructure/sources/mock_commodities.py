import asyncio
import logging
from datetime import UTC, datetime
from typing import Any

from domain.models.asset import AggregatedDataset, SourceHealth
from infrastructure.adapters.mock_commodities import MockCommoditiesAdapter
from infrastructure.sources.base import SourceHealthTracker, fetch_standardized

logger = logging.getLogger(__name__)

MOCK_COMMODITIES = [
    {'name': 'WTI Crude Oil', 'id': 'OIL_WTI', 'price': 78.5, 'unit': 'USD/bbl', 'change': 1.25},
    {'name': 'Gold Spot', 'id': 'GOLD_XAU', 'price': 2350.75, 'unit': 'USD/oz', 'change': -10.5},
]


class MockCommoditiesSource:
    """Simulated commodity feed standing in for a paid market data API."""

    def __init__(self, latency: float = 0.05, fetch_timeout: float = 3):
        self._name = 'Mock-Commodities-API'
        self.latency = latency
        self.fetch_timeout = fetch_timeout
        self.adapter = MockCommoditiesAdapter(self._name)
        self._health = SourceHealthTracker(self._name)

    @property
    def name(self) -> str:
        return self._name

    async def _execute_fetch(self) -> dict[str, Any]:
        logger.info('Simulating fetch for commodity data...')
        await asyncio.sleep(self.latency)
        return {
            'timestamp': datetime.now(UTC).isoformat(),
            'commodities': [dict(commodity) for commodity in MOCK_COMMODITIES],
        }

    async def fetch_standardized_data(self) -> AggregatedDataset:
        return await fetch_standardized(
            self.name, self._health, self._execute_fetch, self.adapter.adapt, self.fetch_timeout
        )

    async def check_health(self) -> None:
        self._health.update(True, 20, 'Mock source is always healthy.')

    def get_health(self) -> SourceHealth:
        return self._health.snapshot()

    async def close(self) -> None:
        return None
