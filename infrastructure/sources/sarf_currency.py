import logging
from typing import Any

import httpx

from domain.models.asset import AggregatedDataset, SourceHealth
from infrastructure.adapters.sarf_currency import SarfCurrencyAdapter
from infrastructure.sources.base import SourceHealthTracker, fetch_standardized, get_json, probe_endpoint

logger = logging.getLogger(__name__)


class SarfCurrencySource:
    """Egyptian pound parallel market rates from the Sarf JSON feed."""

    DEFAULT_URL = 'https://sarfegp.com/rates.json'

    def __init__(
            self,
            api_url: str = DEFAULT_URL,
            client: httpx.AsyncClient | None = None,
            fetch_timeout: float = 5,
            health_timeout: float = 3,
            retry_attempts: int = 2
    ):
        self._name = 'Sarf-EGP-API'
        self.api_url = api_url
        self.fetch_timeout = fetch_timeout
        self.health_timeout = health_timeout
        self.retry_attempts = retry_attempts
        self.adapter = SarfCurrencyAdapter(self._name)
        self._health = SourceHealthTracker(self._name)
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(fetch_timeout),
            headers={'accept': 'application/json'}
        )

    @property
    def name(self) -> str:
        return self._name

    async def _execute_fetch(self) -> Any:
        logger.debug(f'Fetching rates from {self.api_url}')
        return await get_json(self._client, self.api_url, self.fetch_timeout, self.retry_attempts)

    async def fetch_standardized_data(self) -> AggregatedDataset:
        return await fetch_standardized(
            self.name, self._health, self._execute_fetch, self.adapter.adapt, self.fetch_timeout
        )

    async def check_health(self) -> None:
        await probe_endpoint(self._client, self.api_url, self.health_timeout, self._health)

    def get_health(self) -> SourceHealth:
        return self._health.snapshot()

    async def close(self) -> None:
        await self._client.aclose()
