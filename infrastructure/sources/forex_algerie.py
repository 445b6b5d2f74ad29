import logging

import httpx

from domain.models.asset import AggregatedDataset, SourceHealth
from infrastructure.adapters.forex_algerie import ForexAlgerieAdapter
from infrastructure.sources.base import SourceHealthTracker, fetch_standardized, get_text, probe_endpoint

logger = logging.getLogger(__name__)


class ForexAlgerieSource:
    """Algerian dinar square market rates scraped from the Forex Algerie web page."""

    DEFAULT_URL = 'http://www.forexalgerie.com/'

    def __init__(
            self,
            web_url: str = DEFAULT_URL,
            client: httpx.AsyncClient | None = None,
            fetch_timeout: float = 8,
            health_timeout: float = 5,
            retry_attempts: int = 2
    ):
        self._name = 'Forex-Algerie-Web'
        self.web_url = web_url
        self.fetch_timeout = fetch_timeout
        self.health_timeout = health_timeout
        self.retry_attempts = retry_attempts
        self.adapter = ForexAlgerieAdapter(self._name)
        self._health = SourceHealthTracker(self._name)
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(fetch_timeout),
            headers={'accept': 'text/html'},
            follow_redirects=True
        )

    @property
    def name(self) -> str:
        return self._name

    async def _execute_fetch(self) -> str:
        logger.info(f'Fetching HTML content from {self.web_url}')
        return await get_text(self._client, self.web_url, self.fetch_timeout, self.retry_attempts)

    async def fetch_standardized_data(self) -> AggregatedDataset:
        return await fetch_standardized(
            self.name, self._health, self._execute_fetch, self.adapter.adapt, self.fetch_timeout
        )

    async def check_health(self) -> None:
        await probe_endpoint(self._client, self.web_url, self.health_timeout, self._health)

    def get_health(self) -> SourceHealth:
        return self._health.snapshot()

    async def close(self) -> None:
        await self._client.aclose()
