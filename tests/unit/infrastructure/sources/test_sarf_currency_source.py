from unittest.mock import AsyncMock

import httpx
import pytest

from domain.exceptions.aggregation import SourceFetchError
from domain.models.asset import HealthStatus, RateType
from infrastructure.sources.sarf_currency import SarfCurrencySource

URL = 'https://sarf.example.com/rates.json'


def make_response(status_code: int, **kwargs) -> httpx.Response:
    return httpx.Response(status_code, request=httpx.Request('GET', URL), **kwargs)


@pytest.fixture
def mock_client():
    return AsyncMock(spec=httpx.AsyncClient)


@pytest.fixture
def source(mock_client):
    return SarfCurrencySource(api_url=URL, client=mock_client, retry_attempts=1)


class TestSarfCurrencySource:

    def test_identity_and_defaults(self, source):
        assert source.name == 'Sarf-EGP-API'
        assert source.fetch_timeout == 5
        assert source.health_timeout == 3
        assert source.get_health().status == HealthStatus.HEALTHY

    @pytest.mark.asyncio
    async def test_fetch_standardized_data(self, source, mock_client):
        mock_client.get.return_value = make_response(
            200, json={'rates': {'USD': {'buying': 50.5, 'selling': 50.7}}}
        )

        dataset = await source.fetch_standardized_data()

        mock_client.get.assert_called_once_with(URL, timeout=5)
        assert dataset.assets['USD_EGP'].rates[RateType.PARALLEL_MARKET].mid_rate == pytest.approx(50.6)
        assert dataset.assets['USD_EGP'].source == 'Sarf-EGP-API'
        assert source.get_health().status == HealthStatus.HEALTHY

    @pytest.mark.asyncio
    async def test_http_error_degrades(self, source, mock_client):
        mock_client.get.return_value = make_response(500)

        with pytest.raises(SourceFetchError):
            await source.fetch_standardized_data()

        health = source.get_health()
        assert health.status == HealthStatus.DEGRADED
        assert health.message == 'HTTP status 500'

    @pytest.mark.asyncio
    async def test_malformed_payload_degrades(self, source, mock_client):
        mock_client.get.return_value = make_response(200, json={'unexpected': True})

        with pytest.raises(SourceFetchError):
            await source.fetch_standardized_data()

        assert source.get_health().status == HealthStatus.DEGRADED

    @pytest.mark.asyncio
    async def test_check_health_uses_head(self, source, mock_client):
        mock_client.head.return_value = make_response(410)

        await source.check_health()

        mock_client.head.assert_called_once_with(URL, timeout=3)
        assert source.get_health().status == HealthStatus.FAILED

    @pytest.mark.asyncio
    async def test_close_releases_client(self, source, mock_client):
        await source.close()

        mock_client.aclose.assert_awaited_once()
