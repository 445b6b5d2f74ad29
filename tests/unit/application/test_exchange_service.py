import logging

import pytest

from application.services import ExchangeService
from application.services.orchestrator import DataOrchestrator
from config.settings import Settings
from domain.exceptions.aggregation import SourcesUnavailableError
from domain.models.asset import HealthStatus
from infrastructure.monitoring import logger as logger_module
from infrastructure.monitoring.logger import InMemoryLogHandler, LogLevel


@pytest.fixture
def service(make_source, make_dataset, make_asset):
    sources = [
        make_source('A', dataset=make_dataset(make_asset('USD_EGP', source='A'), make_asset('EUR_EGP', source='A'))),
        make_source('B', dataset=make_dataset(make_asset('OIL_WTI', source='B'))),
    ]
    return ExchangeService(DataOrchestrator(sources, cache_timeout_ms=60_000), health_check_interval_ms=30_000)


class TestGetAssets:

    @pytest.mark.asyncio
    async def test_returns_requested_assets(self, service):
        assets = await service.get_assets(['USD_EGP', 'OIL_WTI'])

        assert list(assets) == ['USD_EGP', 'OIL_WTI']
        assert assets['OIL_WTI'].source == 'B'

    @pytest.mark.asyncio
    async def test_unknown_ids_are_omitted(self, service):
        assert list(await service.get_assets(['XAU_EGP', 'EUR_EGP'])) == ['EUR_EGP']

    @pytest.mark.asyncio
    async def test_ids_are_trimmed_and_deduplicated(self, service):
        assets = await service.get_assets([' USD_EGP', 'USD_EGP ', 'USD_EGP'])

        assert list(assets) == ['USD_EGP']

    @pytest.mark.asyncio
    async def test_no_match_gives_empty_result(self, service):
        assert await service.get_assets(['NOPE']) == {}

    @pytest.mark.asyncio
    async def test_propagates_unavailability(self, make_source):
        service = ExchangeService(
            DataOrchestrator([make_source('A', error=RuntimeError('down'))], cache_timeout_ms=1_000),
            health_check_interval_ms=30_000,
        )

        with pytest.raises(SourcesUnavailableError):
            await service.get_assets(['USD_EGP'])


class TestServiceHealth:

    @pytest.mark.asyncio
    async def test_healthy_before_any_request(self, service):
        health = service.get_service_health()

        assert health.status == HealthStatus.HEALTHY
        assert [source.source for source in health.sources] == ['A', 'B']

    def test_failed_source_degrades_service(self, make_source):
        service = ExchangeService(
            DataOrchestrator(
                [make_source('A'), make_source('B', status=HealthStatus.FAILED)], cache_timeout_ms=1_000
            ),
            health_check_interval_ms=30_000,
        )

        assert service.get_service_health().status == HealthStatus.DEGRADED

    def test_no_sources_is_failed(self):
        service = ExchangeService(DataOrchestrator([], cache_timeout_ms=1_000), health_check_interval_ms=30_000)

        health = service.get_service_health()

        assert health.status == HealthStatus.FAILED
        assert health.sources == []


class TestLogs:

    @pytest.fixture
    def memory_handler(self):
        previous = logger_module._memory_handler
        handler = InMemoryLogHandler()
        logger_module._memory_handler = handler
        yield handler
        logger_module._memory_handler = previous

    def test_returns_buffered_entries(self, service, memory_handler):
        memory_handler.emit(logging.LogRecord('a', logging.INFO, __file__, 1, 'info entry', None, None))
        memory_handler.emit(logging.LogRecord('a', logging.ERROR, __file__, 1, 'error entry', None, None))

        assert [entry.message for entry in service.get_logs()] == ['info entry', 'error entry']
        assert [entry.message for entry in service.get_logs(LogLevel.ERROR)] == ['error entry']

    def test_without_logging_configured(self, service):
        previous = logger_module._memory_handler
        logger_module._memory_handler = None
        try:
            assert service.get_logs() == []
        finally:
            logger_module._memory_handler = previous


class TestLifecycle:

    def test_from_settings_uses_configured_timings(self, make_source):
        settings = Settings(_env_file=None, CACHE_TIMEOUT_MS=5_000, HEALTH_CHECK_INTERVAL_MS=2_000)

        service = ExchangeService.from_settings(settings, sources=[make_source('A')])

        assert service.orchestrator.cache_timeout_ms == 5_000
        assert service.health_check_interval_ms == 2_000
        assert [source.name for source in service.orchestrator.sources] == ['A']

    def test_from_settings_builds_configured_sources(self):
        settings = Settings(_env_file=None, ACTIVE_SOURCES='mock_commodities')

        service = ExchangeService.from_settings(settings)

        assert [source.name for source in service.orchestrator.sources] == ['Mock-Commodities-API']

    @pytest.mark.asyncio
    async def test_close_stops_worker_and_sources(self, service):
        await service.get_assets(['USD_EGP'])
        service.start_health_checks()

        await service.close()

        assert all(source.closed for source in service.orchestrator.sources)
        assert service.orchestrator._cached_dataset is None
