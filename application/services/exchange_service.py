import logging
from collections.abc import Iterable, Sequence

from application.services.orchestrator import DataOrchestrator, aggregate_status
from application.workers.health_check_worker import HealthCheckWorker
from config.settings import Settings
from domain.models.asset import Asset, AssetIdentifier, ServiceHealth
from infrastructure.monitoring.logger import LogEntry, LogLevel, get_memory_handler
from infrastructure.sources import DataSource, build_sources

logger = logging.getLogger(__name__)


class ExchangeService:
    """
    Single entry point for request handlers.

    Built once at process start and handed to the API through app.state;
    it owns the orchestrator and the background health check worker.
    """

    def __init__(self, orchestrator: DataOrchestrator, health_check_interval_ms: int):
        self.orchestrator = orchestrator
        self.health_check_interval_ms = health_check_interval_ms
        self._health_worker = HealthCheckWorker(orchestrator, health_check_interval_ms / 1000)

    @classmethod
    def from_settings(cls, settings: Settings, sources: Sequence[DataSource] | None = None) -> 'ExchangeService':
        if sources is None:
            sources = build_sources(settings)
        orchestrator = DataOrchestrator(sources, cache_timeout_ms=settings.CACHE_TIMEOUT_MS)
        service = cls(orchestrator, settings.HEALTH_CHECK_INTERVAL_MS)
        logger.info(
            f'Service initialized in {settings.ENVIRONMENT} mode with {len(orchestrator.sources)} sources.',
            extra={'extra_data': {'sources': [source.name for source in orchestrator.sources]}}
        )
        return service

    async def get_assets(self, ids: Iterable[AssetIdentifier]) -> dict[AssetIdentifier, Asset]:
        """Requested assets that are present; unknown ids are left out."""
        dataset = await self.orchestrator.get_aggregated_dataset()
        found: dict[AssetIdentifier, Asset] = {}
        for identifier in ids:
            identifier = identifier.strip()
            if identifier in found:
                continue
            asset = dataset.get(identifier)
            if asset is not None:
                found[identifier] = asset
        return found

    def get_service_health(self) -> ServiceHealth:
        sources = self.orchestrator.get_health()
        return ServiceHealth(status=aggregate_status(sources), sources=sources)

    def get_logs(self, min_level: LogLevel | str | None = None) -> list[LogEntry]:
        handler = get_memory_handler()
        if handler is None:
            return []
        return handler.get_logs(min_level)

    def start_health_checks(self) -> None:
        self._health_worker.start()

    async def stop_health_checks(self) -> None:
        await self._health_worker.stop()

    async def close(self) -> None:
        await self.stop_health_checks()
        await self.orchestrator.close()
        self.orchestrator.invalidate_cache()
        logger.info('Exchange service closed')
