import asyncio
import logging
import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import replace

from domain.exceptions.aggregation import SourcesUnavailableError
from domain.models.asset import AggregatedDataset, HealthStatus, SourceHealth
from infrastructure.sources.base import DataSource

logger = logging.getLogger(__name__)


def merge_datasets(datasets: Iterable[AggregatedDataset]) -> AggregatedDataset:
    """
    Deep-merge source datasets in the order given.

    The first dataset to introduce an asset id owns its descriptive fields
    (name, type, source, timestamp, historical data). Rates are merged per
    rate type, later datasets overwriting earlier ones for the same type.
    Assets without any rate are dropped. Inputs are not mutated.
    """
    merged = AggregatedDataset()
    for dataset in datasets:
        for identifier, asset in dataset.assets.items():
            if not asset.rates:
                logger.warning(
                    f'Dropping asset {identifier} from {asset.source}: no rates',
                    extra={'extra_data': {'identifier': identifier, 'source': asset.source}}
                )
                continue

            existing = merged.assets.get(identifier)
            if existing is None:
                merged.assets[identifier] = replace(
                    asset,
                    rates=dict(asset.rates),
                    historical_data=list(asset.historical_data)
                )
            else:
                existing.rates.update(asset.rates)
    return merged


def aggregate_status(healths: Sequence[SourceHealth]) -> HealthStatus:
    if all(health.status == HealthStatus.FAILED for health in healths):
        return HealthStatus.FAILED
    if any(health.status != HealthStatus.HEALTHY for health in healths):
        return HealthStatus.DEGRADED
    return HealthStatus.HEALTHY


class DataOrchestrator:
    """Fetches every usable source concurrently, merges the results and caches them."""

    def __init__(
            self,
            sources: Sequence[DataSource],
            cache_timeout_ms: int,
            clock: Callable[[], float] = time.time
    ):
        self.sources = tuple(sources)
        self.cache_timeout_ms = cache_timeout_ms
        self._clock = clock
        self._cached_dataset: AggregatedDataset | None = None
        self._cache_expiry = 0.0
        self._refresh_lock = asyncio.Lock()

    def _now_ms(self) -> float:
        return self._clock() * 1000

    def _fresh_cache(self) -> AggregatedDataset | None:
        if self._cached_dataset is not None and self._now_ms() < self._cache_expiry:
            return self._cached_dataset
        return None

    async def get_aggregated_dataset(self) -> AggregatedDataset:
        cached = self._fresh_cache()
        if cached is not None:
            logger.debug('Returning fresh data from cache.')
            return cached

        async with self._refresh_lock:
            # Another caller may have refreshed while we waited for the lock
            cached = self._fresh_cache()
            if cached is not None:
                return cached
            return await self._refresh()

    async def _refresh(self) -> AggregatedDataset:
        active_sources = []
        for source in self.sources:
            if source.get_health().status == HealthStatus.FAILED:
                logger.warning(f'Skipping failed source: {source.name}')
                continue
            active_sources.append(source)

        results = await asyncio.gather(
            *(source.fetch_standardized_data() for source in active_sources),
            return_exceptions=True
        )

        datasets = []
        for source, result in zip(active_sources, results, strict=True):
            if isinstance(result, Exception):
                logger.warning(
                    f'Source {source.name} failed during fetch: {result}',
                    extra={'extra_data': {'source': source.name, 'error': str(result)}}
                )
            elif isinstance(result, BaseException):
                raise result
            else:
                datasets.append(result)

        merged = merge_datasets(datasets)

        if not merged.assets:
            if self._cached_dataset is not None:
                logger.error('All sources failed to provide data. Returning stale cache.')
                return self._cached_dataset
            raise SourcesUnavailableError('All data sources are unavailable and no cache exists.')

        logger.info(
            f'Successfully merged data from sources. Total assets: {len(merged)}',
            extra={'extra_data': {'assets': len(merged), 'sources_used': len(datasets)}}
        )
        self._cached_dataset = merged
        self._cache_expiry = self._now_ms() + self.cache_timeout_ms
        return merged

    def invalidate_cache(self) -> None:
        self._cached_dataset = None
        self._cache_expiry = 0.0

    def get_health(self) -> list[SourceHealth]:
        return [source.get_health() for source in self.sources]

    def get_status(self) -> HealthStatus:
        return aggregate_status(self.get_health())

    async def run_health_checks(self) -> None:
        logger.debug('Running periodic health checks.')
        results = await asyncio.gather(
            *(source.check_health() for source in self.sources),
            return_exceptions=True
        )
        for source, result in zip(self.sources, results, strict=True):
            if isinstance(result, Exception):
                logger.error(f'Health check for {source.name} raised unexpectedly: {result}')

    async def close(self) -> None:
        for source in self.sources:
            try:
                await source.close()
            except Exception as e:
                logger.error(f'Failed to close source {source.name}: {e}')
