import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, Protocol, TypeVar

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from domain.exceptions.aggregation import SourceFetchError
from domain.models.asset import AggregatedDataset, HealthStatus, SourceHealth
from infrastructure.utils.time import now_ms

logger = logging.getLogger(__name__)

RawT = TypeVar('RawT')

# A HEAD probe answering with one of these means the endpoint is gone for good
GONE_STATUS_CODES = frozenset({404, 410})


class DataSource(Protocol):
    """Capability set every upstream source implements."""

    @property
    def name(self) -> str: ...

    async def fetch_standardized_data(self) -> AggregatedDataset: ...

    async def check_health(self) -> None: ...

    def get_health(self) -> SourceHealth: ...

    async def close(self) -> None: ...


class SourceHealthTracker:
    """Owns the health record of a single source.

    Every update swaps in a new frozen record, so a snapshot handed out is
    never modified afterwards.
    """

    def __init__(self, source_name: str):
        self.source_name = source_name
        self._health = SourceHealth(source=source_name)

    def snapshot(self) -> SourceHealth:
        return self._health

    def update(self, success: bool, latency_ms: int, message: str | None = None) -> SourceHealth:
        self._health = SourceHealth(
            source=self.source_name,
            status=HealthStatus.HEALTHY if success else HealthStatus.DEGRADED,
            last_check=now_ms(),
            latency=latency_ms,
            message=message or ('OK' if success else 'Failed'),
        )
        return self._health

    def mark_failed(self, latency_ms: int, message: str) -> SourceHealth:
        self._health = SourceHealth(
            source=self.source_name,
            status=HealthStatus.FAILED,
            last_check=now_ms(),
            latency=latency_ms,
            message=message,
        )
        return self._health


def _elapsed_ms(start_time: float) -> int:
    return int((time.perf_counter() - start_time) * 1000)


def _describe_error(error: BaseException) -> str:
    if isinstance(error, (asyncio.TimeoutError, httpx.TimeoutException)):
        return 'Request timed out'
    if isinstance(error, httpx.HTTPStatusError):
        return f'HTTP status {error.response.status_code}'
    if isinstance(error, httpx.RequestError):
        return f'Request failed: {error.__class__.__name__}'
    return str(error) or error.__class__.__name__


async def fetch_standardized(
        source_name: str,
        tracker: SourceHealthTracker,
        execute_fetch: Callable[[], Awaitable[RawT]],
        adapt: Callable[[RawT], AggregatedDataset],
        timeout: float
) -> AggregatedDataset:
    """
    Shared fetch template used by every source:
    1. Run the source-specific fetch, bounded by the source timeout
    2. Hand the raw payload to the adapter
    3. Record healthy/degraded with latency
    A failure never yields partial data; it raises SourceFetchError.
    """
    start_time = time.perf_counter()
    try:
        raw_data = await asyncio.wait_for(execute_fetch(), timeout=timeout)
        dataset = adapt(raw_data)
    except Exception as e:
        message = _describe_error(e)
        latency_ms = _elapsed_ms(start_time)
        tracker.update(False, latency_ms, message)
        logger.error(
            f'Failed to execute data fetch for {source_name}: {message}',
            extra={'extra_data': {'source': source_name, 'latency_ms': latency_ms, 'error': message}}
        )
        raise SourceFetchError(source_name, message) from e

    latency_ms = _elapsed_ms(start_time)
    tracker.update(True, latency_ms)
    logger.debug(
        f'Fetched {len(dataset)} assets from {source_name} in {latency_ms}ms',
        extra={'extra_data': {'source': source_name, 'latency_ms': latency_ms, 'assets': len(dataset)}}
    )
    return dataset


async def probe_endpoint(
        client: httpx.AsyncClient,
        url: str,
        timeout: float,
        tracker: SourceHealthTracker
) -> None:
    """Lightweight HEAD liveness probe. Every outcome ends as a health update."""
    start_time = time.perf_counter()
    try:
        response = await asyncio.wait_for(client.head(url, timeout=timeout), timeout=timeout)
    except Exception as e:
        tracker.update(False, _elapsed_ms(start_time), _describe_error(e))
        logger.warning(f'Health check for {tracker.source_name} failed: {_describe_error(e)}')
        return

    latency_ms = _elapsed_ms(start_time)
    if response.status_code in GONE_STATUS_CODES:
        tracker.mark_failed(latency_ms, f'Endpoint gone: HTTP status {response.status_code}')
        logger.error(f'Marking {tracker.source_name} as failed, {url} answered {response.status_code}')
    elif response.status_code >= 400:
        tracker.update(False, latency_ms, f'Health check failed with status {response.status_code}')
        logger.warning(f'Health check for {tracker.source_name} returned {response.status_code}')
    else:
        tracker.update(True, latency_ms, 'Endpoint is reachable.')


def _retrying(attempts: int) -> AsyncRetrying:
    return AsyncRetrying(
        stop=stop_after_attempt(max(attempts, 1)),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(httpx.ConnectError),
        reraise=True,
    )


async def get_json(client: httpx.AsyncClient, url: str, timeout: float, attempts: int = 2) -> Any:
    """GET a JSON document; non-2xx statuses and undecodable bodies raise."""
    async for attempt in _retrying(attempts):
        with attempt:
            response = await client.get(url, timeout=timeout)
            response.raise_for_status()
            return response.json()


async def get_text(client: httpx.AsyncClient, url: str, timeout: float, attempts: int = 2) -> str:
    async for attempt in _retrying(attempts):
        with attempt:
            response = await client.get(url, timeout=timeout)
            response.raise_for_status()
            return response.text
