from collections.abc import Callable

from config.settings import Settings
from infrastructure.sources.base import DataSource
from infrastructure.sources.forex_algerie import ForexAlgerieSource
from infrastructure.sources.mock_commodities import MockCommoditiesSource
from infrastructure.sources.sarf_currency import SarfCurrencySource

SourceFactory = Callable[[Settings], DataSource]


class SourceRegistry:
    """Maps configuration keys to data source factories."""

    def __init__(self) -> None:
        self._factories: dict[str, SourceFactory] = {}

    def register(self, key: str, factory: SourceFactory, *, replace: bool = False) -> None:
        key = _normalize_key(key)
        if not replace and key in self._factories:
            raise ValueError(f"Data source '{key}' already registered")
        self._factories[key] = factory

    def keys(self) -> list[str]:
        return sorted(self._factories.keys())

    def create(self, key: str, settings: Settings) -> DataSource:
        key = _normalize_key(key)
        factory = self._factories.get(key)
        if factory is None:
            allowed = ', '.join(self.keys()) or '<none>'
            raise ValueError(f"Unknown data source '{key}'. Allowed sources: {allowed}")
        return factory(settings)

    def build_sources(self, settings: Settings) -> list[DataSource]:
        """Instantiate the configured sources, keeping their priority order."""
        keys = settings.active_source_keys
        duplicates = {key for key in keys if keys.count(key) > 1}
        if duplicates:
            raise ValueError(f"Data sources configured more than once: {', '.join(sorted(duplicates))}")
        return [self.create(key, settings) for key in keys]


def _normalize_key(value: str | None) -> str:
    key = str(value or '').strip().lower()
    if not key:
        raise ValueError('Data source key cannot be empty')
    return key


def create_default_registry() -> SourceRegistry:
    registry = SourceRegistry()
    registry.register(
        'sarf_currency',
        lambda settings: SarfCurrencySource(
            api_url=settings.SARF_API_URL,
            retry_attempts=settings.SOURCE_RETRY_ATTEMPTS
        )
    )
    registry.register(
        'forex_algerie',
        lambda settings: ForexAlgerieSource(
            web_url=settings.FOREX_ALGERIE_URL,
            retry_attempts=settings.SOURCE_RETRY_ATTEMPTS
        )
    )
    registry.register('mock_commodities', lambda settings: MockCommoditiesSource())
    return registry


def build_sources(settings: Settings) -> list[DataSource]:
    return create_default_registry().build_sources(settings)
