from .base import DataSource, SourceHealthTracker
from .forex_algerie import ForexAlgerieSource
from .mock_commodities import MockCommoditiesSource
from .registry import SourceRegistry, build_sources, create_default_registry
from .sarf_currency import SarfCurrencySource

__all__ = [
    'DataSource',
    'SourceHealthTracker',
    'ForexAlgerieSource',
    'MockCommoditiesSource',
    'SarfCurrencySource',
    'SourceRegistry',
    'build_sources',
    'create_default_registry',
]
