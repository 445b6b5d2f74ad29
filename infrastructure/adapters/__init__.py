from .forex_algerie import ForexAlgerieAdapter
from .mock_commodities import MockCommoditiesAdapter
from .sarf_currency import SarfCurrencyAdapter

__all__ = ['ForexAlgerieAdapter', 'MockCommoditiesAdapter', 'SarfCurrencyAdapter']
