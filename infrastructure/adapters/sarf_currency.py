import logging
from collections.abc import Mapping
from typing import Any

from domain.exceptions.aggregation import AdapterError
from domain.models.asset import AggregatedDataset, Asset, AssetType, HistoricalPoint, Rate, RateType
from infrastructure.adapters.parsing import to_float
from infrastructure.utils.time import now_ms

logger = logging.getLogger(__name__)

QUOTE_CURRENCY = 'EGP'


class SarfCurrencyAdapter:
    """
    Translates the Sarf rates document into standardized assets.

    Expected payload:
        {"rates": {"USD": {"buying": 50.5, "selling": 50.7,
                           "chart": {"times": [...], "buyingPrices": [...]}}}}

    Sarf publishes parallel (black) market quotes against the Egyptian pound.
    """

    def __init__(self, source_name: str):
        self.source_name = source_name

    def adapt(self, raw_data: Any) -> AggregatedDataset:
        if not isinstance(raw_data, Mapping) or not isinstance(raw_data.get('rates'), Mapping):
            raise AdapterError(f'{self.source_name} payload has no "rates" mapping')

        logger.info(f'Adapting data from {self.source_name}')
        adapted = AggregatedDataset()
        now = now_ms()

        for code, raw_rate in raw_data['rates'].items():
            code = str(code).upper()
            if not isinstance(raw_rate, Mapping):
                logger.warning(f'Skipping {code}: rate entry is not an object')
                continue

            buying = to_float(raw_rate.get('buying'))
            selling = to_float(raw_rate.get('selling'))
            if buying is None or selling is None:
                logger.warning(
                    f'Skipping {code}: missing or non-numeric buying/selling price',
                    extra={'extra_data': {'source': self.source_name, 'code': code}}
                )
                continue

            identifier = f'{code}_{QUOTE_CURRENCY}'
            adapted.assets[identifier] = Asset(
                identifier=identifier,
                name=f'{code} to {QUOTE_CURRENCY}',
                type=AssetType.CURRENCY,
                source=self.source_name,
                timestamp=now,
                rates={
                    RateType.PARALLEL_MARKET: Rate(
                        buying=buying,
                        selling=selling,
                        mid_rate=(buying + selling) / 2,
                        unit=QUOTE_CURRENCY,
                    )
                },
                historical_data=self._parse_chart(code, raw_rate.get('chart')),
            )

        logger.info(f'Adapted {len(adapted)} assets.')
        return adapted

    def _parse_chart(self, code: str, chart: Any) -> list[HistoricalPoint]:
        if not isinstance(chart, Mapping):
            return []

        times = chart.get('times') or []
        prices = chart.get('buyingPrices') or []
        if not isinstance(times, list) or not isinstance(prices, list):
            logger.warning(f'Ignoring chart for {code}: times and buyingPrices must be lists')
            return []
        if len(times) != len(prices):
            logger.warning(f'Chart for {code} has {len(times)} times but {len(prices)} prices, truncating')

        points = []
        for raw_time, raw_price in zip(times, prices, strict=False):
            seconds = to_float(raw_time)
            value = to_float(raw_price)
            if seconds is None or value is None:
                continue
            points.append(HistoricalPoint(timestamp=int(seconds * 1000), value=value))

        points.sort(key=lambda point: point.timestamp)
        return points
