import logging
import random
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from domain.exceptions.aggregation import AdapterError
from domain.models.asset import AggregatedDataset, Asset, AssetType, HistoricalPoint, Rate, RateType
from infrastructure.adapters.parsing import to_float

logger = logging.getLogger(__name__)

DAY_MS = 86_400_000
HISTORY_DAYS = 30
SPREAD = 0.002


class MockCommoditiesAdapter:
    """
    Expected payload:
        {"timestamp": "2025-01-01T00:00:00Z",
         "commodities": [{"id": "OIL_WTI", "name": "...", "price": 78.5, "unit": "USD/bbl", "change": 1.25}]}
    """

    def __init__(self, source_name: str, rng: random.Random | None = None):
        self.source_name = source_name
        self._rng = rng or random.Random()

    def adapt(self, raw_data: Any) -> AggregatedDataset:
        if not isinstance(raw_data, Mapping) or not isinstance(raw_data.get('commodities'), list):
            raise AdapterError(f'{self.source_name} payload has no "commodities" list')

        try:
            timestamp = int(datetime.fromisoformat(str(raw_data['timestamp'])).timestamp() * 1000)
        except (KeyError, ValueError) as e:
            raise AdapterError(f'{self.source_name} payload has an invalid timestamp') from e

        adapted = AggregatedDataset()
        for commodity in raw_data['commodities']:
            if not isinstance(commodity, Mapping):
                logger.warning('Skipping commodity entry that is not an object')
                continue

            identifier = commodity.get('id')
            price = to_float(commodity.get('price'))
            if not isinstance(identifier, str) or not identifier or price is None:
                logger.warning(
                    f'Skipping commodity {identifier!r}: missing id or price',
                    extra={'extra_data': {'source': self.source_name, 'entry': dict(commodity)}}
                )
                continue

            adapted.assets[identifier] = Asset(
                identifier=identifier,
                name=commodity.get('name') or identifier,
                type=AssetType.COMMODITY,
                source=self.source_name,
                timestamp=timestamp,
                rates={
                    RateType.MARKET: Rate(
                        buying=price * (1 - SPREAD),
                        selling=price * (1 + SPREAD),
                        mid_rate=price,
                        unit=commodity.get('unit') or '',
                    )
                },
                historical_data=self._simulate_history(timestamp, price),
            )
        return adapted

    def _simulate_history(self, timestamp: int, price: float) -> list[HistoricalPoint]:
        # +/- 5% daily noise around the current price
        return [
            HistoricalPoint(
                timestamp=timestamp - (HISTORY_DAYS - i) * DAY_MS,
                value=price * (1 + (self._rng.random() - 0.5) * 0.1),
            )
            for i in range(HISTORY_DAYS)
        ]
