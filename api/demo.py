import random

from domain.models.asset import Asset, AssetType, HistoricalPoint, Rate, RateType
from infrastructure.utils.time import now_ms

DAY_MS = 24 * 60 * 60 * 1000


def generate_mock_history(base_value: float, days: int = 30, rng: random.Random | None = None) -> list[HistoricalPoint]:
    """One point per day for the last `days` days, fluctuating by +/- 5%."""
    rng = rng or random.Random()
    now = now_ms()
    return [
        HistoricalPoint(timestamp=now - i * DAY_MS, value=base_value * (1 + (rng.random() - 0.5) * 0.1))
        for i in range(days, 0, -1)
    ]


def build_demo_assets() -> dict[str, Asset]:
    now = now_ms()
    return {
        'USD_EGP': Asset(
            identifier='USD_EGP',
            name='USD to EGP',
            type=AssetType.CURRENCY,
            source='Mock-API',
            timestamp=now,
            rates={RateType.PARALLEL_MARKET: Rate(buying=50.5, selling=50.7, mid_rate=50.6, unit='EGP')},
            historical_data=generate_mock_history(50.6),
        ),
        'OIL_WTI': Asset(
            identifier='OIL_WTI',
            name='WTI Crude Oil',
            type=AssetType.COMMODITY,
            source='Mock-API',
            timestamp=now,
            rates={RateType.MARKET: Rate(buying=78.4, selling=78.6, mid_rate=78.5, unit='USD/bbl')},
            historical_data=generate_mock_history(78.5),
        ),
        'GOLD_XAU': Asset(
            identifier='GOLD_XAU',
            name='Gold Spot',
            type=AssetType.COMMODITY,
            source='Mock-API',
            timestamp=now,
            rates={RateType.MARKET: Rate(buying=2349.5, selling=2352.0, mid_rate=2350.75, unit='USD/oz')},
            historical_data=generate_mock_history(2350.75),
        ),
    }
