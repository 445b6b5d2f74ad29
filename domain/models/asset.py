from dataclasses import dataclass, field
from enum import Enum

AssetIdentifier = str


class AssetType(str, Enum):
    CURRENCY = 'currency'
    COMMODITY = 'commodity'


class RateType(str, Enum):
    OFFICIAL = 'official'
    PARALLEL_MARKET = 'parallel_market'
    INTERBANK = 'interbank'
    MARKET = 'market'


class HealthStatus(str, Enum):
    HEALTHY = 'healthy'
    DEGRADED = 'degraded'
    FAILED = 'failed'


@dataclass(frozen=True)
class Rate:
    buying: float
    selling: float
    mid_rate: float
    unit: str  # e.g. "EGP" for currencies, "USD/bbl" for oil


@dataclass(frozen=True)
class HistoricalPoint:
    timestamp: int  # ms epoch
    value: float


@dataclass
class Asset:
    identifier: AssetIdentifier
    name: str
    type: AssetType
    source: str
    timestamp: int
    rates: dict[RateType, Rate] = field(default_factory=dict)
    historical_data: list[HistoricalPoint] = field(default_factory=list)


@dataclass
class AggregatedDataset:
    """Unit produced by one fetch cycle and held in the cache."""
    assets: dict[AssetIdentifier, Asset] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.assets)

    def get(self, identifier: AssetIdentifier) -> Asset | None:
        return self.assets.get(identifier)


@dataclass(frozen=True)
class SourceHealth:
    source: str
    status: HealthStatus = HealthStatus.HEALTHY
    last_check: int = 0
    latency: int = 0
    message: str | None = None


@dataclass(frozen=True)
class ServiceHealth:
    status: HealthStatus
    sources: list[SourceHealth]
