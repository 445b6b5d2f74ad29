from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from domain.models.asset import Asset, AssetType, HealthStatus, RateType, ServiceHealth, SourceHealth
from infrastructure.monitoring.logger import LogEntry, LogLevel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RateResponse(CamelModel):
    buying: float
    selling: float
    mid_rate: float
    unit: str = Field(..., description='Quote unit, e.g. EGP or USD/bbl')


class HistoricalPointResponse(CamelModel):
    timestamp: int = Field(..., description='Milliseconds since epoch')
    value: float


class AssetResponse(CamelModel):
    identifier: str = Field(..., description='Asset identifier, e.g. USD_EGP')
    name: str
    type: AssetType
    source: str = Field(..., description='Source that introduced the asset')
    timestamp: int
    rates: dict[RateType, RateResponse]
    historical_data: list[HistoricalPointResponse]

    @classmethod
    def from_asset(cls, asset: Asset) -> 'AssetResponse':
        return cls(
            identifier=asset.identifier,
            name=asset.name,
            type=asset.type,
            source=asset.source,
            timestamp=asset.timestamp,
            rates={
                rate_type: RateResponse(
                    buying=rate.buying, selling=rate.selling, mid_rate=rate.mid_rate, unit=rate.unit
                )
                for rate_type, rate in asset.rates.items()
            },
            historical_data=[
                HistoricalPointResponse(timestamp=point.timestamp, value=point.value)
                for point in asset.historical_data
            ],
        )


class AssetsResponse(CamelModel):
    success: bool = True
    data: dict[str, AssetResponse]

    model_config = ConfigDict(
        json_schema_extra={
            'example': {
                'success': True,
                'data': {
                    'USD_EGP': {
                        'identifier': 'USD_EGP',
                        'name': 'USD to EGP',
                        'type': 'currency',
                        'source': 'Sarf-EGP-API',
                        'timestamp': 1735689600000,
                        'rates': {
                            'parallel_market': {'buying': 50.5, 'selling': 50.7, 'midRate': 50.6, 'unit': 'EGP'}
                        },
                        'historicalData': [],
                    }
                },
            }
        }
    )


class ErrorResponse(CamelModel):
    success: bool = False
    message: str


class SourceHealthResponse(CamelModel):
    source: str
    status: HealthStatus
    last_check: int
    latency: int
    message: str | None = None

    @classmethod
    def from_health(cls, health: SourceHealth) -> 'SourceHealthResponse':
        return cls(
            source=health.source,
            status=health.status,
            last_check=health.last_check,
            latency=health.latency,
            message=health.message,
        )


class ServiceHealthResponse(CamelModel):
    status: HealthStatus
    sources: list[SourceHealthResponse]

    @classmethod
    def from_service_health(cls, health: ServiceHealth) -> 'ServiceHealthResponse':
        return cls(
            status=health.status,
            sources=[SourceHealthResponse.from_health(source) for source in health.sources],
        )


class LogEntryResponse(CamelModel):
    timestamp: int
    level: LogLevel
    component: str
    message: str
    data: Any = None

    @classmethod
    def from_entry(cls, entry: LogEntry) -> 'LogEntryResponse':
        return cls(
            timestamp=entry.timestamp,
            level=entry.level,
            component=entry.component,
            message=entry.message,
            data=entry.data,
        )


class LogsResponse(CamelModel):
    logs: list[LogEntryResponse]
