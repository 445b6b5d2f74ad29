from .responses import (
    AssetResponse,
    AssetsResponse,
    ErrorResponse,
    LogEntryResponse,
    LogsResponse,
    ServiceHealthResponse,
    SourceHealthResponse,
)

__all__ = [
    'AssetResponse',
    'AssetsResponse',
    'ErrorResponse',
    'LogEntryResponse',
    'LogsResponse',
    'ServiceHealthResponse',
    'SourceHealthResponse',
]
