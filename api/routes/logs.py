from typing import Annotated

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_exchange_service
from api.schemas import LogEntryResponse, LogsResponse
from application.services import ExchangeService
from infrastructure.monitoring.logger import LogLevel

router = APIRouter(prefix='/api/v1', tags=['logs'])


@router.get('/logs', response_model=LogsResponse, summary='Recent log entries')
async def get_logs(
    service: Annotated[ExchangeService, Depends(get_exchange_service)],
    level: Annotated[LogLevel | None, Query(description='Minimum level: debug, info, warn or error')] = None,
) -> LogsResponse:
    return LogsResponse(logs=[LogEntryResponse.from_entry(entry) for entry in service.get_logs(level)])
