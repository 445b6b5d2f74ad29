import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from api.dependencies import get_exchange_service
from api.schemas import ServiceHealthResponse
from application.services import ExchangeService
from domain.models.asset import HealthStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix='/api/v1', tags=['health'])


@router.get(
    '/health',
    response_model=ServiceHealthResponse,
    responses={503: {'model': ServiceHealthResponse, 'description': 'Degraded or failed'}},
    summary='Data source health',
    description='Rolled up status plus the health record of every data source',
)
async def health_check(
    response: Response,
    service: Annotated[ExchangeService, Depends(get_exchange_service)],
) -> ServiceHealthResponse:
    health = service.get_service_health()
    if health.status != HealthStatus.HEALTHY:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        logger.warning(
            f'Service health is {health.status.value}',
            extra={'extra_data': {'sources': {s.source: s.status.value for s in health.sources}}}
        )
    return ServiceHealthResponse.from_service_health(health)
