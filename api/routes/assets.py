import logging
import time
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from api.demo import build_demo_assets
from api.dependencies import get_exchange_service
from api.schemas import AssetResponse, AssetsResponse, ErrorResponse
from application.services import ExchangeService

logger = logging.getLogger(__name__)

router = APIRouter(prefix='/api/v1', tags=['assets'])


def parse_ids(ids: str | None) -> list[str]:
    """Split a comma separated id list, dropping blanks."""
    if not ids:
        return []
    return [identifier.strip() for identifier in ids.split(',') if identifier.strip()]


@router.get(
    '/assets',
    response_model=AssetsResponse,
    responses={
        400: {'model': ErrorResponse, 'description': 'No asset ids given'},
        503: {'model': ErrorResponse, 'description': 'All data sources unavailable'},
    },
    summary='Get assets by id',
)
async def get_assets(
    service: Annotated[ExchangeService, Depends(get_exchange_service)],
    ids: Annotated[str | None, Query(description='Comma separated asset ids, e.g. USD_EGP,OIL_WTI')] = None,
) -> AssetsResponse:
    requested = parse_ids(ids)
    if not requested:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='No asset ids provided')

    start_time = time.time()
    assets = await service.get_assets(requested)
    duration_ms = (time.time() - start_time) * 1000
    logger.info(
        f'Served {len(assets)}/{len(requested)} assets in {duration_ms:.2f}ms',
        extra={'extra_data': {'endpoint': '/assets', 'requested': requested, 'response_time_ms': duration_ms}}
    )
    return AssetsResponse(data={identifier: AssetResponse.from_asset(asset) for identifier, asset in assets.items()})


@router.get(
    '/assets/demo',
    response_model=AssetsResponse,
    responses={404: {'model': ErrorResponse, 'description': 'None of the ids are demo assets'}},
    summary='Get static demo assets',
)
async def get_demo_assets(
    ids: Annotated[str | None, Query(description='Comma separated asset ids')] = None,
) -> AssetsResponse:
    demo_assets = build_demo_assets()
    found = {
        identifier: AssetResponse.from_asset(demo_assets[identifier])
        for identifier in parse_ids(ids)
        if identifier in demo_assets
    }
    if not found:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='No assets found for the given IDs.')
    return AssetsResponse(data=found)
