import logging

from fastapi import HTTPException, Request, status

from application.services import ExchangeService

logger = logging.getLogger(__name__)


def get_exchange_service(request: Request) -> ExchangeService:
    """
    The exchange service is built once in the app lifespan and kept on
    app.state; handlers receive it through this dependency.
    """
    service = getattr(request.app.state, 'exchange_service', None)
    if service is None:
        logger.error('Exchange service requested before it was initialized')
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail='Service temporarily unavailable'
        )
    return service
