import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from domain.exceptions.aggregation import AggregationException, SourcesUnavailableError

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(SourcesUnavailableError)
    async def sources_unavailable_handler(request: Request, exc: SourcesUnavailableError):
        logger.error(f'Sources unavailable on {request.url.path}: {exc}')
        return JSONResponse(status_code=503, content={'success': False, 'message': str(exc)})

    @app.exception_handler(AggregationException)
    async def aggregation_error_handler(request: Request, exc: AggregationException):
        logger.error(f'Aggregation error on {request.url.path}: {exc}')
        return JSONResponse(
            status_code=503, content={'success': False, 'message': 'Asset data service unavailable'}
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={'success': False, 'message': str(exc.detail)},
            headers=getattr(exc, 'headers', None)
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f'Unhandled exception: {exc}', exc_info=True)
        return JSONResponse(status_code=500, content={'success': False, 'message': 'Internal server error'})
