import logging
import os
from collections.abc import Sequence
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI

from api.error_handlers import register_exception_handlers
from api.routes import assets, health, logs
from application.services import ExchangeService
from config.settings import Settings, get_settings
from infrastructure.monitoring.logger import configure_logging
from infrastructure.sources import DataSource

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, sources: Sequence[DataSource] | None = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.LOG_LEVEL, json_output=settings.LOG_JSON, buffer_size=settings.LOG_BUFFER_SIZE)
        logger.info(f'Starting {settings.APP_NAME}...')

        service = ExchangeService.from_settings(settings, sources=sources)
        app.state.exchange_service = service
        service.start_health_checks()
        logger.info('Application ready')

        yield

        logger.info('Shutting down...')
        try:
            await service.close()
        except Exception as e:
            logger.error(f'Error during cleanup: {e}')
        app.state.exchange_service = None

    app = FastAPI(
        title=settings.APP_NAME,
        description='Aggregated currency and commodity rates from multiple upstream sources',
        version='1.0.0',
        lifespan=lifespan,
    )

    app.include_router(assets.router)
    app.include_router(health.router)
    app.include_router(logs.router)
    register_exception_handlers(app)

    @app.get('/', summary='API Information')
    async def root():
        return {
            'name': settings.APP_NAME,
            'version': '1.0.0',
            'endpoints': {
                'assets': '/api/v1/assets?ids=USD_EGP,OIL_WTI',
                'demo': '/api/v1/assets/demo?ids=USD_EGP',
                'health': '/api/v1/health',
                'logs': '/api/v1/logs?level=warn',
                'documentation': '/docs',
            },
            'timestamp': datetime.now().isoformat(),
        }

    return app


app = create_app()


if __name__ == '__main__':
    import uvicorn

    host = os.getenv('HOST', '0.0.0.0')
    port = int(os.getenv('PORT', 8000))
    logger.info(f'Starting server on {host}:{port}')

    uvicorn.run(
        'api.main:app',
        host=host,
        port=port,
        reload=os.getenv('ENVIRONMENT', 'production') == 'development',
        log_level='info'
    )
