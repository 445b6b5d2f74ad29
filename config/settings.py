from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PRODUCTION_PRESET = {
    'CACHE_TIMEOUT_MS': 300_000,
    'HEALTH_CHECK_INTERVAL_MS': 120_000,
    'LOG_LEVEL': 'warn',
}


class Settings(BaseSettings):
    APP_NAME: str = 'Asset Aggregator API'
    ENVIRONMENT: str = 'development'

    # Aggregation
    CACHE_TIMEOUT_MS: int = 60_000
    HEALTH_CHECK_INTERVAL_MS: int = 30_000
    ACTIVE_SOURCES: str = 'sarf_currency,mock_commodities'
    SOURCE_RETRY_ATTEMPTS: int = 2

    # Sources
    SARF_API_URL: str = 'https://sarfegp.com/rates.json'
    FOREX_ALGERIE_URL: str = 'http://www.forexalgerie.com/'

    # Logging
    LOG_LEVEL: str = 'debug'
    LOG_JSON: bool = False
    LOG_BUFFER_SIZE: int = 500

    model_config = SettingsConfigDict(env_file='.env', case_sensitive=False, extra='ignore')

    @model_validator(mode='after')
    def apply_environment_preset(self) -> 'Settings':
        if self.ENVIRONMENT.lower() == 'production':
            for key, value in PRODUCTION_PRESET.items():
                if key not in self.model_fields_set:
                    setattr(self, key, value)
        return self

    @property
    def active_source_keys(self) -> list[str]:
        """Configured source keys in priority order."""
        return [key.strip().lower() for key in self.ACTIVE_SOURCES.split(',') if key.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
