from enum import StrEnum
from pathlib import Path
from typing import List, Optional

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


class ConditionalPolicy(StrEnum):
    VERSION_ONLY = 'version_only'
    CONTENT_FALLBACK = 'content_fallback'


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'Booking Platform'
    VERSION: str = '0.1.0'
    DEBUG: bool = True  # Set to False in production

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = []  # add your frontend URL here

    @field_validator('BACKEND_CORS_ORIGINS', mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str) and not v.startswith('['):
            return [i.strip() for i in v.split(',')]
        elif isinstance(v, list):
            return v
        return []

    # PostgreSQL
    POSTGRES_SERVER: str = 'localhost'
    POSTGRES_USER: str = 'postgres'
    POSTGRES_PASSWORD: SecretStr = SecretStr('postgres')
    POSTGRES_DB: str = 'booking_platform'
    POSTGRES_PORT: int = 5432
    POSTGRES_REPLICA_SERVER: Optional[str] = None
    POSTGRES_REPLICA_PORT: Optional[int] = None

    # Connection pool (per engine)
    DB_POOL_SIZE_WRITE: int = 10
    DB_POOL_SIZE_READ: int = 20
    DB_POOL_MAX_OVERFLOW: int = 5
    DB_POOL_TIMEOUT: int = 10  # seconds
    DB_POOL_RECYCLE: int = 1800  # seconds
    DB_POOL_PRE_PING: bool = True

    @property
    def DATABASE_URL_ASYNC(self) -> str:
        password = self.POSTGRES_PASSWORD.get_secret_value()
        return f'postgresql+asyncpg://{self.POSTGRES_USER}:{password}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}'

    @property
    def DATABASE_READ_URL_ASYNC(self) -> str:
        if not self.POSTGRES_REPLICA_SERVER:
            return self.DATABASE_URL_ASYNC
        password = self.POSTGRES_PASSWORD.get_secret_value()
        port = self.POSTGRES_REPLICA_PORT or self.POSTGRES_PORT
        return f'postgresql+asyncpg://{self.POSTGRES_USER}:{password}@{self.POSTGRES_REPLICA_SERVER}:{port}/{self.POSTGRES_DB}'

    @property
    def DATABASE_URL_SYNC(self) -> str:
        password = self.POSTGRES_PASSWORD.get_secret_value()
        return f'postgresql://{self.POSTGRES_USER}:{password}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}'

    # Redis (shared key-value backend for cache versions and ETags)
    REDIS_HOST: str = 'localhost'
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: str = ''
    REDIS_DECODE_RESPONSES: bool = True
    REDIS_KEY_PREFIX: str = ''  # Test isolation for parallel runs

    # Redis Connection Pool Configuration
    REDIS_POOL_MAX_CONNECTIONS: int = 50
    REDIS_SOCKET_TIMEOUT: float = 2.0  # Bounds every cache call (seconds)
    REDIS_SOCKET_CONNECT_TIMEOUT: float = 2.0
    REDIS_SOCKET_KEEPALIVE: bool = True
    REDIS_HEALTH_CHECK_INTERVAL: int = 30

    # Conditional GET
    CONDITIONAL_POLICY: ConditionalPolicy = ConditionalPolicy.VERSION_ONLY

    # Payment providers
    PAYSTACK_SECRET_KEY: SecretStr = SecretStr('')
    METATICKETS_WEBHOOK_SECRET: SecretStr = SecretStr('')

    # Telemetry forwarding
    TELEMETRY_FORWARD_URL: Optional[str] = None
    TELEMETRY_QUEUE_SIZE: int = 1000
    TELEMETRY_MAX_ATTEMPTS: int = 3
    TELEMETRY_RETRY_BACKOFF_SECONDS: float = 0.5
    TELEMETRY_TIMEOUT_SECONDS: float = 2.0
    TELEMETRY_DRAIN_TIMEOUT_SECONDS: float = 5.0

    # Test / ops endpoints (cache bump/reset, query counter)
    ENABLE_TEST_ENDPOINTS: bool = False


settings = Settings()  # type: ignore
