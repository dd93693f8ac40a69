from pydantic import field_validator
from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional
from redis import Redis
from redis.exceptions import RedisError
import logging
import time

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("shortlink")


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Settings can be overridden by environment variables or .env file.
    SECRET_KEY has no default: the service refuses to start without one.
    """

    DATABASE_URL: str = "sqlite:///./shortlink.db"
    DATABASE_TIMEOUT: float = 5.0

    REDIS_URL: Optional[str] = None
    REDIS_RETRY_ATTEMPTS: int = 3
    REDIS_RETRY_DELAY: int = 1
    CACHE_TTL_SECONDS: int = 86400

    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_HOURS: int = 24
    BCRYPT_ROUNDS: int = 12

    SHORT_CODE_LENGTH: int = 8

    RATE_LIMIT_PER_SECOND: float = 1.0
    RATE_LIMIT_BURST: int = 5
    RATE_LIMIT_SCOPE: str = "global"
    RATE_LIMIT_MAX_CLIENTS: int = 10000
    TRUST_FORWARDED_HEADERS: bool = False

    ALLOWED_ORIGINS: str = "http://localhost:8000,http://localhost:3000"
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"

    @field_validator("SECRET_KEY")
    @classmethod
    def secret_key_strength(cls, value: str) -> str:
        if len(value) < 16:
            raise ValueError("SECRET_KEY must be at least 16 characters long")
        return value

    @field_validator("RATE_LIMIT_SCOPE")
    @classmethod
    def rate_limit_scope(cls, value: str) -> str:
        value = value.lower()
        if value not in ("global", "client"):
            raise ValueError("RATE_LIMIT_SCOPE must be 'global' or 'client'")
        return value

    @property
    def allowed_origins(self) -> list[str]:
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to avoid loading .env file multiple times.
    """
    return Settings()


def connect_redis(settings: Settings):
    """
    Connect to the link cache.

    Returns a dummy client when REDIS_URL is unset or Redis stays
    unreachable after the configured retries. The dummy client implements
    the same interface but caches nothing.
    """
    if not settings.REDIS_URL:
        logger.info("Redis caching disabled")
        return DummyRedis()

    retry_attempts = settings.REDIS_RETRY_ATTEMPTS
    retry_delay = settings.REDIS_RETRY_DELAY

    for attempt in range(retry_attempts):
        try:
            redis_client = Redis.from_url(
                settings.REDIS_URL,
                decode_responses=True,
                socket_timeout=settings.DATABASE_TIMEOUT,
                socket_connect_timeout=settings.DATABASE_TIMEOUT,
            )
            redis_client.ping()
            logger.info("Connected to Redis")
            return redis_client
        except RedisError as e:
            if attempt < retry_attempts - 1:
                logger.warning(f"Redis connection attempt {attempt+1} failed: {e}. Retrying in {retry_delay}s...")
                time.sleep(retry_delay)
            else:
                logger.error(f"Redis connection failed after {retry_attempts} attempts: {e}")
    return DummyRedis()


class DummyRedis:
    """
    A dummy Redis client for testing and development.

    Implements the subset of the Redis interface the link cache uses.
    """

    def setex(self, *args, **kwargs):
        logger.debug("DummyRedis: setex called")

    def get(self, *args, **kwargs):
        logger.debug("DummyRedis: get called")
        return None

    def ping(self, *args, **kwargs):
        logger.debug("DummyRedis: ping called")
        return True

    def close(self):
        logger.debug("DummyRedis: close called")
