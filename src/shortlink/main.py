"""
Short-link service application.

Usage:
    uvicorn src.shortlink.main:create_app --factory

Configuration is read from the environment (see ``core/config.py``);
SECRET_KEY is required.
"""

from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from src.shortlink.api.endpoints import users, links
from src.shortlink.api.errors import register_error_handlers
from src.shortlink.api.pipeline import (
    BearerAuthInterceptor,
    LoggingMiddleware,
    PipelineMiddleware,
    RateLimitInterceptor,
)
from src.shortlink.core.config import Settings, connect_redis, get_settings, logger
from src.shortlink.core.rate_limit import ClientRateGate, RateGate
from src.shortlink.db.session import Database
from src.shortlink.services.credential_service import CredentialManager
from src.shortlink.services.token_service import TokenService

ENDPOINTS = """\
Short-link service

POST /register          {username, password} -> {token, message}
POST /login             {username, password} -> {token, message}
POST /shorten           {url} -> {short_url, id}  (Authorization: Bearer <token>)
GET  /redirect/{code}   302 to the original URL
GET  /urls              links you created          (Authorization: Bearer <token>)
"""


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database and the link cache for the lifetime of the app."""
    settings: Settings = app.state.settings

    logger.info("Starting short-link service...")
    database = Database(settings.DATABASE_URL, timeout=settings.DATABASE_TIMEOUT)
    database.open()
    app.state.database = database
    app.state.cache = connect_redis(settings)

    yield

    logger.info("Shutting down short-link service...")
    app.state.cache.close()
    database.close()


def build_rate_gate(settings: Settings):
    if settings.RATE_LIMIT_SCOPE == "client":
        return ClientRateGate(
            rate=settings.RATE_LIMIT_PER_SECOND,
            burst=settings.RATE_LIMIT_BURST,
            max_clients=settings.RATE_LIMIT_MAX_CLIENTS,
        )
    return RateGate(rate=settings.RATE_LIMIT_PER_SECOND, burst=settings.RATE_LIMIT_BURST)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the application.

    Args:
        settings: Configuration, loaded from the environment if omitted

    Returns:
        Configured FastAPI app
    """
    settings = settings or get_settings()
    logger.setLevel(settings.LOG_LEVEL.upper())

    app = FastAPI(
        title="Short-link Service",
        description="Deterministic short links with token authentication and rate limiting.",
        version="1.0.0",
        lifespan=lifespan,
    )

    token_service = TokenService(
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
        lifetime=timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS),
    )
    app.state.settings = settings
    app.state.token_service = token_service
    app.state.credentials = CredentialManager(rounds=settings.BCRYPT_ROUNDS)

    # Last added runs first: logging, then the pipeline, then CORS, so
    # preflight requests are throttled like everything else
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )
    app.add_middleware(
        PipelineMiddleware,
        interceptors=[
            RateLimitInterceptor(
                build_rate_gate(settings), trust_forwarded=settings.TRUST_FORWARDED_HEADERS
            ),
            BearerAuthInterceptor(token_service, links.PROTECTED_ROUTES),
        ],
    )
    app.add_middleware(LoggingMiddleware)

    register_error_handlers(app)

    app.include_router(users.router, tags=["users"])
    app.include_router(links.router, tags=["links"])

    @app.get("/", response_class=PlainTextResponse, tags=["root"])
    def root():
        return ENDPOINTS

    return app
