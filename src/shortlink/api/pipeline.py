"""
Request pipeline.

An ordered list of interceptors runs before routing. Each interceptor either
returns (the request goes on) or raises an AppError, which ends the request
with that error's response.
"""

import time
from typing import Callable, Iterable, List, Tuple

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from src.shortlink.api.errors import error_response
from src.shortlink.core.config import logger
from src.shortlink.core.errors import AppError, AuthError, RateLimitedError
from src.shortlink.services.token_service import TokenService


class RequestInterceptor:
    async def intercept(self, request: Request) -> None:
        raise NotImplementedError


class RateLimitInterceptor(RequestInterceptor):
    """Admit the request through the rate gate or reject it with 429."""

    def __init__(self, gate, trust_forwarded: bool = False):
        self.gate = gate
        self.trust_forwarded = trust_forwarded

    def client_key(self, request: Request) -> str:
        if self.trust_forwarded:
            forwarded_for = request.headers.get("x-forwarded-for")
            if forwarded_for:
                return forwarded_for.split(",")[0].strip()
        return request.client.host if request.client else "unknown"

    async def intercept(self, request: Request) -> None:
        key = self.client_key(request)
        if not self.gate.try_admit(key):
            logger.warning(f"Rate limit exceeded: {request.method} {request.url.path} from {key}")
            raise RateLimitedError(self.gate.retry_after(key))


class BearerAuthInterceptor(RequestInterceptor):
    """
    Require a valid bearer token on protected routes.

    The verified claims are stored in ``request.state.claims`` so handlers
    never parse the token themselves.
    """

    def __init__(self, token_service: TokenService, protected_routes: Iterable[Tuple[str, str]]):
        self.token_service = token_service
        self.protected_routes = {(method.upper(), path) for method, path in protected_routes}

    async def intercept(self, request: Request) -> None:
        if (request.method, request.url.path) not in self.protected_routes:
            return

        authorization = request.headers.get("authorization")
        if not authorization:
            raise AuthError("Not authenticated")

        scheme, _, token = authorization.partition(" ")
        token = token.strip()
        if scheme.lower() != "bearer" or not token:
            raise AuthError("Malformed authorization header")

        request.state.claims = self.token_service.validate(token)


class PipelineMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, interceptors: List[RequestInterceptor]):
        super().__init__(app)
        self.interceptors = list(interceptors)

    async def dispatch(self, request: Request, call_next: Callable):
        for interceptor in self.interceptors:
            try:
                await interceptor.intercept(request)
            except AppError as exc:
                return error_response(exc)
        return await call_next(request)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for request/response logging."""

    async def dispatch(self, request: Request, call_next: Callable):
        start_time = time.time()

        client_ip = request.client.host if request.client else "unknown"
        logger.info(f"Request: {request.method} {request.url.path} from {client_ip}")

        response = await call_next(request)

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            f"Response: {request.method} {request.url.path} - "
            f"Status: {response.status_code} - Duration: {duration_ms:.2f}ms"
        )

        return response
