"""
Error taxonomy shared by the stores, the request pipeline and the handlers.

Each error knows the HTTP status it maps to. Errors with ``expose = False``
keep their message for the logs and show the client only the default detail.
"""

from typing import Optional


class AppError(Exception):
    status_code = 500
    default_detail = "Internal server error"
    expose = True

    def __init__(self, detail: Optional[str] = None, headers: Optional[dict] = None):
        self.detail = detail or self.default_detail
        self.headers = headers
        super().__init__(self.detail)

    @property
    def public_detail(self) -> str:
        return self.detail if self.expose else self.default_detail


class ValidationError(AppError):
    status_code = 400
    default_detail = "Invalid request"


class AuthError(AppError):
    status_code = 401
    default_detail = "Could not validate credentials"

    def __init__(self, detail: Optional[str] = None, headers: Optional[dict] = None):
        super().__init__(detail, headers or {"WWW-Authenticate": "Bearer"})


class NotFoundError(AppError):
    status_code = 404
    default_detail = "Not found"


class MethodNotAllowedError(AppError):
    status_code = 405
    default_detail = "Method not allowed"


class ConflictError(AppError):
    status_code = 409
    default_detail = "Resource already exists"


class RateLimitedError(AppError):
    status_code = 429
    default_detail = "Too many requests"

    def __init__(self, retry_after: float = 1.0, detail: Optional[str] = None):
        # Retry-After takes whole seconds
        seconds = max(1, int(retry_after + 0.999))
        super().__init__(detail, {"Retry-After": str(seconds)})


class StorageError(AppError):
    status_code = 500
    expose = False


class HashingError(AppError):
    status_code = 500
    expose = False
