from typing import Generator

from fastapi import Request
from sqlalchemy.orm import Session

from src.shortlink.core.config import Settings
from src.shortlink.core.errors import AuthError
from src.shortlink.schemas.user import SessionClaims
from src.shortlink.services.credential_service import CredentialManager
from src.shortlink.services.token_service import TokenService


def get_db(request: Request) -> Generator[Session, None, None]:
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()


def get_cache(request: Request):
    return request.app.state.cache


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_credentials(request: Request) -> CredentialManager:
    return request.app.state.credentials


def get_current_claims(request: Request) -> SessionClaims:
    """
    Get the identity the request pipeline verified for this request.

    Raises:
        AuthError: If the route was reached without a verified token
    """
    claims = getattr(request.state, "claims", None)
    if claims is None:
        raise AuthError("Not authenticated")
    return claims
