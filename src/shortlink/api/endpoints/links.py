from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from src.shortlink.api.deps import get_cache, get_current_claims, get_db, get_settings
from src.shortlink.core.config import Settings
from src.shortlink.core.errors import NotFoundError, ValidationError
from src.shortlink.schemas.url import URL, URLCreate, ShortenResponse
from src.shortlink.schemas.user import SessionClaims
from src.shortlink.services.url_service import (
    cache_url,
    create_short_url,
    get_url_by_short_code,
    list_urls_by_owner,
)

router = APIRouter()

# Routes the request pipeline guards with bearer authentication
PROTECTED_ROUTES = [("POST", "/shorten"), ("GET", "/urls")]


@router.post("/shorten", response_model=ShortenResponse)
def shorten(
    body: URLCreate,
    db: Session = Depends(get_db),
    cache=Depends(get_cache),
    settings: Settings = Depends(get_settings),
    claims: SessionClaims = Depends(get_current_claims),
):
    """
    Create a shortened URL.

    Requires authentication. Shortening a URL that is already stored returns
    its existing code.
    """
    url = create_short_url(db, body.url, claims.user_id, settings.SHORT_CODE_LENGTH)
    cache_url(cache, url, settings.CACHE_TTL_SECONDS)
    return ShortenResponse(short_url=url.short_url, id=url.id)


@router.get("/urls", response_model=list[URL])
def list_my_urls(
    db: Session = Depends(get_db),
    claims: SessionClaims = Depends(get_current_claims),
):
    """
    List the URLs created by the authenticated user, newest first.

    Requires authentication.
    """
    return list_urls_by_owner(db, claims.user_id)


@router.get("/redirect/")
def redirect_without_code():
    raise ValidationError("Short code is required")


@router.get("/redirect/{short_code}")
def redirect_to_url(
    short_code: str,
    db: Session = Depends(get_db),
    cache=Depends(get_cache),
    settings: Settings = Depends(get_settings),
):
    """Redirect a short code to its original URL."""
    short_code = short_code.strip()
    if not short_code:
        raise ValidationError("Short code is required")

    url = get_url_by_short_code(db, short_code, cache, settings.CACHE_TTL_SECONDS)
    if not url:
        raise NotFoundError("URL not found")

    return RedirectResponse(url.original_url, status_code=302)
