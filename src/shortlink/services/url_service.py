from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from datetime import datetime
import hashlib
import json
from typing import List, Optional
from redis.exceptions import RedisError

from src.shortlink.core.config import logger
from src.shortlink.core.errors import ConflictError
from src.shortlink.db.session import storage_errors
from src.shortlink.models.url import URL

DEFAULT_CODE_LENGTH = 8


def generate_short_code(original_url: str, length: int = DEFAULT_CODE_LENGTH) -> str:
    """
    Derive the short code of a URL.

    Args:
        original_url: URL to shorten, hashed byte for byte
        length: Number of hex characters to keep, defaults to 8

    Returns:
        Lowercase hex prefix of the SHA-256 digest of the URL
    """
    return hashlib.sha256(original_url.encode("utf-8")).hexdigest()[:length]


def serialize_url(url: URL) -> dict:
    return {
        "id": url.id,
        "original_url": url.original_url,
        "short_url": url.short_url,
        "created_at": url.created_at.isoformat() if url.created_at else None,
        "owner_id": url.owner_id,
    }


def deserialize_url(data: dict) -> URL:
    url = URL(
        id=data["id"],
        original_url=data["original_url"],
        short_url=data["short_url"],
        owner_id=data["owner_id"],
    )

    if data["created_at"]:
        url.created_at = datetime.fromisoformat(data["created_at"])

    return url


def cache_url(cache, url: URL, ttl_seconds: int) -> None:
    """Store a link in the cache. Links never change, so entries never go stale."""
    try:
        cache.setex(f"url:{url.id}", ttl_seconds, json.dumps(serialize_url(url)))
    except RedisError as e:
        logger.error(f"Redis error: {e}")


def get_url_by_short_code(
    db: Session, short_code: str, cache=None, ttl_seconds: int = 3600
) -> Optional[URL]:
    """
    Get URL by short code from cache or database.

    Args:
        db: Database session
        short_code: Short code to look up
        cache: Optional Redis client
        ttl_seconds: Cache TTL for links loaded from the database

    Returns:
        URL object if found, None otherwise

    Raises:
        StorageError: If the database is unavailable
    """
    if cache is not None:
        try:
            cached_url_json = cache.get(f"url:{short_code}")
            if cached_url_json:
                return deserialize_url(json.loads(cached_url_json))
        except RedisError as e:
            logger.error(f"Redis error: {e}")
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Ignoring unreadable cache entry for {short_code}: {e}")

    with storage_errors("look up a short code"):
        url = db.get(URL, short_code)

    if url is not None and cache is not None:
        cache_url(cache, url, ttl_seconds)
    return url


def get_url_by_original_url(db: Session, original_url: str) -> Optional[URL]:
    with storage_errors("look up an original url"):
        return db.query(URL).filter(URL.original_url == original_url).first()


def create_short_url(
    db: Session,
    original_url: str,
    owner_id: Optional[str] = None,
    length: int = DEFAULT_CODE_LENGTH,
) -> URL:
    """
    Store a URL, or return the existing row for it.

    Submitting the same URL again, by anyone, returns the first row
    unchanged. The unique constraints on ``original_url`` and the code make
    the check-then-insert safe under concurrent writers: the loser of a race
    rolls back and returns the winner's row.

    Args:
        db: Database session
        original_url: URL to shorten
        owner_id: ID of the user creating the URL, or None for anonymous
        length: Short code length

    Returns:
        The stored URL object

    Raises:
        ConflictError: If the code is already held by a different URL
        StorageError: If the database is unavailable
    """
    short_code = generate_short_code(original_url, length)

    existing = get_url_by_original_url(db, original_url)
    if existing:
        logger.debug(f"URL already shortened as {existing.id}")
        return existing

    with storage_errors("store a short url"):
        clash = db.get(URL, short_code)
        if clash is not None:
            logger.warning(f"Short code collision on {short_code}")
            raise ConflictError("Short code collision with another URL")

        db_url = URL(
            id=short_code,
            original_url=original_url,
            short_url=short_code,
            owner_id=owner_id,
        )
        db.add(db_url)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            winner = db.query(URL).filter(URL.original_url == original_url).first()
            if winner is not None:
                logger.info(f"Concurrent insert for {short_code} resolved to existing row")
                return winner
            if db.get(URL, short_code) is not None:
                logger.warning(f"Short code collision on {short_code}")
                raise ConflictError("Short code collision with another URL")
            # Neither uniqueness constraint fired, e.g. an unknown owner
            raise
        db.refresh(db_url)

    logger.info(f"Created short url {short_code}")
    return db_url


def list_urls_by_owner(db: Session, owner_id: str) -> List[URL]:
    """
    List the URLs a user created, newest first.

    Args:
        db: Database session
        owner_id: ID of the owning user

    Returns:
        List of URL objects
    """
    with storage_errors("list urls"):
        return (
            db.query(URL)
            .filter(URL.owner_id == owner_id)
            .order_by(URL.created_at.desc(), URL.id)
            .all()
        )
