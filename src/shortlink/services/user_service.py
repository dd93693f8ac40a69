from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import Optional

from src.shortlink.core.config import logger
from src.shortlink.core.errors import ConflictError
from src.shortlink.db.session import storage_errors
from src.shortlink.models.user import User
from src.shortlink.services.credential_service import CredentialManager, derive_user_id


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    """
    Get user by username.

    Args:
        db: Database session
        username: Username to look up

    Returns:
        User object if found, None otherwise
    """
    with storage_errors("look up a user"):
        return db.query(User).filter(User.username == username).first()


def create_user(
    db: Session, username: str, password: str, credentials: CredentialManager
) -> User:
    """
    Create a new user.

    Args:
        db: Database session
        username: Unique username
        password: Plain text password, stored hashed
        credentials: Password hasher

    Returns:
        Created user object

    Raises:
        ConflictError: If the username is already taken
        HashingError: If the password could not be hashed
        StorageError: If the database is unavailable
    """
    if get_user_by_username(db, username):
        raise ConflictError("Username already taken")

    db_user = User(
        id=derive_user_id(username),
        username=username,
        password_hash=credentials.hash(password),
    )
    with storage_errors("create a user"):
        db.add(db_user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.info(f"Concurrent registration for {username}")
            raise ConflictError("Username already taken")
        db.refresh(db_user)

    logger.info(f"Registered user {username}")
    return db_user


def authenticate_user(
    db: Session, username: str, password: str, credentials: CredentialManager
) -> Optional[User]:
    """
    Authenticate a user with username and password.

    Args:
        db: Database session
        username: Username
        password: Plain text password
        credentials: Password verifier

    Returns:
        User object if authentication successful, None otherwise
    """
    user = get_user_by_username(db, username)
    if not user:
        return None
    if not credentials.verify(password, user.password_hash):
        return None
    return user
