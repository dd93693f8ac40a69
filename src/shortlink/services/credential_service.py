import hashlib

from passlib.context import CryptContext

from src.shortlink.core.config import logger
from src.shortlink.core.errors import HashingError


def derive_user_id(username: str) -> str:
    """
    Derive the stable primary key of a user from its username.

    A fast digest, not a password hash: the id is an identifier, not a secret.
    """
    return hashlib.sha256(username.encode("utf-8")).hexdigest()


class CredentialManager:
    """Slow salted password hashing with a fixed bcrypt work factor."""

    def __init__(self, rounds: int = 12):
        self.pwd_context = CryptContext(
            schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds
        )

    def hash(self, password: str) -> str:
        """
        Hash a password for storage.

        Args:
            password: Plain text password

        Returns:
            Hashed password

        Raises:
            HashingError: If the hash primitive fails
        """
        try:
            return self.pwd_context.hash(password)
        except (ValueError, TypeError, MemoryError) as e:
            logger.error(f"Password hashing failed: {e}")
            raise HashingError("Password hashing failed") from e

    def verify(self, password: str, password_hash: str) -> bool:
        """
        Verify a plain password against a stored hash.

        Args:
            password: Plain text password
            password_hash: Hash to compare against

        Returns:
            True if passwords match, False otherwise (including unreadable hashes)
        """
        try:
            return self.pwd_context.verify(password, password_hash)
        except (ValueError, TypeError) as e:
            logger.warning(f"Password verification failed: {e}")
            return False
