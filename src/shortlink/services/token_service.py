from datetime import datetime, timedelta, UTC
from typing import Optional

from jose import jwt, JWTError
from pydantic import ValidationError as ClaimsValidationError

from src.shortlink.core.config import logger
from src.shortlink.core.errors import AuthError
from src.shortlink.schemas.user import SessionClaims


class TokenService:
    """
    Issue and validate signed session tokens.

    Fully stateless: a token is valid while its signature checks out and it
    has not expired. There is no server-side session table and no revocation.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        lifetime: timedelta = timedelta(hours=24),
    ):
        if not secret_key:
            raise ValueError("A signing secret is required")
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.lifetime = lifetime

    def issue(self, user_id: str, username: str, now: Optional[datetime] = None) -> str:
        """
        Create a signed token for a user.

        Args:
            user_id: Stable user identifier
            username: Username, carried for display
            now: Issue time, defaults to the current UTC time

        Returns:
            Encoded JWT
        """
        issued = now or datetime.now(UTC)
        issued_at = int(issued.timestamp())
        expires_at = int((issued + self.lifetime).timestamp())
        claims = {
            "sub": user_id,
            "user_id": user_id,
            "username": username,
            "issued_at": issued_at,
            "expires_at": expires_at,
            "iat": issued_at,
            "exp": expires_at,
        }
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def validate(self, token: str, now: Optional[datetime] = None) -> SessionClaims:
        """
        Verify a token and return the identity it carries.

        Args:
            token: Encoded JWT
            now: Reference time for the expiry check, defaults to now

        Returns:
            The session claims

        Raises:
            AuthError: If the token is malformed, tampered with or expired
        """
        try:
            # Expiry is checked below against expires_at so that it honours ``now``
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"verify_exp": False, "verify_iat": False},
            )
        except JWTError as e:
            logger.warning(f"JWT validation error: {e}")
            raise AuthError()

        try:
            claims = SessionClaims.model_validate(payload)
        except ClaimsValidationError:
            logger.warning("Token is missing session claims")
            raise AuthError()

        current = int((now or datetime.now(UTC)).timestamp())
        if claims.expires_at <= current:
            logger.info(f"Expired token presented for user {claims.username}")
            raise AuthError("Token has expired")

        return claims
