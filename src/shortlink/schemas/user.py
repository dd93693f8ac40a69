from pydantic import BaseModel, field_validator


class UserCredentials(BaseModel):
    username: str
    password: str

    @field_validator("username")
    @classmethod
    def username_not_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("username must not be empty")
        if len(value) > 64:
            raise ValueError("username must be at most 64 characters")
        return value

    @field_validator("password")
    @classmethod
    def password_not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("password must not be empty")
        return value


class UserCreate(UserCredentials):
    pass


class UserLogin(UserCredentials):
    pass


class Token(BaseModel):
    token: str
    message: str


class SessionClaims(BaseModel):
    """Identity carried by a session token; never persisted."""

    user_id: str
    username: str
    issued_at: int
    expires_at: int
