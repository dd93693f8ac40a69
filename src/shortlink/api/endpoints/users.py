from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from src.shortlink.api.deps import get_credentials, get_db, get_token_service
from src.shortlink.core.errors import AuthError
from src.shortlink.schemas.user import Token, UserCreate, UserLogin
from src.shortlink.services.credential_service import CredentialManager
from src.shortlink.services.token_service import TokenService
from src.shortlink.services.user_service import authenticate_user, create_user

router = APIRouter()


@router.post("/register", response_model=Token)
def register(
    user: UserCreate,
    db: Session = Depends(get_db),
    credentials: CredentialManager = Depends(get_credentials),
    tokens: TokenService = Depends(get_token_service),
):
    """
    Register a new user.

    Returns a session token so the new user is logged in right away.
    """
    db_user = create_user(db, user.username, user.password, credentials)
    token = tokens.issue(db_user.id, db_user.username)
    return Token(token=token, message="User registered successfully")


@router.post("/login", response_model=Token)
def login(
    user: UserLogin,
    db: Session = Depends(get_db),
    credentials: CredentialManager = Depends(get_credentials),
    tokens: TokenService = Depends(get_token_service),
):
    """
    Login with username and password.

    Returns a bearer token for use in authenticating subsequent requests.
    """
    db_user = authenticate_user(db, user.username, user.password, credentials)
    if not db_user:
        raise AuthError("Incorrect username or password")

    token = tokens.issue(db_user.id, db_user.username)
    return Token(token=token, message="Login successful")
