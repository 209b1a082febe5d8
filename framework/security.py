"""
Password hashing and token signing.

Services only call the helpers in this module, so the hash scheme and the
token format can change without touching business logic.
"""

import base64
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional, Any, Dict, Tuple
from jose import jwt, JWTError
from passlib.context import CryptContext
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from pydantic import BaseModel
from framework.config import settings
from framework.exceptions.errors import AuthError

# 1. Password hashing (BCrypt, salted)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Verified against when the account does not exist, so a miss costs as much as a hit
_DUMMY_HASH: Optional[str] = None

# 2. Bearer token scheme
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_AUTH_PREFIX}/login", auto_error=False)

REFRESH_TOKEN_BYTES = 32

CREDENTIALS_ERROR = "Could not validate credentials"

# --- Core models ---

class CurrentUser(BaseModel):
    """Current logged-in user context"""
    id: int
    username: str
    email: str

# --- Helpers ---

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)

def verify_password_or_dummy(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify against the stored hash, or burn equal time on a dummy hash and fail."""
    global _DUMMY_HASH
    if hashed_password is None:
        if _DUMMY_HASH is None:
            _DUMMY_HASH = pwd_context.hash(secrets.token_urlsafe(16))
        pwd_context.verify(plain_password, _DUMMY_HASH)
        return False
    return verify_password(plain_password, hashed_password)

def create_access_token(
    subject: Any,
    claims: Optional[Dict[str, Any]] = None,
    expires_delta: Optional[timedelta] = None,
    now: Optional[datetime] = None,
) -> Tuple[str, datetime]:
    """Create a signed JWT; returns the token and its expiry."""
    issued_at = now or datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    expire = issued_at + expires_delta

    to_encode = dict(claims or {})
    to_encode.update({
        "sub": str(subject),
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
        "iat": issued_at,
        "exp": expire,
    })
    encoded_jwt = jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    return encoded_jwt, expire

def decode_access_token(token: str) -> Dict[str, Any]:
    """Validate signature, expiry, issuer and audience. Raises JWTError."""
    return jwt.decode(
        token,
        settings.JWT_SECRET_KEY,
        algorithms=[settings.JWT_ALGORITHM],
        audience=settings.JWT_AUDIENCE,
        issuer=settings.JWT_ISSUER,
    )

def generate_refresh_token() -> str:
    """Random 32-byte refresh token, Base64 encoded."""
    return base64.b64encode(secrets.token_bytes(REFRESH_TOKEN_BYTES)).decode("ascii")

# --- FastAPI dependencies ---

def get_current_user(token: Optional[str] = Depends(oauth2_scheme)) -> CurrentUser:
    """
    Dependency: validate bearer token and extract user. Use in router as user: CurrentUser = Depends(get_current_user).
    Raises AuthError, which the global handler renders as a 401 with a Bearer challenge.
    """
    if not token:
        raise AuthError(CREDENTIALS_ERROR)

    try:
        payload = decode_access_token(token)
    except JWTError:
        raise AuthError(CREDENTIALS_ERROR)

    user_id = payload.get("sub")
    username = payload.get("username")
    email = payload.get("email")
    if user_id is None or username is None or email is None:
        raise AuthError(CREDENTIALS_ERROR)

    try:
        return CurrentUser(id=int(user_id), username=username, email=email)
    except ValueError:
        raise AuthError(CREDENTIALS_ERROR)
