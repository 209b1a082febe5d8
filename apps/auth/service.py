from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple
from framework.config import settings
from framework.exceptions.errors import AuthError, DuplicateError
from framework.logging.logger import get_logger
from framework.security import (
    create_access_token,
    generate_refresh_token,
    get_password_hash,
    verify_password_or_dummy,
)
from apps.unit_of_work import InventoryUnitOfWork
from .models import User
from .schemas import AuthResponse

logger = get_logger("auth_service")


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes read back from the store as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class AuthService:
    """
    Registration, login and token lifecycle.

    Access tokens are stateless JWTs. Each issued response also rotates a
    random refresh token stored on the user, which is what refresh() and
    revoke() operate on.
    """

    def __init__(self, uow: InventoryUnitOfWork):
        """Initialize Auth Service with UnitOfWork."""
        self.uow = uow

    async def register(self, username: str, email: str, password: str) -> AuthResponse:
        """Register a new user and sign them in."""
        users = self.uow.users

        if await users.get_by_email(email):
            raise DuplicateError("User with this email already exists")
        if await users.get_by_username(username):
            raise DuplicateError("Username already taken")

        user = User(
            username=username,
            email=email,
            hashed_password=get_password_hash(password),
        )
        await users.add(user)
        try:
            await self.uow.save()
        except DuplicateError as e:
            # Lost a race with a concurrent registration
            raise DuplicateError(self._duplicate_message(e.detail), detail=e.detail) from e

        logger.info(f"User {username} registered (id={user.id})")
        return await self.issue_tokens(user)

    async def login(self, email: str, password: str) -> AuthResponse:
        """Authenticate by email and password."""
        user = await self.uow.users.get_by_email(email)
        hashed = user.hashed_password if user else None
        if not verify_password_or_dummy(password, hashed) or user is None:
            logger.info("Login rejected")
            raise AuthError("Invalid email or password")

        logger.info(f"User {user.username} authenticated successfully")
        return await self.issue_tokens(user)

    async def refresh(self, refresh_token: str) -> AuthResponse:
        """Exchange a live refresh token for a new token pair."""
        user = await self.uow.users.get_by_refresh_token(refresh_token)
        now = datetime.now(timezone.utc)
        if user is None or user.refresh_token_expiry is None or as_utc(user.refresh_token_expiry) <= now:
            raise AuthError("Invalid or expired refresh token")

        logger.info(f"Refresh token used by user {user.username}")
        return await self.issue_tokens(user)

    async def revoke(self, refresh_token: str) -> bool:
        """Clear a stored refresh token. Returns False when it is unknown."""
        user = await self.uow.users.get_by_refresh_token(refresh_token)
        if user is None:
            return False

        user.refresh_token = None
        user.refresh_token_expiry = datetime.now(timezone.utc)
        await self.uow.users.update(user)
        await self.uow.save()

        logger.info(f"Refresh token revoked for user {user.username}")
        return True

    def generate_token(self, user: User) -> Tuple[str, datetime]:
        """Signed access token carrying id, username and email claims."""
        return create_access_token(
            user.id,
            claims={"username": user.username, "email": user.email},
            expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        )

    async def issue_tokens(self, user: User) -> AuthResponse:
        """Issue an access token and rotate the user's refresh token."""
        access_token, expires = self.generate_token(user)
        refresh_token = generate_refresh_token()

        user.refresh_token = refresh_token
        user.refresh_token_expiry = datetime.now(timezone.utc) + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
        await self.uow.users.update(user)
        await self.uow.save()

        return AuthResponse(
            access_token=access_token,
            refresh_token=refresh_token,
            expires=expires,
            username=user.username,
            email=user.email,
        )

    @staticmethod
    def _duplicate_message(detail) -> str:
        text = str(detail or "").lower()
        if "email" in text:
            return "User with this email already exists"
        if "username" in text:
            return "Username already taken"
        return "User already exists"
