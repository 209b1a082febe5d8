"""Auth module repository implementations."""

from typing import Optional
from framework.repository.base import BaseRepository
from .models import User


class UserRepository(BaseRepository[User]):
    """User repository."""

    def __init__(self, session):
        super().__init__(session, User)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Find user by email (exact match)."""
        return await self.single_or_default(User.email == email)

    async def get_by_username(self, username: str) -> Optional[User]:
        """Find user by username (exact match)."""
        return await self.single_or_default(User.username == username)

    async def get_by_refresh_token(self, refresh_token: str) -> Optional[User]:
        """Find the user currently holding a refresh token."""
        return await self.single_or_default(User.refresh_token == refresh_token)
