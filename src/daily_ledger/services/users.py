"""User profile and goals."""

from dataclasses import dataclass
from typing import Protocol

from daily_ledger.domain.users import DEFAULT_GOALS, UserGoals, UserProfile


class UserRepository(Protocol):
    """Persistence interface for user profiles."""

    async def get_user(self, user_id: str) -> UserProfile | None:
        """Return a user profile if present."""

    async def save_user(self, user: UserProfile) -> None:
        """Insert or replace a user profile."""


@dataclass
class UserService:
    """Application service for user profiles."""

    repository: UserRepository

    async def get_profile(self, user_id: str) -> UserProfile | None:
        return await self.repository.get_user(user_id)

    async def save_profile(self, user: UserProfile) -> UserProfile:
        await self.repository.save_user(user)
        return user

    async def get_goals(self, user_id: str) -> UserGoals:
        """Return the user's goals, or the defaults when none are set."""
        user = await self.repository.get_user(user_id)
        if user is None or user.goals is None:
            return DEFAULT_GOALS
        return user.goals
