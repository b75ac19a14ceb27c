"""Repository for User entity."""

from sqlmodel import select

from src.household.models.master import User
from src.household.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User entity in the master database."""

    model = User

    async def get_by_email(self, email: str) -> User | None:
        """Get user by normalized email address."""
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def exists_by_email(self, email: str) -> bool:
        """Check if a user with the given email exists."""
        user = await self.get_by_email(email)
        return user is not None

    async def get_many(self, user_ids: list[str]) -> list[User]:
        if not user_ids:
            return []
        result = await self.session.execute(
            select(User).where(User.id.in_(user_ids))  # type: ignore[attr-defined]
        )
        return list(result.scalars().all())
