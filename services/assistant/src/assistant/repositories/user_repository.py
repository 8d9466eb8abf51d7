"""User repository: lookup and signup."""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from assistant.auth.security import hash_password
from assistant.repositories.models import User


class UserRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, email: str) -> User | None:
        result = await self._session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def create(self, email: str, password: str, role: str = "user") -> User:
        user = User(email=email, password=hash_password(password), role=role)
        self._session.add(user)
        await self._session.flush()
        return user
