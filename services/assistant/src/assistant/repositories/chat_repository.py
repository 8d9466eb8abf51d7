"""Chat repository: one row per chat, message list overwritten on every turn."""
from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from assistant.repositories.models import Chat


class ChatRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def save(self, chat_id: str, messages: list[dict], author: str) -> Chat:
        """Create the chat on first message, otherwise replace its messages."""
        chat = await self.get_by_id(chat_id)
        if chat is not None:
            chat.messages = messages
            await self._session.flush()
            return chat
        chat = Chat(
            id=chat_id,
            created_at=datetime.now(timezone.utc),
            messages=messages,
            author=author,
        )
        self._session.add(chat)
        await self._session.flush()
        return chat

    async def get_by_id(self, chat_id: str) -> Chat | None:
        result = await self._session.execute(select(Chat).where(Chat.id == chat_id))
        return result.scalar_one_or_none()

    async def list_by_author(self, author: str) -> list[Chat]:
        q = select(Chat).where(Chat.author == author).order_by(Chat.created_at.desc())
        result = await self._session.execute(q)
        return list(result.scalars().all())

    async def delete(self, chat_id: str, author: str) -> int:
        result = await self._session.execute(
            delete(Chat).where(Chat.id == chat_id, Chat.author == author)
        )
        return result.rowcount or 0
