"""Chunk repository: relational copy of indexed chunks."""
from dataclasses import dataclass

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from assistant.repositories.models import Chunk


@dataclass
class ChunkRecord:
    """A chunk ready to be written to both the relational table and the vector index."""

    id: str
    file_path: str
    content: str
    embedding: list[float]


class ChunkRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def insert_many(self, chunks: list[ChunkRecord]) -> None:
        self._session.add_all(
            [
                Chunk(id=c.id, file_path=c.file_path, content=c.content, embedding=c.embedding)
                for c in chunks
            ]
        )
        await self._session.flush()

    async def delete_by_file_path(self, file_path: str) -> int:
        result = await self._session.execute(
            delete(Chunk).where(Chunk.file_path == file_path)
        )
        return result.rowcount or 0

    async def list_file_paths(self, prefix: str) -> list[str]:
        result = await self._session.execute(
            select(Chunk.file_path)
            .where(Chunk.file_path.startswith(prefix, autoescape=True))
            .distinct()
            .order_by(Chunk.file_path)
        )
        return list(result.scalars().all())
