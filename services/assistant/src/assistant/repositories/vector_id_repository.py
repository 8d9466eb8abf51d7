"""Tracking table of vector ids per file path (workaround for missing delete-by-filter)."""
import json
from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from assistant.repositories.models import VectorIdTracking


class VectorIdRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def store(self, file_path: str, ids: list[str]) -> None:
        """Replace the tracked ids of file_path; a second upload overwrites the first."""
        await self._session.execute(
            delete(VectorIdTracking).where(VectorIdTracking.file_path == file_path)
        )
        self._session.add(
            VectorIdTracking(
                file_path=file_path,
                vector_ids=json.dumps(ids),
                created_at=datetime.now(timezone.utc),
            )
        )
        await self._session.flush()

    async def get_ids(self, file_path: str) -> list[str]:
        result = await self._session.execute(
            select(VectorIdTracking)
            .where(VectorIdTracking.file_path == file_path)
            .order_by(VectorIdTracking.created_at.desc())
            .limit(1)
        )
        row = result.scalar_one_or_none()
        if row is None:
            return []
        return list(json.loads(row.vector_ids))

    async def delete(self, file_path: str) -> int:
        result = await self._session.execute(
            delete(VectorIdTracking).where(VectorIdTracking.file_path == file_path)
        )
        return result.rowcount or 0
