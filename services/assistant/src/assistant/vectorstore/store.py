"""Vector store adapter: hosted index plus the relational id-tracking table."""
from dataclasses import dataclass
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from assistant.repositories.chunk_repository import ChunkRecord
from assistant.repositories.vector_id_repository import VectorIdRepository
from assistant.results import DeleteFailed, DeleteResult, DeleteSucceeded
from assistant.vectorstore.base import QueryMatch, VectorIndex, VectorRecord

log = structlog.get_logger()

FILTER_QUERY_TOP_K = 1000


@dataclass
class IndexedChunk:
    """A chunk as read back from the index."""

    id: str
    file_path: str
    content: str
    score: float = 0.0
    values: list[float] | None = None


def _to_chunk(match: QueryMatch) -> IndexedChunk:
    return IndexedChunk(
        id=match.id,
        file_path=str(match.metadata.get("filePath", "")),
        content=str(match.metadata.get("content", "")),
        score=match.score,
    )


def _metadata(chunk: ChunkRecord) -> dict[str, Any]:
    return {"filePath": chunk.file_path, "content": chunk.content}


class VectorStore:
    def __init__(
        self,
        index: VectorIndex,
        session_factory: async_sessionmaker[AsyncSession],
        dimension: int = 1536,
    ) -> None:
        self._index = index
        self._session_factory = session_factory
        self._dimension = dimension

    async def upsert(self, chunks: list[ChunkRecord]) -> None:
        """Write vectors keyed by chunk id and record their ids per file path."""
        if not chunks:
            return
        by_path: dict[str, list[str]] = {}
        for c in chunks:
            by_path.setdefault(c.file_path, []).append(c.id)
        async with self._session_factory() as session:
            repo = VectorIdRepository(session)
            for file_path, ids in by_path.items():
                await repo.store(file_path, ids)
            await session.commit()
        await self._index.upsert(
            [VectorRecord(id=c.id, values=c.embedding, metadata=_metadata(c)) for c in chunks]
        )
        log.info("vectors_upserted", count=len(chunks), file_paths=list(by_path))

    async def query_by_filter(self, file_paths: list[str]) -> list[IndexedChunk]:
        """All chunks whose filePath is in file_paths (metadata filter, neutral query vector)."""
        if not file_paths:
            return []
        # Cosine indexes reject an all-zero vector.
        neutral = [1.0] * self._dimension
        matches = await self._index.query(
            neutral,
            top_k=FILTER_QUERY_TOP_K,
            filter={"filePath": {"$in": list(file_paths)}},
        )
        return [_to_chunk(m) for m in matches]

    async def query_by_vector(
        self,
        vector: list[float],
        top_k: int = 5,
        filter: dict[str, Any] | None = None,
    ) -> list[IndexedChunk]:
        matches = await self._index.query(vector, top_k=top_k, filter=filter)
        return [_to_chunk(m) for m in matches]

    async def list_all(self, prefix: str | None = None) -> list[IndexedChunk]:
        """Every chunk in the index with its stored values."""
        ids = await self._index.list_ids(prefix)
        if not ids:
            return []
        records = await self._index.fetch(ids)
        return [
            IndexedChunk(
                id=r.id,
                file_path=str(r.metadata.get("filePath", "")),
                content=str(r.metadata.get("content", "")),
                values=r.values or None,
            )
            for r in records
        ]

    async def replace(self, chunks: list[ChunkRecord]) -> None:
        """Delete the given ids then upsert the new vectors under the same ids."""
        if not chunks:
            return
        await self._index.delete_many([c.id for c in chunks])
        await self._index.upsert(
            [VectorRecord(id=c.id, values=c.embedding, metadata=_metadata(c)) for c in chunks]
        )
        log.info("vectors_replaced", ids=[c.id for c in chunks])

    async def delete_by_file_path(self, file_path: str) -> DeleteResult:
        """Delete every tracked vector of file_path, then the tracking row.

        Individual vector failures are logged and collected; the tracking row
        is removed regardless. Never raises.
        """
        try:
            async with self._session_factory() as session:
                ids = await VectorIdRepository(session).get_ids(file_path)
            if not ids:
                log.info("vector_ids_not_tracked", file_path=file_path)

            deleted = 0
            failed: list[str] = []
            for vector_id in ids:
                try:
                    await self._index.delete_one(vector_id)
                    deleted += 1
                except Exception as e:
                    failed.append(vector_id)
                    log.warning("vector_delete_failed", vector_id=vector_id, error=str(e))

            async with self._session_factory() as session:
                await VectorIdRepository(session).delete(file_path)
                await session.commit()
        except Exception as e:
            log.exception("delete_by_file_path_failed", file_path=file_path)
            await self._drop_tracking(file_path)
            return DeleteFailed(error=str(e))

        log.info(
            "vectors_deleted", file_path=file_path, deleted=deleted, failed=len(failed)
        )
        if failed:
            return DeleteFailed(
                error=f"failed to delete {len(failed)} of {len(ids)} vectors",
                deleted_count=deleted,
                failed_ids=failed,
            )
        return DeleteSucceeded(deleted_count=deleted)

    async def _drop_tracking(self, file_path: str) -> None:
        """Last-chance removal of the tracking row after an unexpected failure."""
        try:
            async with self._session_factory() as session:
                await VectorIdRepository(session).delete(file_path)
                await session.commit()
        except Exception as e:
            log.error("vector_ids_cleanup_failed", file_path=file_path, error=str(e))
