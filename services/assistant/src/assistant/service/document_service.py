"""Listing and deleting a user's uploaded files."""
import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from assistant.auth.security import Session
from assistant.clients.blob_storage import BlobStorage
from assistant.repositories.chunk_repository import ChunkRepository
from assistant.results import DeleteResult
from assistant.service.upload_service import file_path_for
from assistant.vectorstore.store import VectorStore

log = structlog.get_logger()


class DocumentService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        blob_storage: BlobStorage,
        store: VectorStore,
    ) -> None:
        self._session_factory = session_factory
        self._blobs = blob_storage
        self._store = store

    async def list_files(self, session: Session) -> list[dict]:
        """Uploaded files of the session user; pathname is relative to the user's folder."""
        prefix = f"{session.email}/"
        blobs = await self._blobs.list(prefix)
        async with self._session_factory() as db:
            indexed = set(await ChunkRepository(db).list_file_paths(prefix))
        return [
            {"pathname": b.pathname[len(prefix):], "url": b.url, "indexed": b.pathname in indexed}
            for b in blobs
            if b.pathname.startswith(prefix)
        ]

    async def delete_file(self, session: Session, filename: str) -> DeleteResult:
        """Remove the file's chunks from both stores, then the blob itself.

        A failed blob deletion is logged; the vector result is returned as is.
        """
        file_path = file_path_for(session.email, filename)
        async with self._session_factory() as db:
            removed = await ChunkRepository(db).delete_by_file_path(file_path)
            await db.commit()
        result = await self._store.delete_by_file_path(file_path)
        blob_ok = True
        try:
            await self._blobs.delete(file_path)
        except Exception as e:
            blob_ok = False
            log.warning("blob_delete_failed", file_path=file_path, error=str(e))
        log.info(
            "file_deleted",
            file_path=file_path,
            chunk_rows=removed,
            vectors_ok=result.success,
            blob_ok=blob_ok,
        )
        return result
