"""Upload pipeline: blob store -> text extraction -> chunk -> embed -> relational + vector index."""
import asyncio
import time

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from assistant.auth.security import Session
from assistant.chunking.base import BaseChunker
from assistant.clients.blob_storage import BlobStorage
from assistant.errors import EmptyDocumentError
from assistant.loaders import loader_for
from assistant.repositories.chunk_repository import ChunkRecord, ChunkRepository
from assistant.results import UploadResult
from assistant.vectorstore.store import VectorStore
from shared.embedder import Embedder

log = structlog.get_logger()


def file_path_for(email: str, filename: str) -> str:
    return f"{email}/{filename}"


class UploadService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        blob_storage: BlobStorage,
        chunker: BaseChunker,
        embedder: Embedder,
        store: VectorStore,
    ) -> None:
        self._session_factory = session_factory
        self._blobs = blob_storage
        self._chunker = chunker
        self._embedder = embedder
        self._store = store

    async def upload(self, session: Session, filename: str, body: bytes) -> UploadResult:
        """Store the file and index its chunks.

        The blob is written first. If storing it fails the result carries no
        file URL; if indexing fails afterwards it still carries the URL.
        """
        if not body:
            raise ValueError("Request body is empty")
        start = time.perf_counter()
        file_path = file_path_for(session.email, filename)
        try:
            blob = await self._blobs.put(file_path, body)
        except Exception as e:
            log.exception("upload_store_failed", file_path=file_path)
            return UploadResult(success=False, message=f"Failed to store file: {e}")
        log.info("upload_stored", file_path=file_path, size=len(body))

        try:
            chunks = await self._index(file_path, filename, body)
        except Exception as e:
            log.exception("upload_indexing_failed", file_path=file_path)
            return UploadResult(
                success=False,
                message=f"File stored but indexing failed: {e}",
                file_url=blob.download_url,
            )

        duration_ms = round((time.perf_counter() - start) * 1000)
        log.info("upload_indexed", file_path=file_path, chunks=chunks, duration_ms=duration_ms)
        return UploadResult(success=True, file_url=blob.download_url, chunks=chunks)

    async def _index(self, file_path: str, filename: str, body: bytes) -> int:
        loader = loader_for(filename)
        text = await asyncio.to_thread(loader.load_bytes, body)
        pieces = list(self._chunker.chunk(text))
        if not pieces:
            raise EmptyDocumentError("No text could be extracted from the file")

        embeddings = await self._embedder.embed_many(pieces)
        records = [
            ChunkRecord(
                id=f"{file_path}/{i}",
                file_path=file_path,
                content=content,
                embedding=embedding,
            )
            for i, (content, embedding) in enumerate(zip(pieces, embeddings))
        ]
        async with self._session_factory() as db:
            repo = ChunkRepository(db)
            # Re-uploading a file replaces its chunks.
            await repo.delete_by_file_path(file_path)
            await repo.insert_many(records)
            await db.commit()
        await self._store.upsert(records)
        return len(records)
