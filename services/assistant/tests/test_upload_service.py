"""Tests for UploadService: empty body, chunk ids, partial success on indexing failure."""
import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from assistant.auth.security import Session
from assistant.chunking import RecursiveChunker
from assistant.clients.blob_storage import LocalBlobStorage
from assistant.errors import UpstreamError
from assistant.service.upload_service import UploadService

SESSION = Session(email="ann@example.com")
TEXT = b"Shift schedule.\n\nThe morning shift starts at 8am.\n\nThe evening shift starts at 4pm."


def _embedder(dim: int = 3) -> MagicMock:
    embedder = MagicMock()
    embedder.embed_many = AsyncMock(side_effect=lambda texts: [[0.1] * dim for _ in texts])
    return embedder


def _store() -> MagicMock:
    store = MagicMock()
    store.upsert = AsyncMock()
    return store


@pytest.mark.asyncio
async def test_empty_body_rejected_before_embedding(tmp_path, mock_session_factory) -> None:
    embedder = _embedder()
    service = UploadService(
        mock_session_factory, LocalBlobStorage(tmp_path), RecursiveChunker(), embedder, _store()
    )
    with pytest.raises(ValueError):
        await service.upload(SESSION, "notes.txt", b"")
    embedder.embed_many.assert_not_called()
    assert list(tmp_path.iterdir()) == []


@pytest.mark.asyncio
async def test_upload_indexes_chunks(tmp_path, mock_session_factory) -> None:
    embedder = _embedder()
    store = _store()
    service = UploadService(
        mock_session_factory, LocalBlobStorage(tmp_path), RecursiveChunker(40), embedder, store
    )
    with patch("assistant.service.upload_service.ChunkRepository") as CR:
        CR.return_value.delete_by_file_path = AsyncMock(return_value=0)
        CR.return_value.insert_many = AsyncMock()
        result = await service.upload(SESSION, "notes.txt", TEXT)

    assert result.success is True
    assert result.chunks == 3
    assert result.file_url.startswith("file://")
    assert (tmp_path / "ann@example.com" / "notes.txt").read_bytes() == TEXT
    embedder.embed_many.assert_awaited_once_with(
        ["Shift schedule.", "The morning shift starts at 8am.", "The evening shift starts at 4pm."]
    )
    records = store.upsert.await_args.args[0]
    assert [r.id for r in records] == [f"ann@example.com/notes.txt/{i}" for i in range(3)]
    assert {r.file_path for r in records} == {"ann@example.com/notes.txt"}
    CR.return_value.delete_by_file_path.assert_awaited_once_with("ann@example.com/notes.txt")
    CR.return_value.insert_many.assert_awaited_once_with(records)


@pytest.mark.asyncio
async def test_indexing_failure_returns_file_url(tmp_path, mock_session_factory) -> None:
    embedder = MagicMock()
    embedder.embed_many = AsyncMock(side_effect=httpx.ConnectError("embeddings unreachable"))
    store = _store()
    service = UploadService(
        mock_session_factory, LocalBlobStorage(tmp_path), RecursiveChunker(), embedder, store
    )
    result = await service.upload(SESSION, "notes.txt", TEXT)

    assert result.success is False
    assert result.file_url.startswith("file://")
    assert "indexing failed" in result.message
    store.upsert.assert_not_called()
    dumped = result.model_dump(by_alias=True, exclude_none=True)
    assert dumped["fileUrl"] == result.file_url


@pytest.mark.asyncio
async def test_document_without_text_is_partial_success(tmp_path, mock_session_factory) -> None:
    embedder = _embedder()
    service = UploadService(
        mock_session_factory, LocalBlobStorage(tmp_path), RecursiveChunker(), embedder, _store()
    )
    result = await service.upload(SESSION, "blank.txt", b"   \n\n  ")
    assert result.success is False
    embedder.embed_many.assert_not_called()


@pytest.mark.asyncio
async def test_blob_store_failure_returns_result(mock_session_factory) -> None:
    blobs = MagicMock()
    blobs.put = AsyncMock(side_effect=UpstreamError("blob", "503 Service Unavailable"))
    embedder = _embedder()
    store = _store()
    service = UploadService(mock_session_factory, blobs, RecursiveChunker(), embedder, store)

    result = await service.upload(SESSION, "a.pdf", b"%PDF")

    assert result.success is False
    assert result.file_url is None
    assert result.message.startswith("Failed to store file:")
    assert "503" in result.message
    embedder.embed_many.assert_not_called()
    store.upsert.assert_not_called()
