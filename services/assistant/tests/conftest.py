"""Shared fixtures: mocked DB session factory and an in-memory vector index."""
import pytest
from unittest.mock import AsyncMock, MagicMock

from assistant.retrieval.similarity import cosine_similarity
from assistant.vectorstore.base import QueryMatch, VectorIndex, VectorRecord


class InMemoryIndex(VectorIndex):
    """Brute-force cosine index keeping records in a dict."""

    def __init__(self) -> None:
        self.records: dict[str, VectorRecord] = {}
        self.failing_ids: set[str] = set()

    async def upsert(self, records: list[VectorRecord]) -> None:
        for r in records:
            self.records[r.id] = r

    async def query(self, vector, top_k, filter=None):
        candidates = list(self.records.values())
        if filter and "filePath" in filter:
            allowed = set(filter["filePath"]["$in"])
            candidates = [r for r in candidates if r.metadata.get("filePath") in allowed]
        scored = [
            QueryMatch(id=r.id, score=cosine_similarity(vector, r.values), metadata=dict(r.metadata))
            for r in candidates
        ]
        scored.sort(key=lambda m: m.score, reverse=True)
        return scored[:top_k]

    async def fetch(self, ids):
        return [self.records[i] for i in ids if i in self.records]

    async def list_ids(self, prefix=None):
        return [i for i in self.records if prefix is None or i.startswith(prefix)]

    async def delete_one(self, id):
        if id in self.failing_ids:
            raise RuntimeError(f"cannot delete {id}")
        self.records.pop(id, None)

    async def delete_many(self, ids):
        for i in ids:
            self.records.pop(i, None)


@pytest.fixture
def mock_session_factory() -> MagicMock:
    session = MagicMock()
    session.commit = AsyncMock()
    cm = MagicMock()
    cm.__aenter__ = AsyncMock(return_value=session)
    cm.__aexit__ = AsyncMock(return_value=None)
    factory = MagicMock()
    factory.return_value = cm
    return factory


@pytest.fixture
def memory_index() -> InMemoryIndex:
    return InMemoryIndex()
