"""Semantic search over the index for the getInformation tool."""
import structlog

from assistant.results import RelevantContent
from assistant.vectorstore.store import VectorStore
from shared.embedder import Embedder

log = structlog.get_logger()


class RetrievalService:
    def __init__(self, embedder: Embedder, store: VectorStore, top_k: int = 4) -> None:
        self._embedder = embedder
        self._store = store
        self._top_k = top_k

    async def find_relevant_content(self, question: str) -> list[RelevantContent]:
        vector = await self._embedder.embed(question)
        matches = await self._store.query_by_vector(vector, top_k=self._top_k)
        log.info("relevant_content_found", count=len(matches))
        return [RelevantContent(name=m.content, similarity=m.score) for m in matches]
