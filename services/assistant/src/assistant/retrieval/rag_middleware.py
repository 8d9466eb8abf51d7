"""Hypothetical-document retrieval applied to model-call params before the chat model runs.

For a user question the middleware asks a small model for a hypothetical
answer, embeds it, ranks the knowledge-base chunks by cosine similarity to
that embedding and appends the best ones to the user's message as extra text
parts. Anything that is not a question goes to the model untouched.
"""
import asyncio

import structlog
from pydantic import BaseModel, ValidationError

from assistant.auth.security import Session
from assistant.clients.llm_base import LLMClient
from assistant.prompt import ModelCallParams, TextPart
from assistant.retrieval.similarity import rank_by_similarity
from assistant.vectorstore.store import IndexedChunk, VectorStore
from shared.embedder import Embedder

log = structlog.get_logger()

CLASSIFY_SYSTEM = "classify the user message as a question, statement, or other"
CLASSIFY_OPTIONS = ["question", "statement", "other"]
HYPOTHETICAL_SYSTEM = "Answer the users question:"
CONTEXT_HEADER = "Here is some relevant information that you can use to answer the question:"


class _Files(BaseModel):
    selection: list[str]


class FileSelection(BaseModel):
    """Provider metadata shape carrying the files picked in the UI."""

    files: _Files


class RagMiddleware:
    def __init__(
        self,
        llm: LLMClient,
        embedder: Embedder,
        store: VectorStore,
        top_k: int = 10,
        scope: str = "corpus",
        cache_embeddings: bool = False,
    ) -> None:
        self._llm = llm
        self._embedder = embedder
        self._store = store
        self._top_k = top_k
        self._scope = scope
        # chunk id -> (content the vector was computed from, vector)
        self._cache: dict[str, tuple[str, list[float]]] | None = {} if cache_embeddings else None

    async def transform_params(
        self, params: ModelCallParams, session: Session | None
    ) -> ModelCallParams:
        """Return params with retrieved context appended, or params itself when skipped."""
        if session is None:
            return params
        try:
            selection = FileSelection.model_validate(params.provider_metadata)
        except ValidationError:
            log.debug("rag_skipped", reason="no_file_selection")
            return params

        if not params.messages or params.messages[-1].role != "user":
            return params
        recent = params.messages[-1]
        question = "\n".join(p.text for p in recent.content if p.type == "text")

        label = await self._llm.classify(CLASSIFY_SYSTEM, question, CLASSIFY_OPTIONS)
        if label != "question":
            log.info("rag_skipped", reason="not_a_question", classification=label)
            return params

        hypothetical = await self._llm.generate_text(HYPOTHETICAL_SYSTEM, question)
        query_vector = await self._embedder.embed(hypothetical)

        chunks = await self._candidates(session, selection.files.selection)
        vectors = await self._embed_chunks(chunks)
        top = rank_by_similarity(query_vector, list(zip(chunks, vectors)), self._top_k)
        log.info(
            "rag_context_added",
            scope=self._scope,
            candidates=len(chunks),
            selected=len(top),
        )

        augmented = recent.model_copy(
            update={
                "content": [
                    *recent.content,
                    TextPart(text=CONTEXT_HEADER),
                    *(TextPart(text=str(chunk.content)) for chunk, _ in top),
                ]
            }
        )
        return params.model_copy(update={"messages": [*params.messages[:-1], augmented]})

    async def _candidates(self, session: Session, selection: list[str]) -> list[IndexedChunk]:
        if self._scope == "selection":
            paths = [f"{session.email}/{name}" for name in selection]
            return await self._store.query_by_filter(paths)
        chunks = await self._store.list_all()
        if self._cache is not None:
            # Ids gone from the index belong to deleted files.
            live = {c.id for c in chunks}
            for stale in [i for i in self._cache if i not in live]:
                del self._cache[stale]
        return chunks

    async def _embed_chunks(self, chunks: list[IndexedChunk]) -> list[list[float]]:
        async def one(chunk: IndexedChunk) -> list[float]:
            if self._cache is not None:
                cached = self._cache.get(chunk.id)
                if cached is not None and cached[0] == chunk.content:
                    return cached[1]
            vector = await self._embedder.embed(chunk.content)
            if self._cache is not None:
                self._cache[chunk.id] = (chunk.content, vector)
            return vector

        return list(await asyncio.gather(*(one(c) for c in chunks)))

    def invalidate(self, chunk_ids: list[str] | None = None) -> None:
        """Drop cached chunk embeddings (all of them when chunk_ids is None)."""
        if self._cache is None:
            return
        if chunk_ids is None:
            self._cache.clear()
            return
        for chunk_id in chunk_ids:
            self._cache.pop(chunk_id, None)
