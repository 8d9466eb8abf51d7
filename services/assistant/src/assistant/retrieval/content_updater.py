"""In-place edits of indexed chunk content (the updateInformation tool)."""
import asyncio
import re
from collections.abc import Callable

import structlog

from assistant.errors import NoMatchingContentError
from assistant.repositories.chunk_repository import ChunkRecord
from assistant.results import UpdateSucceeded
from assistant.vectorstore.store import VectorStore
from shared.embedder import Embedder

log = structlog.get_logger()


def replace_first(content: str, search: str, replacement: str) -> str:
    """Replace the first case-insensitive literal occurrence of search."""
    return re.sub(re.escape(search), lambda _: replacement, content, count=1, flags=re.IGNORECASE)


class ContentUpdater:
    """Rewrites the nearest chunks to a search query and re-indexes them under the same ids.

    Every one of the top-k neighbours is rewritten, even those that do not
    contain the search text (for those the content is unchanged and only
    re-embedded).
    """

    def __init__(
        self,
        embedder: Embedder,
        store: VectorStore,
        top_k: int = 5,
        on_replaced: Callable[[list[str]], None] | None = None,
    ) -> None:
        self._embedder = embedder
        self._store = store
        self._top_k = top_k
        self._on_replaced = on_replaced

    async def update(
        self, search_query: str, new_content: str, context: str | None = None
    ) -> UpdateSucceeded:
        query_vector = await self._embedder.embed(search_query)
        matches = await self._store.query_by_vector(query_vector, top_k=self._top_k)
        if not matches:
            raise NoMatchingContentError("Could not find matching content to update")

        updated = [replace_first(m.content, search_query, new_content) for m in matches]
        vectors = await asyncio.gather(*(self._embedder.embed(text) for text in updated))
        records = [
            ChunkRecord(id=m.id, file_path=m.file_path, content=text, embedding=vector)
            for m, text, vector in zip(matches, updated, vectors)
        ]
        await self._store.replace(records)
        ids = [r.id for r in records]
        if self._on_replaced is not None:
            self._on_replaced(ids)
        log.info("content_updated", chunks=len(records), ids=ids, with_context=context is not None)
        return UpdateSucceeded(
            message=f"Content updated successfully in {len(records)} chunks",
            updated_chunks=len(records),
            old_content=matches[0].content,
            new_content=records[0].content,
        )
