"""Tests for RagMiddleware: skip paths, hypothetical-answer retrieval, scopes, caching."""
import pytest
from unittest.mock import AsyncMock, MagicMock

from assistant.auth.security import Session
from assistant.clients.mock_llm_client import MockLLMClient, classify_message
from assistant.prompt import ModelCallParams, PromptMessage, TextPart, user_message
from assistant.retrieval.rag_middleware import CONTEXT_HEADER, RagMiddleware
from assistant.vectorstore.store import IndexedChunk
from shared.embedder import Embedder

QUESTION = "What time does the morning shift start?"
STATEMENT = "The morning shift starts at 9am."
SESSION = Session(email="ann@example.com")

CHUNKS = [
    IndexedChunk(
        id="ann@example.com/shifts.pdf/0",
        file_path="ann@example.com/shifts.pdf",
        content="Morning shift starts at 9am in the main office.",
    ),
    IndexedChunk(
        id="ann@example.com/shifts.pdf/1",
        file_path="ann@example.com/shifts.pdf",
        content="Parking is available behind the building.",
    ),
]


class CountingEmbedder:
    def __init__(self) -> None:
        self.calls: list[str] = []

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        return [1.0, float(len(text))]


def _params(text: str, metadata=None) -> ModelCallParams:
    return ModelCallParams(
        system="sys",
        messages=[
            PromptMessage(role="assistant", content=[TextPart(text="Hi, how can I help?")]),
            user_message(text),
        ],
        provider_metadata=metadata if metadata is not None else {"files": {"selection": ["shifts.pdf"]}},
    )


def _llm(label: str = "question", answer: str = STATEMENT) -> MagicMock:
    llm = MagicMock()
    llm.classify = AsyncMock(return_value=label)
    llm.generate_text = AsyncMock(return_value=answer)
    return llm


def _store(chunks=CHUNKS) -> MagicMock:
    store = MagicMock()
    store.list_all = AsyncMock(return_value=list(chunks))
    store.query_by_filter = AsyncMock(return_value=list(chunks))
    return store


def test_classification_heuristic() -> None:
    assert classify_message(QUESTION) == "question"
    assert classify_message(STATEMENT) == "statement"
    assert classify_message("thanks") == "other"


@pytest.mark.asyncio
async def test_mock_llm_classify_respects_options() -> None:
    llm = MockLLMClient()
    options = ["question", "statement", "other"]
    assert await llm.classify("", QUESTION, options) == "question"
    assert await llm.classify("", STATEMENT, options) == "statement"


@pytest.mark.asyncio
async def test_no_session_passes_through() -> None:
    llm = _llm()
    middleware = RagMiddleware(llm, MagicMock(), _store())
    params = _params(QUESTION)
    assert await middleware.transform_params(params, None) is params
    llm.classify.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "metadata",
    [None, {}, {"files": {}}, {"files": {"selection": None}}, {"files": {"selection": "a.pdf"}}],
)
async def test_malformed_metadata_passes_through(metadata) -> None:
    llm = _llm()
    middleware = RagMiddleware(llm, MagicMock(), _store())
    params = ModelCallParams(messages=[user_message(QUESTION)], provider_metadata=metadata)
    assert await middleware.transform_params(params, SESSION) is params
    llm.classify.assert_not_called()


@pytest.mark.asyncio
async def test_last_message_not_from_user_passes_through() -> None:
    llm = _llm()
    middleware = RagMiddleware(llm, MagicMock(), _store())
    params = _params(QUESTION)
    params.messages.append(PromptMessage(role="assistant", content=[TextPart(text="ok")]))
    before = params.model_dump_json()
    result = await middleware.transform_params(params, SESSION)
    assert result.model_dump_json() == before
    llm.classify.assert_not_called()


@pytest.mark.asyncio
async def test_statement_leaves_messages_identical() -> None:
    llm = _llm(label="statement")
    embedder = CountingEmbedder()
    store = _store()
    middleware = RagMiddleware(llm, embedder, store)
    params = _params(STATEMENT)
    before = params.model_dump_json()

    result = await middleware.transform_params(params, SESSION)

    assert result.model_dump_json() == before
    assert embedder.calls == []
    llm.generate_text.assert_not_called()
    store.list_all.assert_not_called()


@pytest.mark.asyncio
async def test_question_appends_top_chunks() -> None:
    llm = _llm()
    embedder = Embedder(backend="mock", dim=1536)
    middleware = RagMiddleware(llm, embedder, _store(), top_k=1)
    params = _params(QUESTION)

    result = await middleware.transform_params(params, SESSION)

    llm.classify.assert_awaited_once()
    assert llm.classify.await_args.args[1] == QUESTION
    llm.generate_text.assert_awaited_once_with("Answer the users question:", QUESTION)
    last = result.messages[-1]
    assert last.role == "user"
    assert [p.text for p in last.content] == [QUESTION, CONTEXT_HEADER, CHUNKS[0].content]
    assert result.messages[:-1] == params.messages[:-1]
    # input params are not modified
    assert [p.text for p in params.messages[-1].content] == [QUESTION]


@pytest.mark.asyncio
async def test_question_keeps_at_most_top_k() -> None:
    many = [
        IndexedChunk(id=f"f/{i}", file_path="f", content=f"chunk number {i}") for i in range(15)
    ]
    middleware = RagMiddleware(_llm(), Embedder(backend="mock", dim=256), _store(many), top_k=10)
    result = await middleware.transform_params(_params(QUESTION), SESSION)
    assert len(result.messages[-1].content) == 1 + 1 + 10


@pytest.mark.asyncio
async def test_question_with_empty_corpus_adds_header_only() -> None:
    middleware = RagMiddleware(_llm(), Embedder(backend="mock", dim=64), _store([]))
    result = await middleware.transform_params(_params(QUESTION), SESSION)
    assert [p.text for p in result.messages[-1].content] == [QUESTION, CONTEXT_HEADER]


@pytest.mark.asyncio
async def test_selection_scope_queries_user_file_paths() -> None:
    store = _store()
    middleware = RagMiddleware(_llm(), Embedder(backend="mock", dim=64), store, scope="selection")
    await middleware.transform_params(_params(QUESTION), SESSION)
    store.query_by_filter.assert_awaited_once_with(["ann@example.com/shifts.pdf"])
    store.list_all.assert_not_called()


@pytest.mark.asyncio
async def test_chunk_embeddings_recomputed_without_cache() -> None:
    embedder = CountingEmbedder()
    middleware = RagMiddleware(_llm(), embedder, _store())
    await middleware.transform_params(_params(QUESTION), SESSION)
    await middleware.transform_params(_params(QUESTION), SESSION)
    assert len(embedder.calls) == 2 * (1 + len(CHUNKS))


@pytest.mark.asyncio
async def test_chunk_embeddings_cached_by_id() -> None:
    embedder = CountingEmbedder()
    middleware = RagMiddleware(_llm(), embedder, _store(), cache_embeddings=True)
    await middleware.transform_params(_params(QUESTION), SESSION)
    await middleware.transform_params(_params(QUESTION), SESSION)
    assert len(embedder.calls) == 2 + len(CHUNKS)

    middleware.invalidate([CHUNKS[0].id])
    await middleware.transform_params(_params(QUESTION), SESSION)
    assert embedder.calls[-1] == CHUNKS[0].content
    assert len(embedder.calls) == 2 + len(CHUNKS) + 2


@pytest.mark.asyncio
async def test_cached_embedding_recomputed_when_reupload_changes_content() -> None:
    old = IndexedChunk(id="ann@example.com/a.pdf/0", file_path="ann@example.com/a.pdf", content="old text")
    new = IndexedChunk(
        id="ann@example.com/a.pdf/0",
        file_path="ann@example.com/a.pdf",
        content="brand new replacement text",
    )
    store = MagicMock()
    store.list_all = AsyncMock(side_effect=[[old], [new]])
    embedder = CountingEmbedder()
    middleware = RagMiddleware(_llm(answer="answer"), embedder, store, cache_embeddings=True)

    await middleware.transform_params(_params(QUESTION), SESSION)
    result = await middleware.transform_params(_params(QUESTION), SESSION)

    assert embedder.calls == ["answer", "old text", "answer", "brand new replacement text"]
    assert result.messages[-1].content[-1].text == "brand new replacement text"


@pytest.mark.asyncio
async def test_cache_drops_chunks_of_deleted_files() -> None:
    store = MagicMock()
    store.list_all = AsyncMock(side_effect=[list(CHUNKS), [CHUNKS[1]], list(CHUNKS)])
    embedder = CountingEmbedder()
    middleware = RagMiddleware(_llm(), embedder, store, cache_embeddings=True)

    await middleware.transform_params(_params(QUESTION), SESSION)
    await middleware.transform_params(_params(QUESTION), SESSION)
    assert embedder.calls.count(CHUNKS[0].content) == 1

    # The first chunk reappears after the file is uploaded again.
    await middleware.transform_params(_params(QUESTION), SESSION)
    assert embedder.calls.count(CHUNKS[0].content) == 2
    assert embedder.calls.count(CHUNKS[1].content) == 1
