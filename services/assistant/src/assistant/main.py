"""Assistant service entrypoint."""
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from prometheus_client import make_asgi_app
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from shared.embedder import Embedder
from shared.http_client import create_http_client
from shared.logging import configure_logging
from shared.middleware import RequestIdMiddleware
from shared.schemas import HealthResponse

from assistant.api.routes import router
from assistant.chunking import RecursiveChunker
from assistant.clients import (
    BlobStorage,
    LLMClient,
    LocalBlobStorage,
    MockLLMClient,
    OpenAILLMClient,
    VercelBlobStorage,
)
from assistant.config import AssistantSettings
from assistant.retrieval import ContentUpdater, RagMiddleware, RetrievalService
from assistant.service import ChatService, DocumentService, UploadService
from assistant.vectorstore import PineconeIndex, VectorStore, create_pinecone_http_client

_settings: AssistantSettings | None = None

log = structlog.get_logger()


def get_settings() -> AssistantSettings:
    global _settings
    if _settings is None:
        _settings = AssistantSettings()
    return _settings


def _build_llm(settings: AssistantSettings, openai_http) -> LLMClient:
    if settings.llm_mock:
        return MockLLMClient()
    return OpenAILLMClient(
        openai_http,
        chat_model=settings.chat_model,
        helper_model=settings.helper_model,
        attempts=settings.upstream_attempts,
    )


def _build_blob_storage(settings: AssistantSettings, blob_http) -> BlobStorage:
    if settings.blob_backend == "vercel":
        return VercelBlobStorage(
            blob_http, settings.blob_read_write_token, attempts=settings.upstream_attempts
        )
    return LocalBlobStorage(settings.blob_local_dir)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    engine = create_async_engine(settings.database_url, echo=False)
    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    openai_http = create_http_client(
        timeout=settings.upstream_timeout_seconds,
        base_url=settings.openai_base_url,
        headers={"Authorization": f"Bearer {settings.openai_api_key}"},
    )
    pinecone_http = create_pinecone_http_client(
        settings.pinecone_index_host,
        settings.pinecone_api_key,
        api_version=settings.pinecone_api_version,
        timeout=settings.upstream_timeout_seconds,
    )
    blob_http = create_http_client(
        timeout=settings.upstream_timeout_seconds, base_url=settings.blob_api_url
    )

    embedder = Embedder(
        backend=settings.embedder_backend,
        model_name=settings.embedding_model,
        dim=settings.embedding_dim,
        http_client=openai_http,
        attempts=settings.upstream_attempts,
    )
    llm = _build_llm(settings, openai_http)
    index = PineconeIndex(
        pinecone_http, namespace=settings.pinecone_namespace, attempts=settings.upstream_attempts
    )
    store = VectorStore(index, session_factory, dimension=settings.embedding_dim)
    blob_storage = _build_blob_storage(settings, blob_http)

    middleware = RagMiddleware(
        llm,
        embedder,
        store,
        top_k=settings.hyde_top_k,
        scope=settings.hyde_scope,
        cache_embeddings=settings.hyde_cache_embeddings,
    )
    retrieval = RetrievalService(embedder, store, top_k=settings.relevant_content_top_k)
    updater = ContentUpdater(
        embedder, store, top_k=settings.update_top_k, on_replaced=middleware.invalidate
    )

    app.state.settings = settings
    app.state.session_factory = session_factory
    app.state.engine = engine
    app.state.chat_service = ChatService(
        session_factory,
        llm,
        middleware,
        retrieval,
        updater,
        max_steps=settings.max_steps,
    )
    app.state.upload_service = UploadService(
        session_factory,
        blob_storage,
        RecursiveChunker(settings.chunk_size),
        embedder,
        store,
    )
    app.state.document_service = DocumentService(session_factory, blob_storage, store)
    log.info(
        "assistant_started",
        embedder=embedder.backend,
        llm="mock" if settings.llm_mock else settings.chat_model,
        blob_backend=settings.blob_backend,
        hyde_scope=settings.hyde_scope,
    )
    yield
    await openai_http.aclose()
    await pinecone_http.aclose()
    await blob_http.aclose()
    await engine.dispose()


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(json_logs=settings.json_logs, level=settings.log_level)
    app = FastAPI(title="Assistant Service", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.add_middleware(RequestIdMiddleware)

    app.include_router(router)

    metrics_app = make_asgi_app()
    app.mount("/metrics", metrics_app)

    @app.get("/healthz", response_model=HealthResponse)
    async def healthz() -> HealthResponse:
        return HealthResponse(status="ok", service="assistant")

    @app.get("/readyz", response_model=HealthResponse)
    async def readyz() -> HealthResponse:
        try:
            async with app.state.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception:
            return HealthResponse(status="unhealthy", service="assistant", checks={"database": "down"})
        return HealthResponse(status="ok", service="assistant", checks={"database": "ok"})

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "assistant.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
    )
