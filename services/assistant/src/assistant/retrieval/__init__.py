from assistant.retrieval.content_updater import ContentUpdater, replace_first
from assistant.retrieval.rag_middleware import FileSelection, RagMiddleware
from assistant.retrieval.retrieval_service import RetrievalService
from assistant.retrieval.similarity import cosine_similarity, rank_by_similarity

__all__ = [
    "ContentUpdater",
    "FileSelection",
    "RagMiddleware",
    "RetrievalService",
    "cosine_similarity",
    "rank_by_similarity",
    "replace_first",
]
