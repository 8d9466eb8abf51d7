from assistant.vectorstore.base import QueryMatch, VectorIndex, VectorRecord
from assistant.vectorstore.pinecone_index import PineconeIndex, create_pinecone_http_client
from assistant.vectorstore.store import IndexedChunk, VectorStore

__all__ = [
    "IndexedChunk",
    "PineconeIndex",
    "QueryMatch",
    "VectorIndex",
    "VectorRecord",
    "VectorStore",
    "create_pinecone_http_client",
]
