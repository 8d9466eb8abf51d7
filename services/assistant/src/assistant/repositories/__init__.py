"""Repositories."""
from assistant.repositories.chat_repository import ChatRepository
from assistant.repositories.chunk_repository import ChunkRecord, ChunkRepository
from assistant.repositories.models import Base, Chat, Chunk, User, VectorIdTracking
from assistant.repositories.user_repository import UserRepository
from assistant.repositories.vector_id_repository import VectorIdRepository

__all__ = [
    "Base",
    "Chat",
    "ChatRepository",
    "Chunk",
    "ChunkRecord",
    "ChunkRepository",
    "User",
    "UserRepository",
    "VectorIdRepository",
    "VectorIdTracking",
]
