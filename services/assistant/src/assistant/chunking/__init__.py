from assistant.chunking.base import BaseChunker, ChunkSequence
from assistant.chunking.recursive_chunker import RecursiveChunker

__all__ = ["BaseChunker", "ChunkSequence", "RecursiveChunker"]
