"""Chunker interface."""
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator


class BaseChunker(ABC):
    @abstractmethod
    def iter_chunks(self, text: str) -> Iterator[str]:
        """Yield chunks of text one at a time."""
        ...

    def chunk(self, text: str) -> Iterable[str]:
        """Split text into chunks. The result can be iterated more than once."""
        return ChunkSequence(self, text)


class ChunkSequence:
    """Lazy view over the chunks of one text; every iteration re-splits from the start."""

    def __init__(self, chunker: BaseChunker, text: str) -> None:
        self._chunker = chunker
        self._text = text

    def __iter__(self) -> Iterator[str]:
        return self._chunker.iter_chunks(self._text)
