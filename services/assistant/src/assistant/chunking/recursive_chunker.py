"""Recursive chunker: split on paragraphs, then lines, sentences and words; no overlap."""
import re
from collections.abc import Iterator

from assistant.chunking.base import BaseChunker

# Coarsest boundary first. A piece keeps its trailing separator so pieces concatenate back to the text.
_SEPARATORS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\n\s*\n"),
    re.compile(r"\n"),
    re.compile(r"(?<=[.!?])\s+"),
    re.compile(r"\s+"),
)


def _split_keep(text: str, separator: re.Pattern[str]) -> list[str]:
    """Split text after every separator match, keeping the separator on the left piece."""
    pieces: list[str] = []
    start = 0
    for m in separator.finditer(text):
        if m.end() == 0 or m.end() == start:
            continue
        pieces.append(text[start : m.end()])
        start = m.end()
    if start < len(text):
        pieces.append(text[start:])
    return pieces


class RecursiveChunker(BaseChunker):
    """Chunks of at most chunk_size characters, never cut inside a word.

    A single word longer than chunk_size is emitted on its own, oversized.
    """

    def __init__(self, chunk_size: int = 1000) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")
        self._chunk_size = chunk_size

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    def iter_chunks(self, text: str) -> Iterator[str]:
        if not text or not text.strip():
            return
        yield from self._split(text, 0)

    def _split(self, text: str, level: int) -> Iterator[str]:
        if len(text) <= self._chunk_size:
            if text.strip():
                yield text.strip()
            return
        if level >= len(_SEPARATORS):
            # unsplittable token
            yield text.strip()
            return
        buf = ""
        for piece in _split_keep(text, _SEPARATORS[level]):
            if len(buf) + len(piece.rstrip()) <= self._chunk_size:
                buf += piece
                continue
            if buf.strip():
                yield buf.strip()
            buf = ""
            if len(piece.rstrip()) <= self._chunk_size:
                buf = piece
            else:
                yield from self._split(piece, level + 1)
        if buf.strip():
            yield buf.strip()
