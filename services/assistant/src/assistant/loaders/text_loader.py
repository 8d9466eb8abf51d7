"""Load .md and .txt uploads."""
from assistant.loaders.base import BaseLoader


class TextLoader(BaseLoader):
    @property
    def extensions(self) -> tuple[str, ...]:
        return (".md", ".txt")

    def load_bytes(self, data: bytes) -> str:
        return data.decode("utf-8", errors="replace")
