from assistant.loaders.base import BaseLoader
from assistant.loaders.pdf_loader import PDFLoader
from assistant.loaders.text_loader import TextLoader

__all__ = ["BaseLoader", "PDFLoader", "TextLoader", "loader_for"]


def loader_for(filename: str) -> BaseLoader:
    """Pick a loader by file extension; anything unknown is treated as PDF."""
    lowered = filename.lower()
    for loader in (TextLoader(), PDFLoader()):
        if lowered.endswith(loader.extensions):
            return loader
    return PDFLoader()
