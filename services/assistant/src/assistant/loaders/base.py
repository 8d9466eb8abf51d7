"""Base loader interface."""
from abc import ABC, abstractmethod


class BaseLoader(ABC):
    @abstractmethod
    def load_bytes(self, data: bytes) -> str:
        """Extract document content as text."""
        ...

    @property
    @abstractmethod
    def extensions(self) -> tuple[str, ...]:
        ...
