"""Vector index abstraction - can be swapped for different hosted backends."""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class VectorRecord:
    id: str
    values: list[float]
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class QueryMatch:
    id: str
    score: float
    metadata: dict[str, Any] = field(default_factory=dict)


class VectorIndex(ABC):
    """Hosted nearest-neighbour index keyed by record id."""

    @abstractmethod
    async def upsert(self, records: list[VectorRecord]) -> None:
        ...

    @abstractmethod
    async def query(
        self,
        vector: list[float],
        top_k: int,
        filter: dict[str, Any] | None = None,
    ) -> list[QueryMatch]:
        """Nearest neighbours ordered by score, highest first, metadata included."""
        ...

    @abstractmethod
    async def fetch(self, ids: list[str]) -> list[VectorRecord]:
        ...

    @abstractmethod
    async def list_ids(self, prefix: str | None = None) -> list[str]:
        ...

    @abstractmethod
    async def delete_one(self, id: str) -> None:
        ...

    @abstractmethod
    async def delete_many(self, ids: list[str]) -> None:
        ...
