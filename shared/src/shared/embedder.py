"""Shared embedder: hosted OpenAI, sentence-transformers or mock backend behind one async contract."""
from __future__ import annotations

import asyncio
import hashlib
import os
import re

import httpx
import structlog

from shared.http_client import UpstreamError, request_with_retries

log = structlog.get_logger()


def _default_backend() -> str:
    return os.environ.get("EMBEDDER_BACKEND", "openai")


def _default_model() -> str:
    return os.environ.get("EMBEDDER_MODEL_NAME", "text-embedding-3-small")


def _default_dim() -> int:
    return int(os.environ.get("EMBED_DIM", "1536"))


class Embedder:
    """Embed texts into vectors. Backend: openai (default), sentence_transformers or mock.

    Each input string maps to its vector independently; batching through
    `embed_many` only reduces the number of round trips. Upstream errors are
    not retried here and surface as `UpstreamError`.
    """

    def __init__(
        self,
        backend: str | None = None,
        model_name: str | None = None,
        dim: int | None = None,
        http_client: httpx.AsyncClient | None = None,
        attempts: int = 1,
    ) -> None:
        self._backend = (backend or _default_backend()).lower()
        self._model_name = model_name or _default_model()
        self._dim = dim if dim is not None else _default_dim()
        self._http = http_client
        self._attempts = attempts
        self._model = None
        if self._backend == "openai" and self._http is None:
            raise ValueError("openai embedder backend requires an http_client")
        if self._backend == "sentence_transformers":
            self._load_model()
            self._validate_dim()

    @property
    def backend(self) -> str:
        return self._backend

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def dim(self) -> int:
        return self._dim

    def _load_model(self) -> None:
        try:
            from sentence_transformers import SentenceTransformer
            self._model = SentenceTransformer(self._model_name)
        except ImportError as e:
            raise RuntimeError(
                "sentence_transformers backend requires: pip install sentence-transformers"
            ) from e

    def _validate_dim(self) -> None:
        """Fail-fast: verify actual model output dim matches configured dim."""
        test_vec = self._encode_local(["dim validation test"])[0]
        actual = len(test_vec)
        if actual != self._dim:
            raise ValueError(
                f"Embedding dim mismatch: configured dim={self._dim}, "
                f"actual model output dim={actual}. "
                f"Set EMBED_DIM={actual} or use a model with dim={self._dim}."
            )

    async def embed(self, text: str) -> list[float]:
        """Return the embedding of a single string."""
        vectors = await self.embed_many([text])
        return vectors[0]

    async def embed_many(self, texts: list[str]) -> list[list[float]]:
        """Return list of embedding vectors (each of length dim), in input order."""
        if not texts:
            return []
        if self._backend == "mock":
            return [self._embed_mock(t) for t in texts]
        if self._backend == "sentence_transformers":
            return await asyncio.to_thread(self._encode_local, texts)
        return await self._embed_openai(texts)

    async def _embed_openai(self, texts: list[str]) -> list[list[float]]:
        assert self._http is not None
        try:
            resp = await request_with_retries(
                self._http,
                "POST",
                "/embeddings",
                json={"model": self._model_name, "input": texts},
                attempts=self._attempts,
            )
            data = resp.json().get("data", [])
        except (httpx.HTTPError, ValueError) as e:
            raise UpstreamError("openai", f"embeddings request failed: {e}") from e
        # The API may return items out of order; index ties each vector to its input.
        ordered = sorted(data, key=lambda item: item.get("index", 0))
        vectors = [list(map(float, item["embedding"])) for item in ordered]
        if len(vectors) != len(texts):
            raise ValueError(
                f"Embedding API returned {len(vectors)} vectors for {len(texts)} inputs"
            )
        log.debug("embeddings_created", count=len(vectors), model=self._model_name)
        return vectors

    def _encode_local(self, texts: list[str]) -> list[list[float]]:
        if self._model is None:
            self._load_model()
        vectors = self._model.encode(texts, convert_to_numpy=True)
        return [v.tolist() for v in vectors]

    def _embed_mock(self, text: str) -> list[float]:
        # Bag-of-words style: overlapping words => closer vectors so relevant docs score higher
        words = re.findall(r"\w+", text.lower())
        vec = [0.0] * self._dim
        for w in words:
            if len(w) >= 2:
                idx = int(hashlib.sha256(w.encode()).hexdigest(), 16) % self._dim
                vec[idx] += 1.0
        norm = sum(x * x for x in vec) ** 0.5
        if norm > 0:
            vec = [x / norm for x in vec]
        return vec
