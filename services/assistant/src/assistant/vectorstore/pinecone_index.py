"""Pinecone data-plane REST adapter."""
from typing import Any

import httpx
import structlog

from assistant.errors import UpstreamError
from assistant.vectorstore.base import QueryMatch, VectorIndex, VectorRecord
from shared.http_client import create_http_client, request_with_retries

log = structlog.get_logger()


def create_pinecone_http_client(
    index_host: str,
    api_key: str,
    api_version: str = "2025-01",
    timeout: float = 60.0,
) -> httpx.AsyncClient:
    host = index_host if index_host.startswith("http") else f"https://{index_host}"
    return create_http_client(
        timeout=timeout,
        base_url=host.rstrip("/"),
        headers={"Api-Key": api_key, "X-Pinecone-API-Version": api_version},
    )


class PineconeIndex(VectorIndex):
    """One Pinecone index (optionally one namespace of it) over HTTP."""

    UPSERT_BATCH = 100
    FETCH_BATCH = 100
    LIST_PAGE = 100

    def __init__(self, http_client: httpx.AsyncClient, namespace: str = "", attempts: int = 1) -> None:
        self._http = http_client
        self._namespace = namespace
        self._attempts = attempts

    async def _call(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            resp = await request_with_retries(
                self._http, method, url, attempts=self._attempts, **kwargs
            )
        except httpx.HTTPError as e:
            raise UpstreamError("pinecone", str(e)) from e
        if not resp.content:
            return {}
        return resp.json()

    async def upsert(self, records: list[VectorRecord]) -> None:
        for i in range(0, len(records), self.UPSERT_BATCH):
            batch = records[i : i + self.UPSERT_BATCH]
            await self._call(
                "POST",
                "/vectors/upsert",
                json={
                    "vectors": [
                        {"id": r.id, "values": r.values, "metadata": r.metadata} for r in batch
                    ],
                    "namespace": self._namespace,
                },
            )

    async def query(
        self,
        vector: list[float],
        top_k: int,
        filter: dict[str, Any] | None = None,
    ) -> list[QueryMatch]:
        body: dict[str, Any] = {
            "vector": vector,
            "topK": top_k,
            "includeMetadata": True,
            "includeValues": False,
            "namespace": self._namespace,
        }
        if filter:
            body["filter"] = filter
        data = await self._call("POST", "/query", json=body)
        return [
            QueryMatch(
                id=m["id"],
                score=float(m.get("score") or 0.0),
                metadata=m.get("metadata") or {},
            )
            for m in data.get("matches", [])
        ]

    async def fetch(self, ids: list[str]) -> list[VectorRecord]:
        records: list[VectorRecord] = []
        for i in range(0, len(ids), self.FETCH_BATCH):
            batch = ids[i : i + self.FETCH_BATCH]
            params: list[tuple[str, str]] = [("ids", id_) for id_ in batch]
            params.append(("namespace", self._namespace))
            data = await self._call("GET", "/vectors/fetch", params=params)
            vectors = data.get("vectors") or {}
            # Keep request order; ids missing from the index are skipped.
            for id_ in batch:
                v = vectors.get(id_)
                if v is None:
                    continue
                records.append(
                    VectorRecord(id=id_, values=v.get("values") or [], metadata=v.get("metadata") or {})
                )
        return records

    async def list_ids(self, prefix: str | None = None) -> list[str]:
        ids: list[str] = []
        token: str | None = None
        while True:
            params: dict[str, Any] = {"namespace": self._namespace, "limit": self.LIST_PAGE}
            if prefix:
                params["prefix"] = prefix
            if token:
                params["paginationToken"] = token
            data = await self._call("GET", "/vectors/list", params=params)
            ids.extend(v["id"] for v in data.get("vectors", []))
            token = (data.get("pagination") or {}).get("next")
            if not token:
                return ids

    async def delete_one(self, id: str) -> None:
        await self._call(
            "POST", "/vectors/delete", json={"ids": [id], "namespace": self._namespace}
        )

    async def delete_many(self, ids: list[str]) -> None:
        if not ids:
            return
        await self._call(
            "POST", "/vectors/delete", json={"ids": ids, "namespace": self._namespace}
        )
