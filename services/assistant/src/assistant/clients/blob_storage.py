"""Blob storage for uploaded files: local filesystem or Vercel Blob."""
import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

import httpx

from assistant.errors import UpstreamError
from shared.http_client import request_with_retries


@dataclass
class BlobObject:
    pathname: str
    url: str
    download_url: str


class BlobStorage(ABC):
    @abstractmethod
    async def put(self, pathname: str, data: bytes, content_type: str = "application/pdf") -> BlobObject:
        ...

    @abstractmethod
    async def list(self, prefix: str) -> list[BlobObject]:
        ...

    @abstractmethod
    async def delete(self, pathname: str) -> None:
        ...


class LocalBlobStorage(BlobStorage):
    """Stores blobs under a directory; URLs are file:// URIs."""

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root).resolve()

    def _path(self, pathname: str) -> Path:
        path = (self._root / pathname).resolve()
        if self._root not in path.parents:
            raise ValueError(f"pathname escapes blob root: {pathname!r}")
        return path

    def _object(self, path: Path) -> BlobObject:
        uri = path.as_uri()
        return BlobObject(
            pathname=path.relative_to(self._root).as_posix(), url=uri, download_url=uri
        )

    async def put(self, pathname: str, data: bytes, content_type: str = "application/pdf") -> BlobObject:
        path = self._path(pathname)

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)

        await asyncio.to_thread(_write)
        return self._object(path)

    async def list(self, prefix: str) -> list[BlobObject]:
        if not self._root.exists():
            return []
        files = await asyncio.to_thread(lambda: sorted(p for p in self._root.rglob("*") if p.is_file()))
        objects = [self._object(p) for p in files]
        return [o for o in objects if o.pathname.startswith(prefix)]

    async def delete(self, pathname: str) -> None:
        path = self._path(pathname)
        await asyncio.to_thread(path.unlink, True)


class VercelBlobStorage(BlobStorage):
    """Vercel Blob REST API (public access, no random suffix so paths stay stable)."""

    API_VERSION = "7"

    def __init__(self, http_client: httpx.AsyncClient, token: str, attempts: int = 1) -> None:
        self._http = http_client
        self._token = token
        self._attempts = attempts

    def _headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = {
            "authorization": f"Bearer {self._token}",
            "x-api-version": self.API_VERSION,
        }
        headers.update(extra or {})
        return headers

    @staticmethod
    def _from_json(item: dict) -> BlobObject:
        return BlobObject(
            pathname=item.get("pathname") or urlparse(item["url"]).path.lstrip("/"),
            url=item["url"],
            download_url=item.get("downloadUrl") or item["url"],
        )

    async def put(self, pathname: str, data: bytes, content_type: str = "application/pdf") -> BlobObject:
        try:
            resp = await request_with_retries(
                self._http,
                "PUT",
                f"/{pathname}",
                content=data,
                headers=self._headers(
                    {
                        "x-content-type": content_type,
                        "x-add-random-suffix": "0",
                        "x-allow-overwrite": "1",
                    }
                ),
                attempts=self._attempts,
            )
        except httpx.HTTPError as e:
            raise UpstreamError("blob", str(e)) from e
        return self._from_json(resp.json())

    async def list(self, prefix: str) -> list[BlobObject]:
        objects: list[BlobObject] = []
        cursor: str | None = None
        while True:
            params = {"prefix": prefix}
            if cursor:
                params["cursor"] = cursor
            try:
                resp = await request_with_retries(
                    self._http, "GET", "/", params=params, headers=self._headers(),
                    attempts=self._attempts,
                )
            except httpx.HTTPError as e:
                raise UpstreamError("blob", str(e)) from e
            data = resp.json()
            objects.extend(self._from_json(b) for b in data.get("blobs", []))
            cursor = data.get("cursor")
            if not data.get("hasMore") or not cursor:
                return objects

    async def delete(self, pathname: str) -> None:
        matches = [o for o in await self.list(pathname) if o.pathname == pathname]
        if not matches:
            return
        try:
            await request_with_retries(
                self._http,
                "POST",
                "/delete",
                json={"urls": [o.url for o in matches]},
                headers=self._headers(),
                attempts=self._attempts,
            )
        except httpx.HTTPError as e:
            raise UpstreamError("blob", str(e)) from e
