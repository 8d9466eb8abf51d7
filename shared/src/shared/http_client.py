"""Shared async HTTP client and request helper for hosted APIs."""
from typing import Any

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)


class UpstreamError(Exception):
    """A hosted dependency (LLM, embeddings, vector index, blob store) failed."""

    def __init__(self, service: str, message: str) -> None:
        super().__init__(f"{service}: {message}")
        self.service = service


def create_http_client(
    timeout: float = 60.0,
    base_url: str = "",
    headers: dict[str, str] | None = None,
) -> httpx.AsyncClient:
    """Create async HTTP client with timeout; transport-level retries disabled."""
    transport = httpx.AsyncHTTPTransport(retries=0)
    return httpx.AsyncClient(
        base_url=base_url,
        headers=headers or {},
        timeout=httpx.Timeout(timeout),
        transport=transport,
    )


async def request_with_retries(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    json: Any = None,
    params: Any = None,
    headers: dict[str, str] | None = None,
    content: bytes | None = None,
    attempts: int = 1,
) -> httpx.Response:
    """Perform request, raising on non-2xx.

    `attempts` is the total number of tries; 1 means a failure is final.
    """

    @retry(
        retry=retry_if_exception_type((httpx.TransportError, httpx.HTTPStatusError)),
        stop=stop_after_attempt(max(1, attempts)),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    async def _do() -> httpx.Response:
        resp = await client.request(
            method, url, json=json, params=params, headers=headers, content=content
        )
        resp.raise_for_status()
        return resp

    return await _do()
