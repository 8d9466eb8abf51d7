"""OpenAI chat-completions client over httpx: classification, text generation, streaming with tools."""
import json
from collections.abc import AsyncIterator
from typing import Any

import httpx
import structlog

from assistant.clients.llm_base import LLMClient, StreamEvent, StreamFinish, TextDelta, ToolSpec
from assistant.errors import UpstreamError
from assistant.prompt import PromptMessage, ToolCall
from shared.http_client import request_with_retries

log = structlog.get_logger()


def to_openai_messages(system: str, messages: list[PromptMessage]) -> list[dict[str, Any]]:
    """Convert prompt messages into the chat-completions wire format."""
    out: list[dict[str, Any]] = []
    if system:
        out.append({"role": "system", "content": system})
    for m in messages:
        if m.role == "user":
            out.append(
                {
                    "role": "user",
                    "content": [{"type": "text", "text": p.text} for p in m.content],
                }
            )
        elif m.role == "assistant":
            msg: dict[str, Any] = {"role": "assistant", "content": m.text or None}
            if m.tool_calls:
                msg["tool_calls"] = [
                    {
                        "id": tc.id,
                        "type": "function",
                        "function": {"name": tc.name, "arguments": tc.arguments},
                    }
                    for tc in m.tool_calls
                ]
            out.append(msg)
        else:
            out.append({"role": "tool", "tool_call_id": m.tool_call_id, "content": m.text})
    return out


def _tools_payload(tools: list[ToolSpec]) -> list[dict[str, Any]]:
    return [
        {
            "type": "function",
            "function": {
                "name": t.name,
                "description": t.description,
                "parameters": t.parameters,
            },
        }
        for t in tools
    ]


class OpenAILLMClient(LLMClient):
    def __init__(
        self,
        http_client: httpx.AsyncClient,
        chat_model: str = "gpt-4o",
        helper_model: str = "gpt-4o-mini",
        attempts: int = 1,
    ) -> None:
        self._http = http_client
        self._chat_model = chat_model
        self._helper_model = helper_model
        self._attempts = attempts

    async def _complete(self, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            resp = await request_with_retries(
                self._http, "POST", "/chat/completions", json=payload, attempts=self._attempts
            )
        except httpx.HTTPError as e:
            raise UpstreamError("openai", str(e)) from e
        return resp.json()

    async def classify(self, system: str, prompt: str, options: list[str]) -> str:
        payload = {
            "model": self._helper_model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            "response_format": {
                "type": "json_schema",
                "json_schema": {
                    "name": "classification",
                    "strict": True,
                    "schema": {
                        "type": "object",
                        "properties": {"result": {"type": "string", "enum": options}},
                        "required": ["result"],
                        "additionalProperties": False,
                    },
                },
            },
        }
        data = await self._complete(payload)
        content = data["choices"][0]["message"].get("content") or "{}"
        try:
            result = json.loads(content).get("result")
        except json.JSONDecodeError as e:
            raise UpstreamError("openai", f"invalid classification payload: {content!r}") from e
        if result not in options:
            raise UpstreamError("openai", f"classification outside {options}: {result!r}")
        return result

    async def generate_text(self, system: str, prompt: str) -> str:
        payload = {
            "model": self._helper_model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
        }
        data = await self._complete(payload)
        return data["choices"][0]["message"].get("content") or ""

    async def stream_chat(
        self,
        system: str,
        messages: list[PromptMessage],
        tools: list[ToolSpec] | None = None,
    ) -> AsyncIterator[StreamEvent]:
        payload: dict[str, Any] = {
            "model": self._chat_model,
            "messages": to_openai_messages(system, messages),
            "stream": True,
        }
        if tools:
            payload["tools"] = _tools_payload(tools)

        finish_reason = "stop"
        calls: dict[int, dict[str, str]] = {}
        try:
            async with self._http.stream("POST", "/chat/completions", json=payload) as resp:
                if resp.status_code >= 400:
                    body = (await resp.aread()).decode("utf-8", errors="replace")
                    raise UpstreamError("openai", f"HTTP {resp.status_code}: {body[:300]}")
                async for line in resp.aiter_lines():
                    if not line.startswith("data:"):
                        continue
                    data = line[len("data:"):].strip()
                    if data == "[DONE]":
                        break
                    try:
                        chunk = json.loads(data)
                    except ValueError as e:
                        raise UpstreamError("openai", f"malformed stream chunk: {data[:200]}") from e
                    for choice in chunk.get("choices", []):
                        delta = choice.get("delta") or {}
                        if delta.get("content"):
                            yield TextDelta(delta["content"])
                        for tc in delta.get("tool_calls") or []:
                            slot = calls.setdefault(
                                tc.get("index", 0), {"id": "", "name": "", "arguments": ""}
                            )
                            if tc.get("id"):
                                slot["id"] = tc["id"]
                            fn = tc.get("function") or {}
                            if fn.get("name"):
                                slot["name"] = fn["name"]
                            if fn.get("arguments"):
                                slot["arguments"] += fn["arguments"]
                        if choice.get("finish_reason"):
                            finish_reason = choice["finish_reason"]
        except httpx.HTTPError as e:
            raise UpstreamError("openai", str(e)) from e

        tool_calls = [ToolCall(**calls[i]) for i in sorted(calls)]
        log.debug("llm_turn_finished", reason=finish_reason, tool_calls=len(tool_calls))
        yield StreamFinish(reason=finish_reason, tool_calls=tool_calls)
