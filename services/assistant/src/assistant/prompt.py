"""Model-call parameters: the prompt as seen by middleware and LLM clients."""
from typing import Any, Literal

from pydantic import BaseModel, Field


class TextPart(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ToolCall(BaseModel):
    id: str
    name: str
    arguments: str  # raw JSON produced by the model


class PromptMessage(BaseModel):
    role: Literal["user", "assistant", "tool"]
    content: list[TextPart] = Field(default_factory=list)
    tool_calls: list[ToolCall] = Field(default_factory=list)
    tool_call_id: str | None = None

    @property
    def text(self) -> str:
        return "\n".join(part.text for part in self.content if part.type == "text")


class ModelCallParams(BaseModel):
    system: str = ""
    messages: list[PromptMessage] = Field(default_factory=list)
    provider_metadata: dict[str, Any] | None = None


def user_message(text: str) -> PromptMessage:
    return PromptMessage(role="user", content=[TextPart(text=text)])


def from_client_messages(messages: list[dict[str, Any]]) -> list[PromptMessage]:
    """Convert chat-request messages ({role, content}) into prompt messages.

    String content becomes a single text part; system messages from the client are dropped.
    """
    out: list[PromptMessage] = []
    for m in messages:
        role = m.get("role")
        if role not in ("user", "assistant"):
            continue
        content = m.get("content")
        if isinstance(content, str):
            parts = [TextPart(text=content)] if content else []
        else:
            parts = [
                TextPart(text=p.get("text", ""))
                for p in content or []
                if isinstance(p, dict) and p.get("type") == "text"
            ]
        out.append(PromptMessage(role=role, content=parts))
    return out
