"""LLM client interface."""
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Any

from assistant.prompt import PromptMessage, ToolCall


@dataclass
class ToolSpec:
    name: str
    description: str
    parameters: dict[str, Any]  # JSON schema


@dataclass
class TextDelta:
    text: str


@dataclass
class StreamFinish:
    reason: str  # stop | tool_calls | length | ...
    tool_calls: list[ToolCall] = field(default_factory=list)


StreamEvent = TextDelta | StreamFinish


class LLMClient(ABC):
    @abstractmethod
    async def classify(self, system: str, prompt: str, options: list[str]) -> str:
        """Return exactly one of options for prompt."""
        ...

    @abstractmethod
    async def generate_text(self, system: str, prompt: str) -> str:
        """Generate a completion for prompt. Returns generated text."""
        ...

    @abstractmethod
    def stream_chat(
        self,
        system: str,
        messages: list[PromptMessage],
        tools: list[ToolSpec] | None = None,
    ) -> AsyncIterator[StreamEvent]:
        """Stream one model turn: TextDelta events followed by a single StreamFinish."""
        ...
