"""Mock LLM client for offline runs: heuristic classification, answers from retrieved context."""
import re
from collections.abc import AsyncIterator

from assistant.clients.llm_base import LLMClient, StreamEvent, StreamFinish, TextDelta, ToolSpec
from assistant.prompt import PromptMessage

_INTERROGATIVES = {
    "who", "what", "when", "where", "why", "how", "which", "whose", "whom",
    "is", "are", "am", "was", "were", "do", "does", "did", "can", "could",
    "will", "would", "should", "shall", "may", "might", "has", "have", "had",
}

CONTEXT_MARKER = "Here is some relevant information that you can use to answer the question:"


def _word_set(text: str) -> set[str]:
    """Lowercased words of length >= 2 for overlap scoring."""
    return {w for w in re.findall(r"\w+", text.lower()) if len(w) >= 2}


def classify_message(text: str) -> str:
    stripped = text.strip()
    if not stripped:
        return "other"
    if stripped.endswith("?"):
        return "question"
    first = re.findall(r"\w+", stripped.lower())[:1]
    if first and first[0] in _INTERROGATIVES and not stripped.endswith((".", "!")):
        return "question"
    if stripped.endswith((".", "!")):
        return "statement"
    return "other"


def _best_context_part(message: PromptMessage) -> str | None:
    """Pick the retrieved passage with the highest word overlap with the question."""
    texts = [p.text for p in message.content]
    if CONTEXT_MARKER not in texts:
        return None
    idx = texts.index(CONTEXT_MARKER)
    question = "\n".join(texts[:idx])
    passages = [t for t in texts[idx + 1 :] if t.strip()]
    if not passages:
        return None
    q_words = _word_set(question)
    best = max(passages, key=lambda p: len(_word_set(p) & q_words))
    return best if len(best) <= 2000 else best[:2000].rstrip() + "…"


class MockLLMClient(LLMClient):
    async def classify(self, system: str, prompt: str, options: list[str]) -> str:
        label = classify_message(prompt)
        return label if label in options else options[-1]

    async def generate_text(self, system: str, prompt: str) -> str:
        return f"Mock answer: {prompt.strip()}"

    async def stream_chat(
        self,
        system: str,
        messages: list[PromptMessage],
        tools: list[ToolSpec] | None = None,
    ) -> AsyncIterator[StreamEvent]:
        last_user = next((m for m in reversed(messages) if m.role == "user"), None)
        answer = _best_context_part(last_user) if last_user else None
        if not answer:
            answer = "This is a mock reply. Ask a question about the uploaded documents."
        for word in re.findall(r"\S+\s*", answer):
            yield TextDelta(word)
        yield StreamFinish(reason="stop")
