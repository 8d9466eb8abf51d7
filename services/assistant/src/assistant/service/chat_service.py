"""Chat service: HyDE prompt rewrite + tool-calling model loop + SSE stream + persistence."""
import json
import time
from collections.abc import AsyncIterator
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from assistant.auth.security import Session
from assistant.clients.llm_base import LLMClient, StreamFinish, TextDelta
from assistant.prompt import ModelCallParams, PromptMessage, TextPart, from_client_messages
from assistant.repositories.chat_repository import ChatRepository
from assistant.retrieval.content_updater import ContentUpdater
from assistant.retrieval.rag_middleware import RagMiddleware
from assistant.retrieval.retrieval_service import RetrievalService
from assistant.service.prompts import get_system_prompt
from assistant.service.tools import ToolRegistry

log = structlog.get_logger()


def sse_event(event_type: str, **payload: Any) -> str:
    return f"data: {json.dumps({'type': event_type, **payload}, ensure_ascii=False)}\n\n"


class ChatService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        llm: LLMClient,
        middleware: RagMiddleware,
        retrieval: RetrievalService,
        updater: ContentUpdater,
        max_steps: int = 10,
    ) -> None:
        self._session_factory = session_factory
        self._llm = llm
        self._middleware = middleware
        self._retrieval = retrieval
        self._updater = updater
        self._max_steps = max_steps

    async def stream(
        self,
        chat_id: str,
        messages: list[dict[str, Any]],
        selected_file_pathnames: list[str] | None,
        session: Session,
    ) -> AsyncIterator[str]:
        """Yield SSE events for one chat turn; the chat is saved once the model finishes.

        Event types: text-delta, tool-call, tool-result, finish, error.
        """
        start = time.perf_counter()
        tools = ToolRegistry(self._retrieval, self._updater, session)
        params = ModelCallParams(
            system=get_system_prompt(session.is_admin),
            messages=from_client_messages(messages),
            provider_metadata={"files": {"selection": selected_file_pathnames}},
        )
        try:
            params = await self._middleware.transform_params(params, session)
            conversation = list(params.messages)
            text = ""
            reason = "stop"
            steps = 0
            for _ in range(self._max_steps):
                steps += 1
                text = ""
                finish = StreamFinish(reason="stop")
                async for event in self._llm.stream_chat(params.system, conversation, tools.specs()):
                    if isinstance(event, TextDelta):
                        text += event.text
                        yield sse_event("text-delta", text=event.text)
                    else:
                        finish = event
                reason = finish.reason
                if not finish.tool_calls:
                    break
                conversation.append(
                    PromptMessage(
                        role="assistant",
                        content=[TextPart(text=text)] if text else [],
                        tool_calls=finish.tool_calls,
                    )
                )
                for call in finish.tool_calls:
                    yield sse_event(
                        "tool-call", toolCallId=call.id, toolName=call.name, args=call.arguments
                    )
                    result = await tools.execute(call)
                    yield sse_event(
                        "tool-result", toolCallId=call.id, toolName=call.name, result=result
                    )
                    conversation.append(
                        PromptMessage(
                            role="tool",
                            tool_call_id=call.id,
                            content=[TextPart(text=json.dumps(result, ensure_ascii=False))],
                        )
                    )
            else:
                log.warning("chat_max_steps_reached", chat_id=chat_id, max_steps=self._max_steps)

            await self._save(chat_id, messages, text, session.email)
        except Exception as e:
            log.exception("chat_failed", chat_id=chat_id)
            yield sse_event("error", message=str(e))
            return

        duration_ms = round((time.perf_counter() - start) * 1000)
        log.info("chat_finished", chat_id=chat_id, steps=steps, reason=reason, duration_ms=duration_ms)
        yield sse_event("finish", finishReason=reason)

    async def _save(self, chat_id: str, messages: list[dict[str, Any]], text: str, author: str) -> None:
        async with self._session_factory() as db:
            repo = ChatRepository(db)
            await repo.save(chat_id, [*messages, {"role": "assistant", "content": text}], author)
            await db.commit()
