"""Tools exposed to the chat model: getInformation and updateInformation."""
import json
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from assistant.auth.security import Session
from assistant.clients.llm_base import ToolSpec
from assistant.prompt import ToolCall
from assistant.results import UpdateFailed, UpdateResult
from assistant.retrieval.content_updater import ContentUpdater
from assistant.retrieval.retrieval_service import RetrievalService

log = structlog.get_logger()

GET_INFORMATION = "getInformation"
UPDATE_INFORMATION = "updateInformation"
PERMISSION_DENIED = "Permission denied: Only administrators can update information"


def _invalid(error: ValidationError) -> str:
    return "Invalid arguments: " + json.dumps(error.errors(include_url=False), default=str)


class GetInformationArgs(BaseModel):
    question: str = Field(description="the users question")


class UpdateInformationArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    search_query: str = Field(alias="searchQuery", description="The old content to find and update")
    new_content: str = Field(alias="newContent", description="The new content to replace it with")
    context: str | None = Field(default=None, description="Surrounding text to ensure correct match")


class ToolRegistry:
    """Tool specs and execution for one chat request (bound to its session)."""

    def __init__(
        self,
        retrieval: RetrievalService,
        updater: ContentUpdater,
        session: Session,
    ) -> None:
        self._retrieval = retrieval
        self._updater = updater
        self._session = session

    def specs(self) -> list[ToolSpec]:
        return [
            ToolSpec(
                name=GET_INFORMATION,
                description=(
                    "Search the knowledge base for specific information. "
                    "Use this tool when you need to find exact content for updates."
                ),
                parameters=GetInformationArgs.model_json_schema(),
            ),
            ToolSpec(
                name=UPDATE_INFORMATION,
                description="Update existing information in the knowledge base when content changes.",
                parameters=UpdateInformationArgs.model_json_schema(by_alias=True),
            ),
        ]

    async def execute(self, call: ToolCall) -> Any:
        """Run one tool call and return a JSON-serialisable result."""
        log.info("tool_called", tool=call.name, tool_call_id=call.id)
        if call.name == GET_INFORMATION:
            return await self._get_information(call.arguments)
        if call.name == UPDATE_INFORMATION:
            result = await self._update_information(call.arguments)
            return result.model_dump(by_alias=True, exclude_none=True)
        return UpdateFailed(message=f"Unknown tool: {call.name}").model_dump()

    async def _get_information(self, arguments: str) -> Any:
        try:
            args = GetInformationArgs.model_validate_json(arguments or "{}")
        except ValidationError as e:
            return UpdateFailed(message=_invalid(e)).model_dump()
        try:
            hits = await self._retrieval.find_relevant_content(args.question)
        except Exception as e:
            log.exception("get_information_failed")
            return UpdateFailed(message=f"Failed to search the knowledge base: {e}").model_dump()
        return [h.model_dump() for h in hits]

    async def _update_information(self, arguments: str) -> UpdateResult:
        if not self._session.is_admin:
            log.warning("update_denied", user=self._session.email)
            return UpdateFailed(message=PERMISSION_DENIED)
        try:
            args = UpdateInformationArgs.model_validate_json(arguments or "{}")
        except ValidationError as e:
            return UpdateFailed(message=_invalid(e))
        try:
            return await self._updater.update(args.search_query, args.new_content, args.context)
        except Exception as e:
            log.exception("update_failed", search_query=args.search_query)
            return UpdateFailed(message=f"Failed to update content: {e}")
