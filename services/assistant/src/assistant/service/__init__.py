from assistant.service.chat_service import ChatService, sse_event
from assistant.service.document_service import DocumentService
from assistant.service.prompts import get_system_prompt
from assistant.service.tools import ToolRegistry
from assistant.service.upload_service import UploadService, file_path_for

__all__ = [
    "ChatService",
    "DocumentService",
    "ToolRegistry",
    "UploadService",
    "file_path_for",
    "get_system_prompt",
    "sse_event",
]
