from assistant.clients.blob_storage import BlobObject, BlobStorage, LocalBlobStorage, VercelBlobStorage
from assistant.clients.llm_base import LLMClient, StreamEvent, StreamFinish, TextDelta, ToolSpec
from assistant.clients.mock_llm_client import MockLLMClient
from assistant.clients.openai_client import OpenAILLMClient

__all__ = [
    "BlobObject",
    "BlobStorage",
    "LLMClient",
    "LocalBlobStorage",
    "MockLLMClient",
    "OpenAILLMClient",
    "StreamEvent",
    "StreamFinish",
    "TextDelta",
    "ToolSpec",
    "VercelBlobStorage",
]
