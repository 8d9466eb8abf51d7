"""Domain errors raised by the retrieval pipeline and its adapters."""
from shared.http_client import UpstreamError

__all__ = ["AssistantError", "EmptyDocumentError", "NoMatchingContentError", "UpstreamError"]


class AssistantError(Exception):
    """Base class for assistant errors."""


class NoMatchingContentError(AssistantError):
    """No stored chunk matched the search used for an update."""


class EmptyDocumentError(AssistantError):
    """Uploaded file produced no extractable text."""
