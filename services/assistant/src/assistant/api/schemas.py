"""API request/response schemas."""
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class CredentialsRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=64)
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    token_type: Literal["bearer"] = "bearer"


class SessionResponse(BaseModel):
    email: str
    role: str


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1)
    messages: list[dict[str, Any]] = Field(default_factory=list)
    selected_file_pathnames: list[str] | None = Field(default=None, alias="selectedFilePathnames")


class ChatSummary(BaseModel):
    id: str
    created_at: datetime = Field(serialization_alias="createdAt")
    author: str


class ChatResponse(ChatSummary):
    messages: list[dict[str, Any]]


class FileItem(BaseModel):
    pathname: str
    url: str
    indexed: bool = False
