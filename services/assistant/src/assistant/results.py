"""Tagged result variants returned across tool and adapter boundaries."""
from typing import Literal

from pydantic import BaseModel, Field


class UpdateSucceeded(BaseModel):
    success: Literal[True] = True
    message: str
    updated_chunks: int = Field(serialization_alias="updatedChunks")
    old_content: str | None = Field(default=None, serialization_alias="oldContent")
    new_content: str | None = Field(default=None, serialization_alias="newContent")


class UpdateFailed(BaseModel):
    success: Literal[False] = False
    message: str
    error: bool = True


UpdateResult = UpdateSucceeded | UpdateFailed


class DeleteSucceeded(BaseModel):
    success: Literal[True] = True
    deleted_count: int = Field(serialization_alias="deletedCount")


class DeleteFailed(BaseModel):
    success: Literal[False] = False
    error: str
    deleted_count: int = Field(default=0, serialization_alias="deletedCount")
    failed_ids: list[str] = Field(default_factory=list, serialization_alias="failedIds")


DeleteResult = DeleteSucceeded | DeleteFailed


class RelevantContent(BaseModel):
    """One hit of the getInformation tool."""

    name: str
    similarity: float


class UploadResult(BaseModel):
    success: bool
    message: str | None = None
    file_url: str | None = Field(default=None, serialization_alias="fileUrl")
    chunks: int = 0
