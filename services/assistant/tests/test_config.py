"""Tests for AssistantSettings."""
import pytest
from pydantic import ValidationError

from assistant.config import AssistantSettings
from assistant.repositories.models import EMBEDDING_DIM


def test_default_embedding_dim_matches_chunk_column() -> None:
    assert AssistantSettings().embedding_dim == EMBEDDING_DIM


def test_embedding_dim_mismatch_rejected() -> None:
    with pytest.raises(ValidationError, match="chunks.embedding"):
        AssistantSettings(embedding_dim=384)


def test_embedding_dim_mismatch_rejected_from_env(monkeypatch) -> None:
    monkeypatch.setenv("ASSISTANT_EMBEDDING_DIM", "384")
    with pytest.raises(ValidationError):
        AssistantSettings()
