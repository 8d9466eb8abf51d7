"""Authentication: password hashing, session tokens, request dependencies."""
from assistant.auth.dependencies import get_optional_session, require_session
from assistant.auth.security import (
    Session,
    create_session_token,
    decode_session_token,
    hash_password,
    verify_password,
)

__all__ = [
    "Session",
    "create_session_token",
    "decode_session_token",
    "get_optional_session",
    "hash_password",
    "require_session",
    "verify_password",
]
