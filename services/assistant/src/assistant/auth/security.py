"""Password hashing (argon2id) and signed session tokens (JWT)."""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerifyMismatchError

ph = PasswordHasher()


@dataclass(frozen=True)
class Session:
    """Authenticated user as seen by request handlers."""

    email: str
    role: str = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def hash_password(password: str) -> str:
    return ph.hash(password)


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    try:
        return ph.verify(password_hash, password)
    except (VerifyMismatchError, InvalidHashError):
        return False


def create_session_token(
    session: Session,
    secret: str,
    algorithm: str = "HS256",
    ttl_minutes: int = 60,
) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        "sub": session.email,
        "role": session.role,
        "iat": now,
        "exp": now + timedelta(minutes=ttl_minutes),
    }
    return jwt.encode(claims, secret, algorithm=algorithm)


def decode_session_token(token: str, secret: str, algorithm: str = "HS256") -> Session | None:
    """Return the session for a valid token, None for expired or tampered ones."""
    try:
        claims = jwt.decode(token, secret, algorithms=[algorithm])
    except jwt.InvalidTokenError:
        return None
    email = claims.get("sub")
    if not email:
        return None
    return Session(email=email, role=claims.get("role") or "user")
