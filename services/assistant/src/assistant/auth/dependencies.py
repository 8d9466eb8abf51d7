"""FastAPI dependencies resolving the current session from bearer token or cookie."""
from fastapi import HTTPException, Request

from assistant.auth.security import Session, decode_session_token
from shared.logging import set_user_context


def _token_from_request(request: Request, cookie_name: str) -> str | None:
    authorization = request.headers.get("Authorization") or ""
    if authorization.startswith("Bearer "):
        return authorization.split(" ", 1)[1].strip() or None
    return request.cookies.get(cookie_name)


async def get_optional_session(request: Request) -> Session | None:
    """Current session, or None when the request carries no valid token."""
    settings = request.app.state.settings
    token = _token_from_request(request, settings.session_cookie_name)
    if not token:
        return None
    session = decode_session_token(token, settings.jwt_secret, settings.jwt_algorithm)
    if session is not None:
        set_user_context(session.email)
    return session


async def require_session(request: Request) -> Session:
    session = await get_optional_session(request)
    if session is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return session
