"""Assistant API routes."""
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse, RedirectResponse, StreamingResponse

from assistant.api.schemas import (
    ChatRequest,
    ChatResponse,
    ChatSummary,
    CredentialsRequest,
    FileItem,
    SessionResponse,
    TokenResponse,
)
from assistant.auth import (
    Session,
    create_session_token,
    get_optional_session,
    require_session,
    verify_password,
)
from assistant.repositories import ChatRepository, UserRepository

router = APIRouter(prefix="/api", tags=["assistant"])


def _issue_token(request: Request, response: Response, session: Session) -> TokenResponse:
    settings = request.app.state.settings
    token = create_session_token(
        session, settings.jwt_secret, settings.jwt_algorithm, settings.token_ttl_minutes
    )
    response.set_cookie(
        settings.session_cookie_name,
        token,
        httponly=True,
        samesite="lax",
        max_age=settings.token_ttl_minutes * 60,
    )
    return TokenResponse(access_token=token)


@router.post("/auth/register", response_model=TokenResponse, status_code=201)
async def register(body: CredentialsRequest, request: Request, response: Response) -> TokenResponse:
    session_factory = request.app.state.session_factory
    async with session_factory() as db:
        repo = UserRepository(db)
        if await repo.get(body.email) is not None:
            raise HTTPException(status_code=409, detail="User already exists")
        user = await repo.create(body.email, body.password)
        await db.commit()
    return _issue_token(request, response, Session(email=user.email, role=user.role))


@router.post("/auth/login", response_model=TokenResponse)
async def login(body: CredentialsRequest, request: Request, response: Response) -> TokenResponse:
    session_factory = request.app.state.session_factory
    async with session_factory() as db:
        user = await UserRepository(db).get(body.email)
    if user is None or not verify_password(body.password, user.password):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return _issue_token(request, response, Session(email=user.email, role=user.role))


@router.get("/auth/session", response_model=SessionResponse)
async def current_session(session: Session = Depends(require_session)) -> SessionResponse:
    return SessionResponse(email=session.email, role=session.role)


@router.post("/chat")
async def chat(
    body: ChatRequest,
    request: Request,
    session: Session | None = Depends(get_optional_session),
):
    if session is None:
        return Response("Unauthorized", status_code=401)
    service = request.app.state.chat_service
    return StreamingResponse(
        service.stream(body.id, body.messages, body.selected_file_pathnames, session),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )


@router.get("/history", response_model=list[ChatSummary])
async def history(request: Request, session: Session = Depends(require_session)) -> list[ChatSummary]:
    session_factory = request.app.state.session_factory
    async with session_factory() as db:
        chats = await ChatRepository(db).list_by_author(session.email)
    return [ChatSummary(id=c.id, created_at=c.created_at, author=c.author) for c in chats]


@router.get("/chats/{chat_id}", response_model=ChatResponse)
async def get_chat(
    chat_id: str, request: Request, session: Session = Depends(require_session)
) -> ChatResponse:
    session_factory = request.app.state.session_factory
    async with session_factory() as db:
        chat = await ChatRepository(db).get_by_id(chat_id)
    if chat is None or chat.author != session.email:
        raise HTTPException(status_code=404, detail="Chat not found")
    return ChatResponse(
        id=chat.id, created_at=chat.created_at, author=chat.author, messages=chat.messages
    )


@router.delete("/chats/{chat_id}", status_code=204)
async def delete_chat(chat_id: str, request: Request, session: Session = Depends(require_session)):
    session_factory = request.app.state.session_factory
    async with session_factory() as db:
        deleted = await ChatRepository(db).delete(chat_id, session.email)
        await db.commit()
    if not deleted:
        raise HTTPException(status_code=404, detail="Chat not found")
    return Response(status_code=204)


@router.post("/files/upload")
async def upload_file(
    request: Request,
    filename: str | None = Query(default=None),
    session: Session | None = Depends(get_optional_session),
):
    if session is None:
        return RedirectResponse("/login", status_code=302)
    if not filename:
        raise HTTPException(status_code=400, detail="filename is required")
    body = await request.body()
    if not body:
        raise HTTPException(status_code=400, detail="Request body is empty")
    result = await request.app.state.upload_service.upload(session, filename, body)
    if result.success:
        status_code = 200
    elif result.file_url:
        status_code = 202
    else:
        status_code = 502
    return JSONResponse(result.model_dump(by_alias=True, exclude_none=True), status_code=status_code)


@router.get("/files/list", response_model=list[FileItem])
async def list_files(request: Request, session: Session = Depends(require_session)) -> list[FileItem]:
    files = await request.app.state.document_service.list_files(session)
    return [FileItem(**f) for f in files]


@router.delete("/files/delete")
async def delete_file(
    request: Request,
    filename: str = Query(..., min_length=1),
    session: Session = Depends(require_session),
):
    if not session.is_admin:
        raise HTTPException(status_code=403, detail="Only administrators can delete files")
    result = await request.app.state.document_service.delete_file(session, filename)
    return result.model_dump(by_alias=True)
