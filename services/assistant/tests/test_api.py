"""Tests for API routes: auth gates, upload status codes, admin-only delete."""
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, MagicMock

from assistant.api.routes import router
from assistant.auth.security import Session, create_session_token
from assistant.config import AssistantSettings
from assistant.results import DeleteSucceeded, UploadResult

SECRET = "test-secret"


def _token(role: str = "user") -> str:
    return create_session_token(Session(email="ann@example.com", role=role), SECRET)


@pytest.fixture
def app() -> FastAPI:
    app = FastAPI()
    app.include_router(router)
    app.state.settings = AssistantSettings(jwt_secret=SECRET)
    app.state.upload_service = MagicMock()
    app.state.upload_service.upload = AsyncMock(
        return_value=UploadResult(success=True, file_url="file:///x", chunks=2)
    )
    app.state.document_service = MagicMock()
    app.state.document_service.delete_file = AsyncMock(return_value=DeleteSucceeded(deleted_count=2))
    app.state.chat_service = MagicMock()
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


def test_chat_requires_session(client: TestClient, app: FastAPI) -> None:
    resp = client.post("/api/chat", json={"id": "c1", "messages": []})
    assert resp.status_code == 401
    app.state.chat_service.stream.assert_not_called()


def test_chat_rejects_tampered_token(client: TestClient) -> None:
    token = create_session_token(Session(email="ann@example.com"), "other-secret")
    resp = client.post(
        "/api/chat",
        json={"id": "c1", "messages": []},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert resp.status_code == 401


def test_upload_without_session_redirects(client: TestClient) -> None:
    resp = client.post("/api/files/upload?filename=a.pdf", content=b"%PDF", follow_redirects=False)
    assert resp.status_code == 302
    assert resp.headers["location"] == "/login"


def test_upload_empty_body_is_400(client: TestClient, app: FastAPI) -> None:
    resp = client.post(
        "/api/files/upload?filename=a.pdf",
        content=b"",
        headers={"Authorization": f"Bearer {_token()}"},
    )
    assert resp.status_code == 400
    app.state.upload_service.upload.assert_not_called()


def test_upload_success(client: TestClient, app: FastAPI) -> None:
    resp = client.post(
        "/api/files/upload?filename=a.pdf",
        content=b"%PDF-1.4",
        headers={"Authorization": f"Bearer {_token()}"},
    )
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "fileUrl": "file:///x", "chunks": 2}
    session, filename, body = app.state.upload_service.upload.await_args.args
    assert session.email == "ann@example.com"
    assert (filename, body) == ("a.pdf", b"%PDF-1.4")


def test_upload_partial_success_is_202(client: TestClient, app: FastAPI) -> None:
    app.state.upload_service.upload = AsyncMock(
        return_value=UploadResult(success=False, message="File stored but indexing failed", file_url="file:///x")
    )
    client.cookies.set("session", _token())
    resp = client.post("/api/files/upload?filename=a.pdf", content=b"%PDF-1.4")
    assert resp.status_code == 202
    assert resp.json()["fileUrl"] == "file:///x"


def test_upload_store_failure_is_502(client: TestClient, app: FastAPI) -> None:
    app.state.upload_service.upload = AsyncMock(
        return_value=UploadResult(success=False, message="Failed to store file: blob: 503")
    )
    client.cookies.set("session", _token())
    resp = client.post("/api/files/upload?filename=a.pdf", content=b"%PDF-1.4")
    assert resp.status_code == 502
    assert resp.json() == {"success": False, "message": "Failed to store file: blob: 503", "chunks": 0}


def test_delete_file_admin_only(client: TestClient, app: FastAPI) -> None:
    resp = client.delete(
        "/api/files/delete?filename=a.pdf", headers={"Authorization": f"Bearer {_token()}"}
    )
    assert resp.status_code == 403
    app.state.document_service.delete_file.assert_not_called()

    resp = client.delete(
        "/api/files/delete?filename=a.pdf", headers={"Authorization": f"Bearer {_token('admin')}"}
    )
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "deletedCount": 2}


def test_session_endpoint(client: TestClient) -> None:
    assert client.get("/api/auth/session").status_code == 401
    resp = client.get("/api/auth/session", headers={"Authorization": f"Bearer {_token('admin')}"})
    assert resp.json() == {"email": "ann@example.com", "role": "admin"}


def test_list_files_returns_indexed_flag(client: TestClient, app: FastAPI) -> None:
    app.state.document_service.list_files = AsyncMock(
        return_value=[{"pathname": "a.pdf", "url": "file:///a.pdf", "indexed": True}]
    )
    resp = client.get("/api/files/list", headers={"Authorization": f"Bearer {_token()}"})
    assert resp.status_code == 200
    assert resp.json() == [{"pathname": "a.pdf", "url": "file:///a.pdf", "indexed": True}]
