"""Shared test fixtures for worklog-client.

``FakeWorklogAPI`` is an in-process FastAPI app that speaks the same HTTP
contract as the real worklog server, and records every request it sees so
tests can assert on what the client sent.
"""

import math
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from fastapi import FastAPI, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse, Response

from worklog_client.client import WorklogClient
from worklog_client.core import Session
from worklog_client.storage import MemorySessionStore

BASE_URL = "http://test"
TOKEN = "t1"
USER_ID = 5
EMAIL = "a@b.com"
PASSWORD = "secret1"


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


class FakeWorklogAPI:
    """Minimal stand-in for the worklog server."""

    def __init__(self):
        self.users: dict[int, dict] = {
            USER_ID: {
                "id": USER_ID,
                "first_name": "Ada",
                "last_name": "Lovelace",
                "email": EMAIL,
                "password": PASSWORD,
                "profile_image": "uploads/ada.jpg",
            }
        }
        self.tokens: dict[str, int] = {}
        self.worklogs: list[dict] = []
        self.requests: list[tuple[str, str, dict]] = []
        self.uploads: dict[str, bytes] = {}
        self.list_error: str | None = None  # when set, list calls answer 500
        self._next_id = 1
        self._start = datetime(2025, 1, 15, 10, 0, 0, tzinfo=timezone.utc)
        self.app = self._build_app()

    # ── Test helpers ─────────────────────────────────────────────────

    def issue_token(self, user_id: int = USER_ID, token: str = TOKEN) -> str:
        self.tokens[token] = user_id
        return token

    def add_worklog(self, title: str, description: str = "", user_id: int = USER_ID) -> dict:
        record = {
            "id": self._next_id,
            "user_id": user_id,
            "title": title,
            "description": description,
            "date": (self._start + timedelta(days=self._next_id)).isoformat().replace("+00:00", "Z"),
        }
        self._next_id += 1
        self.worklogs.append(record)
        return record

    def seed(self, count: int, user_id: int = USER_ID) -> list[dict]:
        return [self.add_worklog(f"Worklog {i + 1}", f"Details {i + 1}", user_id) for i in range(count)]

    def calls(self, method: str, prefix: str = "") -> list[tuple[str, str, dict]]:
        return [r for r in self.requests if r[0] == method and r[1].startswith(prefix)]

    def page_requests(self) -> list[int]:
        """Page numbers asked for by list calls, in order."""
        return [int(q["page"]) for m, path, q in self.requests if m == "GET" and path.startswith("/api/worklogs/")]

    # ── App ──────────────────────────────────────────────────────────

    def _authorized(self, request: Request, user_id: int) -> bool:
        header = request.headers.get("authorization", "")
        if not header.startswith("Bearer "):
            return False
        return self.tokens.get(header[len("Bearer "):]) == user_id

    def _build_app(self) -> FastAPI:
        app = FastAPI()
        api = self

        @app.middleware("http")
        async def record_request(request: Request, call_next):
            api.requests.append((request.method, request.url.path, dict(request.query_params)))
            return await call_next(request)

        @app.post("/api/auth/login")
        async def login(payload: dict):
            for user in api.users.values():
                if user["email"] == payload.get("email") and user["password"] == payload.get("password"):
                    token = api.issue_token(user["id"])
                    return {"success": True, "token": token, "user": {"id": user["id"], "email": user["email"]}}
            return _error(401, "Invalid credentials")

        @app.post("/api/auth/register", status_code=201)
        async def register(
            first_name: str = Form(...),
            last_name: str = Form(...),
            email: str = Form(...),
            password: str = Form(...),
            profile_image: UploadFile | None = File(None),
        ):
            if any(u["email"] == email for u in api.users.values()):
                return _error(400, "Email already registered")
            user_id = max(api.users) + 1
            image_path = ""
            if profile_image is not None:
                image_path = f"uploads/{profile_image.filename}"
                api.uploads[email] = await profile_image.read()
            api.users[user_id] = {
                "id": user_id,
                "first_name": first_name,
                "last_name": last_name,
                "email": email,
                "password": password,
                "profile_image": image_path,
            }
            return {"success": True, "message": "User registered"}

        @app.get("/api/auth/users/{user_id}")
        async def get_user(user_id: int, request: Request):
            if not api._authorized(request, user_id):
                return _error(401, "Invalid token")
            user = api.users.get(user_id)
            if user is None:
                return _error(404, "User not found")
            return {"user": {k: v for k, v in user.items() if k != "password"}}

        @app.get("/api/worklogs/{user_id}")
        async def list_worklogs(user_id: int, request: Request, page: int = 1, limit: int = 10):
            if not api._authorized(request, user_id):
                return _error(401, "Invalid token")
            if api.list_error:
                return _error(500, api.list_error)
            mine = [w for w in api.worklogs if w["user_id"] == user_id]
            total = len(mine)
            start = (page - 1) * limit
            return {
                "worklogs": mine[start: start + limit],
                "totalCount": total,
                "totalPages": math.ceil(total / limit),
                "currentPage": page,
            }

        @app.post("/api/worklogs", status_code=201)
        async def create_worklog(payload: dict, request: Request):
            user_id = payload.get("user_id")
            if not isinstance(user_id, int) or not api._authorized(request, user_id):
                return _error(401, "Invalid token")
            if not payload.get("title"):
                return _error(400, "Title is required")
            return api.add_worklog(payload["title"], payload.get("description", ""), user_id)

        @app.put("/api/worklogs/{user_id}/{worklog_id}")
        async def update_worklog(user_id: int, worklog_id: int, payload: dict, request: Request):
            if not api._authorized(request, user_id):
                return _error(401, "Invalid token")
            for record in api.worklogs:
                if record["id"] == worklog_id and record["user_id"] == user_id:
                    record["title"] = payload.get("title", record["title"])
                    record["description"] = payload.get("description", record["description"])
                    return record
            return _error(404, "Worklog not found")

        @app.delete("/api/worklogs/{user_id}/{worklog_id}")
        async def delete_worklog(user_id: int, worklog_id: int, request: Request):
            if not api._authorized(request, user_id):
                return _error(401, "Invalid token")
            for record in api.worklogs:
                if record["id"] == worklog_id and record["user_id"] == user_id:
                    api.worklogs.remove(record)
                    return Response(status_code=204)
            return _error(404, "Worklog not found")

        return app


@pytest.fixture
def api():
    """A fake server with one registered user and a valid token for them."""
    fake = FakeWorklogAPI()
    fake.issue_token()
    return fake


@pytest.fixture
def session():
    return Session(token=TOKEN, user_id=str(USER_ID), email=EMAIL)


@pytest.fixture
def store(session):
    """An in-memory store that starts out logged in."""
    return MemorySessionStore(session)


@pytest.fixture
def client(api, store):
    return WorklogClient(store, base_url=BASE_URL, transport=httpx.ASGITransport(app=api.app))


@pytest.fixture
def failing_client(store):
    """Factory for a client whose every request fails at the transport layer."""

    def make(exc_type: type[httpx.TransportError]) -> WorklogClient:
        def handler(request: httpx.Request) -> httpx.Response:
            raise exc_type("boom", request=request)

        return WorklogClient(store, base_url=BASE_URL, transport=httpx.MockTransport(handler))

    return make
