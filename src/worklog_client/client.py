"""Session-authenticated HTTP client for the worklog API.

Authenticated calls take the ``Session`` explicitly. The client keeps a
reference to the owning ``SessionStore`` only to write the session on
login and to clear it on logout or when the server answers 401.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any

import httpx

from .config import get_api_url, get_page_size, get_timeout
from .core import Page, Session, UserProfile, WorklogRecord
from .display import format_list_date
from .errors import (
    AuthRequired,
    InvalidCredentials,
    InvalidResponseShape,
    NetworkTimeout,
    NetworkUnavailable,
    ServerRejected,
    SessionExpired,
)
from .storage import SessionStore
from .validation import validate_login, validate_signup, validate_title

logger = logging.getLogger(__name__)


class WorklogClient:
    """Async client for auth and worklog CRUD calls.

    Use as an async context manager so the underlying connection pool is
    closed::

        async with WorklogClient(store) as client:
            session = await client.login("a@b.com", "secret1")
            page = await client.fetch_page(session, 1)
    """

    def __init__(
        self,
        store: SessionStore,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.store = store
        self.base_url = (base_url or get_api_url()).rstrip("/")
        self.timeout = timeout if timeout is not None else get_timeout()
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "WorklogClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ── Auth ─────────────────────────────────────────────────────────

    async def login(self, email: str, password: str) -> Session:
        """Log in and persist the session.

        Returning normally means the caller should move to the
        authenticated area.
        """
        validate_login(email, password)

        try:
            resp = await self._request(
                "POST",
                "/api/auth/login",
                json={"email": email, "password": password},
                fallback="Login failed. Please try again.",
            )
        except ServerRejected as e:
            if e.status_code == 401:
                raise InvalidCredentials() from e
            raise

        data = _json_object(resp)
        if not data.get("success"):
            raise ServerRejected(data.get("message") or "Login failed. Please try again.", resp.status_code)

        user = data.get("user")
        token = data.get("token")
        if not token or not isinstance(user, dict) or user.get("id") is None:
            raise InvalidResponseShape()

        session = Session(
            token=str(token),
            user_id=str(user["id"]),
            email=user.get("email") or email,
        )
        self.store.set(session)
        logger.info("Logged in as %s (user %s)", session.email, session.user_id)
        return session

    async def register(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        profile_image: Path | str | None = None,
    ) -> None:
        """Create an account. The caller sends the user on to login afterwards."""
        validate_signup(first_name, last_name, email, password)

        form = {
            "first_name": first_name,
            "last_name": last_name,
            "email": email,
            "password": password,
        }
        files = None
        if profile_image:
            image_bytes = Path(profile_image).read_bytes()
            files = {"profile_image": ("profile.jpg", image_bytes, "image/jpeg")}

        await self._request(
            "POST",
            "/api/auth/register",
            data=form,
            files=files,
            fallback="Signup Failed. Try Again.",
        )
        logger.info("Registered account for %s", email)

    async def get_profile(self, session: Session | None) -> UserProfile:
        session = _require_session(session)
        try:
            resp = await self._request(
                "GET",
                f"/api/auth/users/{session.user_id}",
                session=session,
                fallback="Failed to load profile data",
            )
        except ServerRejected as e:
            if e.status_code == 404:
                raise ServerRejected("User not found. Please try again or contact support.", 404) from e
            raise

        data = _json_object(resp)
        user = data.get("user") or data
        if not isinstance(user, dict):
            raise InvalidResponseShape("User data is missing required fields")

        return UserProfile(
            first_name=user.get("first_name") or "",
            last_name=user.get("last_name") or "",
            email=user.get("email") or "",
            profile_image=user.get("profile_image") or "",
        )

    def logout(self) -> None:
        """Forget the stored session. Never raises."""
        try:
            self.store.clear()
        except OSError as e:
            logger.warning("Failed to clear stored session: %s", e)
        else:
            logger.info("Logged out")

    # ── Worklogs ─────────────────────────────────────────────────────

    async def fetch_page(self, session: Session | None, page_number: int = 1, page_size: int | None = None) -> Page:
        session = _require_session(session)
        limit = page_size or get_page_size()

        resp = await self._request(
            "GET",
            f"/api/worklogs/{session.user_id}",
            session=session,
            params={"page": page_number, "limit": limit},
            fallback="Failed to fetch worklogs",
        )
        return _parse_page(_json_object(resp), session)

    async def create_record(self, session: Session | None, title: str, description: str = "") -> WorklogRecord:
        session = _require_session(session)
        validate_title(title)
        try:
            user_id = int(session.user_id)
        except ValueError:
            raise AuthRequired()

        resp = await self._request(
            "POST",
            "/api/worklogs",
            session=session,
            json={"user_id": user_id, "title": title, "description": description},
            fallback="Failed to add worklog",
        )

        data = _json_object(resp)
        if data.get("success") is False:
            raise ServerRejected(data.get("message") or "Failed to add worklog", resp.status_code)
        body = _unwrap_record(data)
        if body is None:
            raise InvalidResponseShape()
        return _parse_record(body, session)

    async def update_record(
        self,
        session: Session | None,
        record_id: int,
        title: str,
        description: str = "",
    ) -> WorklogRecord:
        session = _require_session(session)
        validate_title(title)

        resp = await self._request(
            "PUT",
            f"/api/worklogs/{session.user_id}/{record_id}",
            session=session,
            json={"title": title, "description": description},
            fallback="Failed to update worklog",
        )

        body = _unwrap_record(_json_or_empty(resp))
        if body is None:
            body = {"id": record_id, "title": title, "description": description}
        return _parse_record(body, session)

    async def delete_record(self, session: Session | None, record_id: int) -> None:
        session = _require_session(session)
        await self._request(
            "DELETE",
            f"/api/worklogs/{session.user_id}/{record_id}",
            session=session,
            fallback="Failed to delete worklog",
        )
        logger.info("Deleted worklog %s", record_id)

    # ── Transport ────────────────────────────────────────────────────

    async def _request(
        self,
        method: str,
        path: str,
        *,
        session: Session | None = None,
        fallback: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send one request and translate failures into ``WorklogError``s."""
        headers = {}
        if session is not None:
            headers["Authorization"] = f"Bearer {session.token}"

        logger.debug("%s %s", method, path)
        try:
            resp = await self._http.request(method, path, headers=headers, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning("%s %s timed out after %ss", method, path, self.timeout)
            raise NetworkTimeout() from e
        except httpx.TransportError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise NetworkUnavailable() from e

        if resp.status_code == 401 and session is not None:
            logger.warning("%s %s returned 401, clearing session", method, path)
            self.logout()
            raise SessionExpired()

        if not resp.is_success:
            message = _error_message(resp) or fallback
            logger.error("%s %s returned %s: %s", method, path, resp.status_code, message)
            raise ServerRejected(message, resp.status_code)

        return resp


# ── Private helpers ──────────────────────────────────────────────


def _require_session(session: Session | None) -> Session:
    if session is None or not session.token or not session.user_id:
        raise AuthRequired()
    return session


def _error_message(resp: httpx.Response) -> str | None:
    try:
        data = resp.json()
    except ValueError:
        return None
    if isinstance(data, dict) and isinstance(data.get("message"), str):
        return data["message"]
    return None


def _json_object(resp: httpx.Response) -> dict:
    try:
        data = resp.json()
    except ValueError:
        raise InvalidResponseShape("Invalid response format from server")
    if not isinstance(data, dict):
        raise InvalidResponseShape("Invalid response format from server")
    return data


def _json_or_empty(resp: httpx.Response) -> dict:
    if not resp.content:
        return {}
    return _json_object(resp)


def _unwrap_record(data: dict) -> dict | None:
    """Find the record in a create/update body: bare, or under ``worklog``."""
    wrapped = data.get("worklog")
    if isinstance(wrapped, dict):
        return wrapped
    if "id" in data:
        return data
    return None


def _parse_iso(value: Any) -> datetime | None:
    """Parse an ISO 8601 datetime string. Anything else reads as no date."""
    if not value or not isinstance(value, str):
        return None
    try:
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        return datetime.fromisoformat(value)
    except (ValueError, TypeError):
        return None


def _parse_record(item: Any, session: Session) -> WorklogRecord:
    if not isinstance(item, dict) or item.get("id") is None:
        raise InvalidResponseShape("Worklog is missing its id")
    try:
        record_id = int(item["id"])
        user_id = int(item.get("user_id") or session.user_id)
    except (TypeError, ValueError):
        raise InvalidResponseShape("Worklog has a non-numeric id")

    date = _parse_iso(item.get("date") or item.get("createdAt"))
    return WorklogRecord(
        id=record_id,
        user_id=user_id,
        title=item.get("title") or "",
        description=item.get("description") or "",
        date=date,
        formatted_date=format_list_date(date),
    )


def _parse_page(data: dict, session: Session) -> Page:
    items = data.get("worklogs")
    if not isinstance(items, list):
        raise InvalidResponseShape()

    try:
        total_count = int(data["totalCount"])
        total_pages = int(data["totalPages"])
        current_page = int(data["currentPage"])
    except (KeyError, TypeError, ValueError):
        raise InvalidResponseShape()

    # An empty collection may come back as "page 1 of 0"
    total_pages = max(total_pages, 1)
    current_page = min(max(current_page, 1), total_pages)

    return Page(
        items=[_parse_record(item, session) for item in items],
        current_page=current_page,
        total_pages=total_pages,
        total_count=max(total_count, 0),
    )
