"""Durable storage for the login session.

The session is three string entries (token, user id, email) written and
cleared together. ``SessionStore`` is the single owner; everything else
receives the ``Session`` it returns.
"""

import json
import logging
import os
import stat
from abc import ABC, abstractmethod
from pathlib import Path

from .config import get_session_path
from .core import Session

logger = logging.getLogger(__name__)

TOKEN_KEY = "userToken"
USER_ID_KEY = "userId"
EMAIL_KEY = "userEmail"


class SessionStore(ABC):
    """Get/set/clear interface over wherever the session lives."""

    @abstractmethod
    def get(self) -> Session | None:
        """Return the stored session, or None when logged out."""
        ...

    @abstractmethod
    def set(self, session: Session) -> None:
        """Replace the stored session."""
        ...

    @abstractmethod
    def clear(self) -> None:
        """Remove all session entries."""
        ...


class MemorySessionStore(SessionStore):
    """Process-local store, used in tests and one-shot scripts."""

    def __init__(self, session: Session | None = None):
        self._session = session

    def get(self) -> Session | None:
        return self._session

    def set(self, session: Session) -> None:
        self._session = session

    def clear(self) -> None:
        self._session = None


class FileSessionStore(SessionStore):
    """JSON file store, chmod 0600 (owner-only read/write)."""

    def __init__(self, path: Path | None = None):
        self.path = path or get_session_path()

    def get(self) -> Session | None:
        if not self.path.exists():
            return None

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Failed to read session from %s: %s", self.path, e)
            return None

        if not isinstance(data, dict):
            return None
        token = data.get(TOKEN_KEY)
        user_id = data.get(USER_ID_KEY)
        if not token or not user_id:
            return None
        return Session(token=token, user_id=str(user_id), email=data.get(EMAIL_KEY) or "")

    def set(self, session: Session) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            TOKEN_KEY: session.token,
            USER_ID_KEY: session.user_id,
            EMAIL_KEY: session.email,
        }
        owner_only = stat.S_IRUSR | stat.S_IWUSR
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, owner_only)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(json.dumps(data, indent=2))
        # O_CREAT's mode only applies to new files
        os.chmod(self.path, owner_only)
        logger.info("Saved session for %s", session.email)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
            logger.info("Cleared session at %s", self.path)
