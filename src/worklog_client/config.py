"""Environment-driven settings and platform-aware path resolution."""

import os
import sys
from pathlib import Path

DEFAULT_API_URL = "http://localhost:5000"
DEFAULT_TIMEOUT = 10.0
DEFAULT_PAGE_SIZE = 10


def get_api_url() -> str:
    """Return the base URL of the worklog API, without a trailing slash."""
    return os.environ.get("WORKLOG_API_URL", DEFAULT_API_URL).rstrip("/")


def get_timeout() -> float:
    """Return the per-request timeout in seconds."""
    env = os.environ.get("WORKLOG_TIMEOUT")
    if env:
        try:
            return float(env)
        except ValueError:
            raise ValueError(f"WORKLOG_TIMEOUT must be a number, got {env!r}")
    return DEFAULT_TIMEOUT


def get_page_size() -> int:
    """Return how many worklogs to request per page."""
    env = os.environ.get("WORKLOG_PAGE_SIZE")
    if env:
        try:
            size = int(env)
        except ValueError:
            raise ValueError(f"WORKLOG_PAGE_SIZE must be an integer, got {env!r}")
        if size < 1:
            raise ValueError("WORKLOG_PAGE_SIZE must be at least 1")
        return size
    return DEFAULT_PAGE_SIZE


def get_session_path() -> Path:
    """Return the path of the file holding the stored login session."""
    env = os.environ.get("WORKLOG_SESSION_PATH")
    if env:
        return Path(env)

    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "worklog-client" / "session.json"
    elif sys.platform == "win32":
        return Path(os.environ.get("APPDATA", "")) / "worklog-client" / "session.json"
    else:  # Linux
        xdg = os.environ.get("XDG_CONFIG_HOME")
        base = Path(xdg) if xdg else Path.home() / ".config"
        return base / "worklog-client" / "session.json"
