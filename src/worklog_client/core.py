"""Core data models for worklog-client."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


@dataclass
class Session:
    """An authenticated login, as kept in durable storage."""

    token: str
    user_id: str  # stored as a string, e.g. "5"
    email: str


@dataclass
class WorklogRecord:
    """A single worklog entry. Server-owned: id and date are never set client-side."""

    id: int
    user_id: int
    title: str
    description: str = ""
    date: Optional[datetime] = None
    formatted_date: str = ""  # derived display value, not authoritative


@dataclass
class Page:
    """One page of worklogs as returned by the list endpoint."""

    items: list[WorklogRecord] = field(default_factory=list)
    current_page: int = 1
    total_pages: int = 1
    total_count: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def has_previous(self) -> bool:
        return self.current_page > 1

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages


@dataclass
class UserProfile:
    """Public profile fields for the logged-in user."""

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    profile_image: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class ActionKind(str, Enum):
    VIEW = "view"
    EDIT = "edit"
    DELETE = "delete"


@dataclass
class PendingAction:
    """A record the user picked from the list, and what they want to do with it."""

    target: WorklogRecord
    kind: ActionKind
