"""Screen controllers: page state and the action flow for the worklog list.

Controllers sit between a front end (the CLI, or any UI) and the
``WorklogClient``. They hold the state a screen renders and never raise
``WorklogError``s for network failures; those land in ``error`` for an
inline retry affordance, and session problems set ``needs_login``.
"""

import logging

from .client import WorklogClient
from .core import ActionKind, Page, PendingAction, UserProfile, WorklogRecord
from .errors import AuthRequired, SessionExpired, WorklogError
from .storage import SessionStore

logger = logging.getLogger(__name__)


def page_after_delete(items_on_page: int, current_page: int) -> int:
    """Page to show after deleting one record from ``current_page``.

    Deleting the only record on a page past the first steps back one page,
    so the list never lands on an empty trailing page.
    """
    if items_on_page == 1 and current_page > 1:
        return current_page - 1
    return current_page


class WorklogListController:
    """State for the paginated worklog list screen."""

    def __init__(self, client: WorklogClient, store: SessionStore, page_size: int | None = None):
        self.client = client
        self.store = store
        self.page_size = page_size

        self.page: Page | None = None
        self.requested_page = 1
        self.loading = False
        self.refreshing = False
        self.error: str | None = None
        self.needs_login = False
        self.pending: PendingAction | None = None

    @property
    def items(self) -> list[WorklogRecord]:
        return self.page.items if self.page else []

    @property
    def total_pages(self) -> int:
        return self.page.total_pages if self.page else 1

    @property
    def current_page(self) -> int:
        """Number of the page on screen; 1 before anything has loaded."""
        return self.page.current_page if self.page else 1

    @property
    def can_go_back(self) -> bool:
        return self.page.has_previous if self.page else False

    @property
    def can_go_forward(self) -> bool:
        return self.page.has_next if self.page else False

    # ── Fetching ─────────────────────────────────────────────────────

    async def activate(self) -> None:
        """Screen came into view; reload the page the user was on."""
        await self.load(self.current_page)

    async def refresh(self) -> None:
        """Pull-to-refresh: keep the current page visible while reloading it."""
        self.refreshing = True
        try:
            await self._fetch(self.current_page)
        finally:
            self.refreshing = False

    async def retry(self) -> None:
        """Repeat the last request, which may differ from the page on screen."""
        await self.load(self.requested_page)

    async def load(self, page_number: int) -> None:
        self.loading = True
        try:
            await self._fetch(page_number)
        finally:
            self.loading = False

    async def _fetch(self, page_number: int) -> None:
        self.error = None
        self.requested_page = page_number
        try:
            page = await self.client.fetch_page(self.store.get(), page_number, self.page_size)
        except (AuthRequired, SessionExpired) as e:
            self.error = e.message
            self.needs_login = True
            return
        except WorklogError as e:
            logger.warning("Worklog fetch failed: %s", e.message)
            self.error = e.message
            return

        self.page = page

    # ── Pagination ───────────────────────────────────────────────────

    async def go_to_page(self, page_number: int) -> bool:
        """Load ``page_number`` if it is in range. Returns whether a fetch happened."""
        if page_number < 1 or page_number > self.total_pages:
            return False
        await self.load(page_number)
        return True

    async def first_page(self) -> bool:
        if not self.can_go_back:
            return False
        return await self.go_to_page(1)

    async def previous_page(self) -> bool:
        if not self.can_go_back:
            return False
        return await self.go_to_page(self.current_page - 1)

    async def next_page(self) -> bool:
        if not self.can_go_forward:
            return False
        return await self.go_to_page(self.current_page + 1)

    async def last_page(self) -> bool:
        if not self.can_go_forward:
            return False
        return await self.go_to_page(self.total_pages)

    # ── Action flow ──────────────────────────────────────────────────

    def select(self, record: WorklogRecord, kind: ActionKind | str) -> PendingAction:
        """Pick an action for a record, replacing any action already pending."""
        self.pending = PendingAction(target=record, kind=ActionKind(kind))
        return self.pending

    def cancel(self) -> None:
        self.pending = None

    def open_view(self) -> WorklogRecord:
        return self._resolve(ActionKind.VIEW)

    def begin_edit(self) -> WorklogRecord:
        """Hand the record to the edit flow and go back to idle."""
        return self._resolve(ActionKind.EDIT)

    async def confirm_delete(self) -> bool:
        """Delete the pending record, then reload the right page.

        Returns to idle whatever the outcome. Returns True if the delete
        went through.
        """
        if self.pending is None or self.pending.kind is not ActionKind.DELETE:
            raise RuntimeError("No delete pending")

        target = self.pending.target
        items_on_page = len(self.items)
        try:
            await self.client.delete_record(self.store.get(), target.id)
        except (AuthRequired, SessionExpired) as e:
            self.error = e.message
            self.needs_login = True
            return False
        except WorklogError as e:
            logger.warning("Delete of worklog %s failed: %s", target.id, e.message)
            self.error = e.message
            return False
        finally:
            self.pending = None

        await self.load(page_after_delete(items_on_page, self.current_page))
        return True

    def _resolve(self, kind: ActionKind) -> WorklogRecord:
        if self.pending is None or self.pending.kind is not kind:
            raise RuntimeError(f"No {kind.value} pending")
        target = self.pending.target
        self.pending = None
        return target


class ProfileController:
    """State for the profile screen."""

    def __init__(self, client: WorklogClient, store: SessionStore):
        self.client = client
        self.store = store
        self.profile: UserProfile | None = None
        self.loading = False
        self.error: str | None = None
        self.needs_login = False

    async def activate(self) -> None:
        await self.load()

    async def load(self) -> None:
        self.loading = True
        self.error = None
        try:
            self.profile = await self.client.get_profile(self.store.get())
        except (AuthRequired, SessionExpired) as e:
            self.error = e.message
            self.needs_login = True
        except WorklogError as e:
            logger.warning("Profile fetch failed: %s", e.message)
            self.error = e.message
        finally:
            self.loading = False

    def logout(self) -> None:
        self.client.logout()
        self.profile = None
        self.needs_login = True
