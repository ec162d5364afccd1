"""Render worklogs, pages and profiles as plain text for the terminal.

Everything here is derived from server data for display only; nothing
produced by these helpers is sent back to the API.
"""

from datetime import datetime

from .core import Page, UserProfile, WorklogRecord

LIST_DATE_FORMAT = "%b %d, %Y"  # Jan 05, 2025
DETAIL_DATE_FORMAT = "%B %d, %Y - %I:%M %p"  # January 05, 2025 - 02:30 PM

TITLE_WIDTH = 40
DATE_WIDTH = 14


def format_list_date(value: datetime | None) -> str:
    return value.strftime(LIST_DATE_FORMAT) if value else ""


def format_detail_date(value: datetime | None) -> str:
    return value.strftime(DETAIL_DATE_FORMAT) if value else "Not specified"


def pagination_label(page: Page) -> str:
    return f"Page {page.current_page} of {page.total_pages}"


def _truncate(text: str, width: int) -> str:
    text = " ".join(text.split())
    if len(text) <= width:
        return text
    return text[: width - 1] + "…"


def page_to_table(page: Page) -> str:
    """Render a page as a fixed-width table with a pagination footer."""
    lines = [f"{'ID':>6}  {'Title':<{TITLE_WIDTH}}  {'Date':<{DATE_WIDTH}}"]
    lines.append("-" * len(lines[0]))

    if page.is_empty:
        lines.append("No worklogs found")
    for record in page.items:
        title = _truncate(record.title, TITLE_WIDTH)
        lines.append(f"{record.id:>6}  {title:<{TITLE_WIDTH}}  {record.formatted_date:<{DATE_WIDTH}}")

    lines.append("")
    lines.append(f"{page.total_count} total  {pagination_label(page)}")
    return "\n".join(lines)


def record_to_text(record: WorklogRecord) -> str:
    """Render the full details of a single worklog."""
    lines = [
        record.title or "Worklog Details",
        format_detail_date(record.date),
        "",
        "Description",
        record.description or "No description provided",
    ]
    return "\n".join(lines)


def profile_to_text(profile: UserProfile) -> str:
    lines = [
        profile.full_name or "(no name)",
        profile.email,
    ]
    if profile.profile_image:
        lines.append(f"Image: {profile.profile_image}")
    return "\n".join(lines)
