"""Tests for terminal rendering."""

from datetime import datetime, timezone

import pytest

from worklog_client.core import Page, UserProfile, WorklogRecord
from worklog_client.display import (
    format_detail_date,
    format_list_date,
    page_to_table,
    pagination_label,
    profile_to_text,
    record_to_text,
)


@pytest.fixture
def sample_record():
    date = datetime(2025, 1, 5, 14, 30, 0, tzinfo=timezone.utc)
    return WorklogRecord(
        id=42,
        user_id=5,
        title="Fix authentication bug",
        description="Updated token validation in auth.ts",
        date=date,
        formatted_date=format_list_date(date),
    )


class TestDates:
    def test_list_format(self, sample_record):
        assert format_list_date(sample_record.date) == "Jan 05, 2025"

    def test_detail_format(self, sample_record):
        assert format_detail_date(sample_record.date) == "January 05, 2025 - 02:30 PM"

    def test_missing_dates(self):
        assert format_list_date(None) == ""
        assert format_detail_date(None) == "Not specified"


class TestPageTable:
    def test_includes_rows_and_footer(self, sample_record):
        page = Page(items=[sample_record], current_page=1, total_pages=1, total_count=1)
        result = page_to_table(page)
        assert "Fix authentication bug" in result
        assert "Jan 05, 2025" in result
        assert "42" in result
        assert result.endswith("1 total  Page 1 of 1")

    def test_empty_page(self):
        result = page_to_table(Page())
        assert "No worklogs found" in result
        assert "0 total" in result

    def test_long_titles_are_truncated(self, sample_record):
        sample_record.title = "x" * 100
        result = page_to_table(Page(items=[sample_record], total_count=1))
        assert "x" * 100 not in result
        assert "…" in result

    def test_pagination_label(self):
        assert pagination_label(Page(current_page=2, total_pages=5)) == "Page 2 of 5"


class TestRecordText:
    def test_full_details(self, sample_record):
        result = record_to_text(sample_record)
        assert result.startswith("Fix authentication bug")
        assert "January 05, 2025 - 02:30 PM" in result
        assert "Updated token validation" in result

    def test_placeholders(self):
        result = record_to_text(WorklogRecord(id=1, user_id=5, title=""))
        assert "Worklog Details" in result
        assert "Not specified" in result
        assert "No description provided" in result


def test_profile_text():
    profile = UserProfile(first_name="Ada", last_name="Lovelace", email="a@b.com", profile_image="uploads/ada.jpg")
    result = profile_to_text(profile)
    assert "Ada Lovelace" in result
    assert "a@b.com" in result
    assert "uploads/ada.jpg" in result
