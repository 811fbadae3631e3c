"""Tests for Google Calendar adapter."""

from unittest.mock import patch, MagicMock
from datetime import date, datetime, timedelta, timezone

import pytest

from calfs.adapters.google_calendar import GoogleCalendarAdapter, _event_time
from calfs.ports.calendar_source import SourceUnavailableError


def _item(summary, start, end, **extra):
    return {"summary": summary, "start": start, "end": end, **extra}


class TestEventTime:
    def test_date_time(self):
        t = _event_time({"dateTime": "2025-01-15T10:00:00-05:00"})
        assert t == datetime(2025, 1, 15, 15, 0, tzinfo=timezone.utc)

    def test_utc_suffix(self):
        t = _event_time({"dateTime": "2025-01-15T10:00:00Z"})
        assert t == datetime(2025, 1, 15, 10, 0, tzinfo=timezone.utc)

    def test_all_day_is_local_midnight(self):
        t = _event_time({"date": "2025-01-15"})
        assert t.tzinfo is not None
        assert t.date() == date(2025, 1, 15)
        assert (t.hour, t.minute) == (0, 0)

    def test_missing(self):
        assert _event_time(None) is None
        assert _event_time({}) is None


class TestGoogleCalendarAdapter:
    """Tests for GoogleCalendarAdapter."""

    def test_token_path(self):
        adapter = GoogleCalendarAdapter(config_folder="/home/user/.config/work")
        assert adapter._token_path.name == "token.json"
        assert "work" in str(adapter._token_path)

    def test_default_calendar_is_primary(self):
        adapter = GoogleCalendarAdapter(config_folder="/tmp/test")
        assert adapter.calendar_id == "primary"

    @patch("calfs.adapters.google_calendar.GoogleCalendarAdapter._build_service")
    def test_entries(self, mock_build):
        service = MagicMock()
        mock_build.return_value = service
        service.events().list().execute.return_value = {
            "items": [
                _item(
                    "Standup",
                    {"dateTime": "2025-01-15T10:00:00-05:00"},
                    {"dateTime": "2025-01-15T11:30:00-05:00"},
                    description="Daily sync",
                    location="Room A",
                    id="abc123",
                ),
            ]
        }

        adapter = GoogleCalendarAdapter(config_folder="/tmp/test")
        entries = adapter.entries(date(2025, 1, 15))

        assert len(entries) == 1
        assert entries[0].summary == "Standup"
        assert entries[0].description == "Daily sync"
        assert entries[0].duration == timedelta(hours=1, minutes=30)
        assert entries[0].extra == {"id": "abc123", "location": "Room A"}

    @patch("calfs.adapters.google_calendar.GoogleCalendarAdapter._build_service")
    def test_entries_skip_items_without_start(self, mock_build):
        service = MagicMock()
        mock_build.return_value = service
        service.events().list().execute.return_value = {
            "items": [
                {"summary": "Broken"},
                _item("Holiday", {"date": "2025-01-15"}, {"date": "2025-01-16"}),
            ]
        }

        adapter = GoogleCalendarAdapter(config_folder="/tmp/test")
        entries = adapter.entries(date(2025, 1, 15))

        assert [e.summary for e in entries] == ["Holiday"]
        assert entries[0].duration == timedelta(days=1)

    @patch("calfs.adapters.google_calendar.GoogleCalendarAdapter._build_service")
    def test_entries_query_window(self, mock_build):
        service = MagicMock()
        mock_build.return_value = service
        service.events().list().execute.return_value = {"items": []}
        service.events().list.reset_mock()

        adapter = GoogleCalendarAdapter(config_folder="/tmp/test", calendar_id="work@example.com")
        adapter.entries(date(2025, 1, 15))

        kwargs = service.events().list.call_args.kwargs
        assert kwargs["calendarId"] == "work@example.com"
        assert kwargs["showDeleted"] is False
        assert datetime.fromisoformat(kwargs["timeMin"]).date() == date(2025, 1, 15)
        assert datetime.fromisoformat(kwargs["timeMax"]).date() == date(2025, 1, 16)

    @patch("calfs.adapters.google_calendar.GoogleCalendarAdapter._build_service")
    def test_reads_every_page(self, mock_build):
        service = MagicMock()
        mock_build.return_value = service
        service.events().list().execute.side_effect = [
            {"items": [{"start": {"dateTime": "2023-06-01T09:00:00Z"}}], "nextPageToken": "p2"},
            {"items": [{"start": {"dateTime": "2024-02-01T09:00:00Z"}}], "nextPageToken": "p3"},
            {"items": [{"start": {"dateTime": "2025-03-01T09:00:00Z"}}]},
        ]

        adapter = GoogleCalendarAdapter(config_folder="/tmp/test")

        # The final page has no token but must still be counted
        assert adapter.years() == [2023, 2024, 2025]
        page_tokens = [c.kwargs.get("pageToken") for c in service.events().list.call_args_list[-3:]]
        assert page_tokens == [None, "p2", "p3"]

    @patch("calfs.adapters.google_calendar.GoogleCalendarAdapter._build_service")
    def test_years_requests_start_field_only(self, mock_build):
        service = MagicMock()
        mock_build.return_value = service
        service.events().list().execute.return_value = {"items": []}

        GoogleCalendarAdapter(config_folder="/tmp/test").years()

        assert service.events().list.call_args.kwargs["fields"] == "items(start),nextPageToken"

    @patch("calfs.adapters.google_calendar.GoogleCalendarAdapter._build_service")
    def test_months_and_days(self, mock_build):
        service = MagicMock()
        mock_build.return_value = service
        service.events().list().execute.return_value = {
            "items": [
                {"start": {"dateTime": "2024-03-05T09:00:00Z"}},
                {"start": {"dateTime": "2024-03-05T15:00:00Z"}},
                {"start": {"dateTime": "2024-03-17T09:00:00Z"}},
                {"start": {"dateTime": "2024-01-02T09:00:00Z"}},
            ]
        }

        adapter = GoogleCalendarAdapter(config_folder="/tmp/test")

        assert adapter.months(2024) == [1, 3]
        assert adapter.days(2024, 3) == [5, 17]

    @patch("calfs.adapters.google_calendar.GoogleCalendarAdapter._build_service")
    def test_days_december_window_ends_next_year(self, mock_build):
        service = MagicMock()
        mock_build.return_value = service
        service.events().list().execute.return_value = {"items": []}

        GoogleCalendarAdapter(config_folder="/tmp/test").days(2024, 12)

        time_max = service.events().list.call_args.kwargs["timeMax"]
        assert datetime.fromisoformat(time_max).date() == date(2025, 1, 1)

    @patch("calfs.adapters.google_calendar.GoogleCalendarAdapter._build_service")
    def test_api_error_raises(self, mock_build):
        mock_build.side_effect = Exception("API error")
        adapter = GoogleCalendarAdapter(config_folder="/tmp/test")
        with pytest.raises(SourceUnavailableError):
            adapter.entries(date(2025, 1, 15))

    def test_missing_token_raises(self, tmp_path):
        adapter = GoogleCalendarAdapter(config_folder=str(tmp_path))
        with pytest.raises(SourceUnavailableError, match="calfs auth"):
            adapter.years()

    def test_authenticate_without_secret_file(self, tmp_path):
        adapter = GoogleCalendarAdapter(config_folder=str(tmp_path))
        assert adapter.authenticate() is False

    def test_authenticate_missing_secret_file(self, tmp_path):
        adapter = GoogleCalendarAdapter(
            config_folder=str(tmp_path),
            client_secret_file=str(tmp_path / "missing.json"),
        )
        assert adapter.authenticate() is False
