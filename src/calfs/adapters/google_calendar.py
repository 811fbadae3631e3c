"""Google Calendar API adapter."""

import logging
from datetime import date, datetime, time, timedelta
from pathlib import Path

from calfs.core.calendar import CalendarEntry
from calfs.ports.calendar_source import SourceUnavailableError

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/calendar.readonly"]


def _event_time(raw: dict | None) -> datetime | None:
    """Parse an event start/end object; all-day dates become local midnight."""
    if not raw:
        return None
    if "dateTime" in raw:
        return datetime.fromisoformat(raw["dateTime"].replace("Z", "+00:00"))
    if "date" in raw:
        return datetime.combine(date.fromisoformat(raw["date"]), time()).astimezone()
    return None


def _local_midnight(d: date) -> datetime:
    return datetime.combine(d, time()).astimezone()


class GoogleCalendarAdapter:
    """
    Fetches events from Google Calendar via the API.

    Implements CalendarSource protocol. Every query pages through
    events().list; API and credential failures raise SourceUnavailableError.
    """

    def __init__(
        self,
        config_folder: str,
        calendar_id: str = "primary",
        client_secret_file: str = "",
    ):
        self.config_folder = config_folder
        self.calendar_id = calendar_id
        self.client_secret_file = client_secret_file
        self._token_path = Path(config_folder).expanduser() / "token.json"

    def _get_credentials(self):
        """Load credentials from token.json, refreshing if needed."""
        from google.auth.transport.requests import Request
        from google.oauth2.credentials import Credentials

        if not self._token_path.exists():
            raise SourceUnavailableError(
                f"No token.json in {self.config_folder} - run 'calfs auth'"
            )

        creds = Credentials.from_authorized_user_file(str(self._token_path), SCOPES)

        if creds.expired and creds.refresh_token:
            try:
                creds.refresh(Request())
            except Exception as e:
                raise SourceUnavailableError(f"Failed to refresh Google token: {e}") from e
            self._token_path.write_text(creds.to_json())
            self._token_path.chmod(0o600)

        return creds

    def _build_service(self):
        """Build a Google Calendar API service."""
        from googleapiclient.discovery import build

        creds = self._get_credentials()
        return build("calendar", "v3", credentials=creds)

    def authenticate(self) -> bool:
        """Run OAuth flow for this account. Returns True on success."""
        from google_auth_oauthlib.flow import InstalledAppFlow

        if not self.client_secret_file:
            logger.error("No client secret file configured")
            return False

        secret_path = Path(self.client_secret_file).expanduser()
        if not secret_path.exists():
            logger.error(f"Client secret file not found: {secret_path}")
            return False

        flow = InstalledAppFlow.from_client_secrets_file(str(secret_path), SCOPES)
        creds = flow.run_local_server(port=0)

        token_dir = self._token_path.parent
        token_dir.mkdir(parents=True, exist_ok=True)
        self._token_path.write_text(creds.to_json())
        self._token_path.chmod(0o600)
        return True

    def _list_events(self, **params) -> list[dict]:
        """Collect every page of events().list for the configured calendar."""
        try:
            service = self._build_service()
            items = []
            page_token = None
            while True:
                result = (
                    service.events()
                    .list(
                        calendarId=self.calendar_id,
                        showDeleted=False,
                        pageToken=page_token,
                        **params,
                    )
                    .execute()
                )
                items.extend(result.get("items", []))
                page_token = result.get("nextPageToken")
                if not page_token:
                    return items
        except SourceUnavailableError:
            raise
        except Exception as e:
            logger.warning(f"Google Calendar API error: {e}")
            raise SourceUnavailableError(f"Google Calendar API error: {e}") from e

    def _starts(self, **params) -> list[datetime]:
        starts = []
        for item in self._list_events(**params):
            start = _event_time(item.get("start"))
            if start is not None:
                starts.append(start)
        return starts

    def _window(self, first: date, after: date) -> dict:
        return {
            "timeMin": _local_midnight(first).isoformat(),
            "timeMax": _local_midnight(after).isoformat(),
        }

    def years(self) -> list[int]:
        starts = self._starts(fields="items(start),nextPageToken")
        return sorted({s.year for s in starts})

    def months(self, year: int) -> list[int]:
        starts = self._starts(**self._window(date(year, 1, 1), date(year + 1, 1, 1)))
        return sorted({s.month for s in starts if s.year == year})

    def days(self, year: int, month: int) -> list[int]:
        first = date(year, month, 1)
        after = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
        starts = self._starts(**self._window(first, after))
        return sorted({s.day for s in starts if s.year == year and s.month == month})

    def entries(self, target_date: date) -> list[CalendarEntry]:
        params = self._window(target_date, target_date + timedelta(days=1))
        entries = []
        for item in self._list_events(**params):
            start = _event_time(item.get("start"))
            if start is None:
                continue
            end = _event_time(item.get("end")) or start

            extra = {k: item[k] for k in ("id", "location", "status", "htmlLink") if k in item}
            entries.append(
                CalendarEntry(
                    start=start,
                    end=end,
                    summary=item.get("summary", ""),
                    description=item.get("description", ""),
                    extra=extra,
                )
            )
        return entries
