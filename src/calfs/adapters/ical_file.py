"""ICS adapter - reads an iCalendar file from disk or over HTTP."""

import logging
from datetime import date, datetime, time, timedelta
from pathlib import Path

import recurring_ical_events
import requests
from icalendar import Calendar

from calfs.core.calendar import CalendarEntry
from calfs.ports.calendar_source import SourceUnavailableError

logger = logging.getLogger(__name__)

EXTRA_FIELDS = ("location", "uid", "status")


def _to_datetime(value: date | datetime) -> datetime:
    """Coerce an iCalendar DATE or DATE-TIME into an aware datetime (local if floating)."""
    if not isinstance(value, datetime):
        value = datetime.combine(value, time())
    if value.tzinfo is None:
        value = value.astimezone()
    return value


class IcsCalendarAdapter:
    """
    iCalendar file adapter.

    The whole calendar is loaded and parsed once, at construction. Recurring
    events are expanded into one entry per occurrence, from the earliest
    DTSTART up to the end of the year horizon_years after the later of the
    last DTSTART and today.
    Implements CalendarSource protocol.
    """

    def __init__(self, locator: str, timeout: int = 30, horizon_years: int = 1):
        self.locator = locator
        self.timeout = timeout
        self.horizon_years = horizon_years
        self._entries = self._parse(self._load())
        logger.info(f"Loaded {len(self._entries)} entries from {locator}")

    def _load(self) -> bytes:
        if self.locator.startswith(("http://", "https://")):
            try:
                response = requests.get(self.locator, timeout=self.timeout)
                response.raise_for_status()
            except requests.RequestException as e:
                raise SourceUnavailableError(f"Cannot fetch {self.locator}: {e}") from e
            return response.content

        try:
            return Path(self.locator).expanduser().read_bytes()
        except OSError as e:
            raise SourceUnavailableError(f"Cannot open {self.locator}: {e}") from e

    def _parse(self, data: bytes) -> list[CalendarEntry]:
        try:
            cal = Calendar.from_ical(data)
        except ValueError as e:
            raise SourceUnavailableError(f"Cannot parse {self.locator}: {e}") from e

        entries = []
        for component in self._occurrences(cal):
            try:
                entry = self._parse_event(component)
            except (ValueError, KeyError, TypeError) as e:
                logger.debug(f"Skipping malformed event: {e}")
                continue
            if entry:
                entries.append(entry)
        entries.sort(key=lambda e: e.start)
        return entries

    def _occurrences(self, cal: Calendar) -> list:
        starts = [
            _to_datetime(c.get("dtstart").dt).date()
            for c in cal.walk("VEVENT")
            if c.get("dtstart") is not None
        ]
        if not starts:
            return []

        # Local dates can lag a UTC start by a day
        window_start = min(starts) - timedelta(days=1)
        last_year = max(max(starts).year, date.today().year)
        window_end = date(last_year + self.horizon_years + 1, 1, 1)
        try:
            return recurring_ical_events.of(cal).between(window_start, window_end)
        except (ValueError, KeyError, TypeError) as e:
            raise SourceUnavailableError(f"Cannot expand events in {self.locator}: {e}") from e

    def _parse_event(self, component) -> CalendarEntry | None:
        """Parse a single VEVENT into a CalendarEntry."""
        dtstart = component.get("dtstart")
        if dtstart is None:
            return None

        raw_start = dtstart.dt
        start = _to_datetime(raw_start)

        dtend = component.get("dtend")
        if dtend is not None:
            end = _to_datetime(dtend.dt)
        elif component.get("duration") is not None:
            end = start + component.get("duration").dt
        else:
            end = start
        if not isinstance(raw_start, datetime) and end == start:
            # All-day event with no end lasts the whole day
            end = start + timedelta(days=1)

        comment = component.get("comment", "")
        if isinstance(comment, list):
            comment = "\n".join(str(c) for c in comment)

        extra = {}
        for name in EXTRA_FIELDS:
            if name in component:
                extra[name] = str(component.get(name))

        return CalendarEntry(
            start=start,
            end=end,
            summary=str(component.get("summary", "")),
            description=str(component.get("description", "")),
            notes=str(comment),
            extra=extra,
        )

    def years(self) -> list[int]:
        return sorted({e.start.year for e in self._entries})

    def months(self, year: int) -> list[int]:
        return sorted({e.start.month for e in self._entries if e.start.year == year})

    def days(self, year: int, month: int) -> list[int]:
        return sorted(
            {
                e.start.day
                for e in self._entries
                if e.start.year == year and e.start.month == month
            }
        )

    def entries(self, target_date: date) -> list[CalendarEntry]:
        return [e for e in self._entries if e.starts_on(target_date)]
