"""Pure calendar domain logic - no I/O dependencies."""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from types import MappingProxyType
from typing import Any, Iterable, Mapping

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

MONTH_ABBREVIATIONS = tuple(name[:3] for name in MONTH_NAMES)

HEADER_RULE = "=" * 20
ENTRY_RULE = "---"


@dataclass(frozen=True)
class CalendarEntry:
    """One occurrence of a calendar event."""

    start: datetime
    end: datetime
    summary: str = ""
    description: str = ""
    notes: str = ""
    extra: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        # Read-only copy, so entries shared through the cache stay unchanged
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def starts_on(self, target_date: date) -> bool:
        """Check if this entry starts on a date, in the entry's own timezone."""
        return self.start.date() == target_date


def month_name(month: int) -> str:
    """Full English name for a month number (1-12)."""
    return MONTH_NAMES[month - 1]


def parse_month(name: str) -> int | None:
    """
    Parse a month token into a month number.

    Only the first three characters are significant, so "Jan", "Janu" and
    "January" all give 1. Matching is case-sensitive. Returns None for
    anything else, including tokens shorter than three characters.
    """
    prefix = name[:3]
    if prefix in MONTH_ABBREVIATIONS:
        return MONTH_ABBREVIATIONS.index(prefix) + 1
    return None


def format_duration(delta: timedelta) -> str:
    """Format a duration compactly, e.g. 1h30m, 45m, 2h, 10s."""
    total = int(delta.total_seconds())
    if total == 0:
        return "0s"

    sign = "-" if total < 0 else ""
    total = abs(total)
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)

    parts = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if seconds:
        parts.append(f"{seconds}s")
    return sign + "".join(parts)


def format_day_header(target_date: date) -> str:
    """Header line identifying a day file, e.g. 2024-March-05."""
    return f"{target_date.year:04d}-{month_name(target_date.month)}-{target_date.day:02d}"


def parse_day_header(line: str) -> date:
    """
    Parse a header line produced by format_day_header.

    Raises ValueError if the line is not a valid header.
    """
    parts = line.strip().split("-")
    if len(parts) != 3:
        raise ValueError(f"Not a day header: {line!r}")

    year_str, month_str, day_str = parts
    month = parse_month(month_str)
    if month is None:
        raise ValueError(f"Unknown month in day header: {month_str!r}")
    return date(int(year_str), month, int(day_str))


def filter_entries_by_start(
    entries: Iterable[CalendarEntry], target_date: date
) -> list[CalendarEntry]:
    """
    Keep entries whose start falls on target_date, preserving order.

    Entries are attributed to their start day only; one that spans midnight
    does not appear on the following day.
    """
    return [e for e in entries if e.starts_on(target_date)]


def render_day(target_date: date, entries: Iterable[CalendarEntry]) -> str:
    """
    Render the text document for a day file.

    Pure function - no I/O.
    """
    lines = [HEADER_RULE, format_day_header(target_date)]

    for entry in filter_entries_by_start(entries, target_date):
        lines.append(ENTRY_RULE)
        lines.append(f"{entry.start} - {entry.end} ({format_duration(entry.duration)})")
        lines.append(entry.summary)
        lines.append(entry.description)

    return "\n".join(lines) + "\n"
