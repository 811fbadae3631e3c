"""Functional core - pure calendar logic with no I/O."""

from .calendar import (
    CalendarEntry,
    filter_entries_by_start,
    format_day_header,
    format_duration,
    month_name,
    parse_day_header,
    parse_month,
    render_day,
)
from .handles import day_handle, month_handle, year_handle

__all__ = [
    # Calendar
    "CalendarEntry",
    "filter_entries_by_start",
    "format_day_header",
    "format_duration",
    "month_name",
    "parse_day_header",
    "parse_month",
    "render_day",
    # Handles
    "year_handle",
    "month_handle",
    "day_handle",
]
