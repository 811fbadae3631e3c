"""Ports - interfaces/protocols for external dependencies."""

from .calendar_source import CalendarSource, SourceUnavailableError

__all__ = [
    "CalendarSource",
    "SourceUnavailableError",
]
