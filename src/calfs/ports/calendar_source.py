"""Calendar source interface."""

from datetime import date
from typing import Protocol

from calfs.core.calendar import CalendarEntry
from calfs.errors import CalfsError


class SourceUnavailableError(CalfsError):
    """Raised when a calendar source cannot answer a query (parse, I/O, network, auth)."""


class CalendarSource(Protocol):
    """Interface for querying calendar data from any backend."""

    def years(self) -> list[int]:
        """Years that have at least one entry."""
        ...

    def months(self, year: int) -> list[int]:
        """Month numbers (1-12) that have entries in a year."""
        ...

    def days(self, year: int, month: int) -> list[int]:
        """Day numbers that have entries in a year/month."""
        ...

    def entries(self, target_date: date) -> list[CalendarEntry]:
        """Entries starting on a specific date, in provider order."""
        ...
