"""Shared test fixtures: an in-memory calendar source and a fake clock."""

from collections import Counter
from datetime import date, datetime, timezone

import pytest

from calfs.core.calendar import CalendarEntry
from calfs.ports.calendar_source import SourceUnavailableError


class StubSource:
    """
    In-memory CalendarSource that counts calls per query.

    Set `fail` to make every query raise SourceUnavailableError.
    """

    def __init__(self, entries: list[CalendarEntry] | None = None, years: list[int] | None = None):
        self.entry_list = list(entries or [])
        self._years = years
        self.calls = Counter()
        self.fail = False

    def _check(self, name: str) -> None:
        self.calls[name] += 1
        if self.fail:
            raise SourceUnavailableError("calendar offline")

    def years(self) -> list[int]:
        self._check("years")
        if self._years is not None:
            return list(self._years)
        return sorted({e.start.year for e in self.entry_list})

    def months(self, year: int) -> list[int]:
        self._check("months")
        return sorted({e.start.month for e in self.entry_list if e.start.year == year})

    def days(self, year: int, month: int) -> list[int]:
        self._check("days")
        return sorted(
            {e.start.day for e in self.entry_list if e.start.year == year and e.start.month == month}
        )

    def entries(self, target_date: date) -> list[CalendarEntry]:
        self._check("entries")
        # Overlapping entries are returned too; the namespace filters by start date
        return [
            e
            for e in self.entry_list
            if e.start.date() <= target_date <= e.end.date()
        ]


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def make_entry():
    """Factory for UTC calendar entries."""

    def _make(
        start: tuple,
        end: tuple,
        summary: str = "Meeting",
        description: str = "",
    ) -> CalendarEntry:
        return CalendarEntry(
            start=datetime(*start, tzinfo=timezone.utc),
            end=datetime(*end, tzinfo=timezone.utc),
            summary=summary,
            description=description,
        )

    return _make


@pytest.fixture
def make_source():
    """Factory for StubSource instances."""
    return StubSource


@pytest.fixture
def stub_source():
    return StubSource()


@pytest.fixture
def clock():
    return FakeClock()
