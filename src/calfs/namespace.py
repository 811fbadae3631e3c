"""
Namespace projection: calendar data as a year/month/day tree.

Each node is an immutable value whose parameters fully determine its
children and content. Nothing is stored between calls; every listing, lookup
and read goes back to the calendar source (usually through the cache).
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import ClassVar

from calfs.core.calendar import month_name, parse_month, render_day
from calfs.core.handles import ROOT_HANDLE, day_handle, month_handle, year_handle
from calfs.errors import NameParseError, NotDirectoryError, NotFoundError, ReadOnlyError
from calfs.ports.calendar_source import CalendarSource

logger = logging.getLogger(__name__)


class NodeKind(Enum):
    DIRECTORY = "directory"
    FILE = "file"


@dataclass(frozen=True)
class Timestamps:
    """Modification, access and creation times in epoch seconds."""

    mtime: float
    atime: float
    ctime: float

    @classmethod
    def local_midnight(cls, year: int, month: int = 1, day: int = 1) -> "Timestamps":
        """Midnight of a date in the local timezone."""
        t = datetime(year, month, day).timestamp()
        return cls(mtime=t, atime=t, ctime=t)


@dataclass(frozen=True)
class DirEntry:
    """One row of a directory listing."""

    name: str
    handle: int
    kind: NodeKind


def _parse_int(name: str) -> int:
    if not (name.isascii() and name.isdigit()):
        raise NameParseError(f"Not a number: {name!r}")
    return int(name)


@dataclass(frozen=True)
class RootNode:
    """Top of the tree; children are years."""

    source: CalendarSource

    kind: ClassVar[NodeKind] = NodeKind.DIRECTORY

    @property
    def handle(self) -> int:
        return ROOT_HANDLE

    def timestamps(self) -> Timestamps | None:
        return None

    def list(self) -> list[DirEntry]:
        return [
            DirEntry(name=f"{y:04d}", handle=year_handle(y), kind=NodeKind.DIRECTORY)
            for y in self.source.years()
        ]

    def resolve(self, name: str) -> "YearNode":
        year = _parse_int(name)
        if year not in set(self.source.years()):
            raise NotFoundError(f"No entries in year {year}")
        return YearNode(self.source, year)


@dataclass(frozen=True)
class YearNode:
    """One year; children are months."""

    source: CalendarSource
    year: int

    kind: ClassVar[NodeKind] = NodeKind.DIRECTORY

    @property
    def handle(self) -> int:
        return year_handle(self.year)

    def timestamps(self) -> Timestamps:
        return Timestamps.local_midnight(self.year)

    def list(self) -> list[DirEntry]:
        return [
            DirEntry(
                name=month_name(m),
                handle=month_handle(self.year, m),
                kind=NodeKind.DIRECTORY,
            )
            for m in self.source.months(self.year)
        ]

    def resolve(self, name: str) -> "MonthNode":
        month = parse_month(name)
        if month is None:
            raise NameParseError(f"Not a month name: {name!r}")
        return MonthNode(self.source, self.year, month)


@dataclass(frozen=True)
class MonthNode:
    """One month of a year; children are day files."""

    source: CalendarSource
    year: int
    month: int

    kind: ClassVar[NodeKind] = NodeKind.DIRECTORY

    @property
    def handle(self) -> int:
        return month_handle(self.year, self.month)

    def timestamps(self) -> Timestamps:
        return Timestamps.local_midnight(self.year, self.month)

    def list(self) -> list[DirEntry]:
        return [
            DirEntry(
                name=f"{d:02d}",
                handle=day_handle(self.year, self.month, d),
                kind=NodeKind.FILE,
            )
            for d in self.source.days(self.year, self.month)
        ]

    def resolve(self, name: str) -> "DayNode":
        day = _parse_int(name)
        try:
            date(self.year, self.month, day)
        except ValueError as e:
            raise NotFoundError(f"No such day {self.year}-{self.month:02d}-{name}") from e
        return DayNode(self.source, self.year, self.month, day)


@dataclass(frozen=True)
class OpenFile:
    """A read handle on a day file. Content is re-rendered on every read."""

    node: "DayNode"
    direct_io: bool = True

    def read(self, offset: int, length: int) -> bytes:
        return self.node.read(offset, length)


@dataclass(frozen=True)
class DayNode:
    """A regular file holding the rendered entries of one date."""

    source: CalendarSource
    year: int
    month: int
    day: int

    kind: ClassVar[NodeKind] = NodeKind.FILE

    @property
    def date(self) -> date:
        return date(self.year, self.month, self.day)

    @property
    def handle(self) -> int:
        return day_handle(self.year, self.month, self.day)

    def timestamps(self) -> Timestamps:
        return Timestamps.local_midnight(self.year, self.month, self.day)

    def open(self, write: bool = False) -> OpenFile:
        if write:
            raise ReadOnlyError(f"{self.date.isoformat()} is read-only")
        return OpenFile(self)

    def content(self) -> bytes:
        target = self.date
        return render_day(target, self.source.entries(target)).encode("utf-8")

    def read(self, offset: int, length: int) -> bytes:
        """Return up to length bytes starting at offset; empty past the end."""
        data = self.content()
        offset = max(offset, 0)
        if offset >= len(data) or length <= 0:
            return b""
        return data[offset : offset + length]


Node = RootNode | YearNode | MonthNode | DayNode


class NamespaceEngine:
    """
    Entry point for hosts: owns the calendar source and the root node.

    Hosts that work with paths rather than parent/child lookups use
    lookup() to walk from the root.
    """

    def __init__(self, source: CalendarSource):
        self.source = source
        self.root = RootNode(source)

    def lookup(self, path: str) -> Node:
        """Resolve a slash-separated path such as /2024/March/05."""
        node: Node = self.root
        for part in path.split("/"):
            if not part:
                continue
            if isinstance(node, DayNode):
                raise NotDirectoryError(f"{path}: not a directory")
            try:
                node = node.resolve(part)
            except NotFoundError as e:
                logger.debug(f"Lookup of {path!r} failed at {part!r}: {e}")
                raise
        return node

    def list(self, path: str) -> list[DirEntry]:
        node = self.lookup(path)
        if isinstance(node, DayNode):
            raise NotDirectoryError(f"{path}: not a directory")
        return node.list()
