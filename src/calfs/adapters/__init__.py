"""Adapters - I/O implementations of ports.

The FUSE host lives in adapters.fuse_host and is imported on demand, since
loading fusepy requires libfuse.
"""

from .cache import CachedCalendarSource, TTLStore
from .ical_file import IcsCalendarAdapter
from .google_calendar import GoogleCalendarAdapter

__all__ = [
    "CachedCalendarSource",
    "TTLStore",
    "IcsCalendarAdapter",
    "GoogleCalendarAdapter",
]
