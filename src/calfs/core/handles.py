"""Numeric node handles derived from (year[, month[, day]]) tuples.

The host deduplicates concurrently created nodes on these numbers, so each
is a pure function of the full tuple and the four kinds occupy disjoint
ranges: years are bare numbers, while months, days and the root carry a
tag above any packed value.
"""

MONTH_TAG = 1 << 32
DAY_TAG = 2 << 32
ROOT_TAG = 3 << 32

ROOT_HANDLE = ROOT_TAG


def year_handle(year: int) -> int:
    return year


def month_handle(year: int, month: int) -> int:
    return MONTH_TAG | (year * 16 + month)


def day_handle(year: int, month: int, day: int) -> int:
    return DAY_TAG | ((year * 16 + month) * 32 + day)
