"""Time intervals and per-id time intervals with sorting, merging and lookup."""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from .timestamp import NA_HOUR, NA_ID


@dataclass(order=True)
class TimeInterval:
    """A closed interval of hours [stime, etime]."""

    stime: int = NA_HOUR
    etime: int = NA_HOUR

    def __post_init__(self) -> None:
        if self.stime > self.etime:
            raise ValueError(f"Start time ({self.stime}) exceeds end time ({self.etime})")

    def do_overlap(self, time: int) -> bool:
        return self.stime <= time <= self.etime

    def __str__(self) -> str:
        return f"({self.stime}, {self.etime})"


@dataclass(order=True)
class IdTimeInterval:
    """A time interval belonging to one id."""

    id: int = NA_ID
    tinterv: TimeInterval = field(default_factory=TimeInterval)

    def do_overlap(self, id_: int, time: int) -> bool:
        return self.id == id_ and self.tinterv.do_overlap(time)

    def __str__(self) -> str:
        return f"({self.id}, {self.tinterv})"


def _check_order(row: int, interv: TimeInterval) -> None:
    if interv.stime > interv.etime:
        raise ValueError(
            f"Start time ({interv.stime}) exceeds end time ({interv.etime}) at time intervals, row {row}"
        )


def sort_and_unify_overlaps(intervals: Iterable[TimeInterval], stime: int, etime: int) -> list[TimeInterval]:
    """Clip intervals to [stime, etime], drop those outside, sort and merge overlaps."""
    clipped = []
    for row, iv in enumerate(intervals, start=1):
        _check_order(row, iv)
        if iv.etime < stime or iv.stime > etime:
            continue
        clipped.append(TimeInterval(max(iv.stime, stime), min(iv.etime, etime)))
    clipped.sort()

    result: list[TimeInterval] = []
    for iv in clipped:
        if not result or result[-1].etime < iv.stime:
            result.append(iv)
        elif result[-1].etime < iv.etime:
            result[-1].etime = iv.etime
    return result


def lower_bound(intervals: list[TimeInterval], time: int) -> Optional[int]:
    """Index of the interval overlapping time, else of the latest one preceding it.

    The intervals must be sorted and free of overlaps. Returns None if no
    interval starts at or before time.
    """
    idx = bisect_right(intervals, time, key=lambda iv: iv.stime) - 1
    return idx if idx >= 0 else None


def sort_and_unify_id_overlaps(
    intervals: Iterable[IdTimeInterval],
    stime: int,
    etime: int,
    id_exists: Callable[[int], bool],
) -> list[IdTimeInterval]:
    """Drop intervals of unknown ids or outside [stime, etime]; clip, sort and merge per id."""
    clipped = []
    for row, iv in enumerate(intervals, start=1):
        _check_order(row, iv.tinterv)
        if not id_exists(iv.id) or iv.tinterv.etime < stime or iv.tinterv.stime > etime:
            continue
        clipped.append(
            IdTimeInterval(iv.id, TimeInterval(max(iv.tinterv.stime, stime), min(iv.tinterv.etime, etime)))
        )
    clipped.sort()

    result: list[IdTimeInterval] = []
    for iv in clipped:
        if not result or result[-1].id != iv.id or result[-1].tinterv.etime < iv.tinterv.stime:
            result.append(iv)
        elif result[-1].tinterv.etime < iv.tinterv.etime:
            result[-1].tinterv.etime = iv.tinterv.etime
    return result


def id_lower_bound(intervals: list[IdTimeInterval], id_: int, time: int) -> Optional[int]:
    """Index of the interval matching id_ and overlapping time, else of the latest preceding one.

    The intervals must be sorted and free of overlaps. Returns None if none precedes.
    """
    idx = bisect_right(intervals, (id_, time), key=lambda iv: (iv.id, iv.tinterv.stime)) - 1
    return idx if idx >= 0 else None