"""Mapping values to bins defined by break points."""

from __future__ import annotations

import math
import struct
from bisect import bisect_left, bisect_right
from itertools import pairwise
from typing import Iterable


class BreaksError(ValueError):
    """The break points do not define valid bins."""


def _as_float32(x: float) -> float:
    try:
        return struct.unpack("f", struct.pack("f", x))[0]
    except OverflowError:
        return math.copysign(math.inf, x)


class BinFinder:
    """Converts a value to a bin index given sorted, unique break points.

    With breaks x1..x4 and right=True the bins are (x1,x2], (x2,x3], (x3,x4];
    with right=False they are [x1,x2), [x2,x3), [x3,x4). include_lowest closes
    the first bin (right=True) or the last bin (right=False) on both sides.
    Equal-width bins are resolved in constant time, others by binary search.
    """

    def __init__(self, breaks: Iterable[float], include_lowest: bool = False, right: bool = True) -> None:
        points = [float(b) for b in breaks]
        if len(points) < 2:
            raise BreaksError(f"Invalid number of breaks {len(points)}")

        binsize = points[1] - points[0]
        for i, (prev, cur) in enumerate(pairwise(points), start=1):
            if cur == prev:
                raise BreaksError(f"Breaks are not unique (break[{i - 1}]=break[{i}]={cur:g})")
            if cur < prev:
                raise BreaksError(f"Breaks are not sorted (break[{i - 1}]={prev:g}, break[{i}]={cur:g})")
            # compare in single precision to tolerate rounding noise
            if _as_float32(cur - prev) != _as_float32(binsize):
                binsize = 0.0

        self._breaks = tuple(points)
        self._binsize = binsize
        self._include_lowest = bool(include_lowest)
        self._right = bool(right)

    @property
    def breaks(self) -> tuple[float, ...]:
        return self._breaks

    @property
    def numbins(self) -> int:
        return len(self._breaks) - 1

    @property
    def include_lowest(self) -> bool:
        return self._include_lowest

    @property
    def right(self) -> bool:
        return self._right

    def val2bin(self, val: float) -> int:
        """Return the bin of val, or -1 if it falls outside all bins."""
        first, last = self._breaks[0], self._breaks[-1]

        if self._right:
            if self._include_lowest and val == first:
                return 0
            if math.isnan(val) or val <= first or val > last:
                return -1
            if self._binsize:
                return min(math.ceil((val - first) / self._binsize) - 1, self.numbins - 1)
            return bisect_left(self._breaks, val) - 1

        if self._include_lowest and val == last:
            return self.numbins - 1
        if math.isnan(val) or val < first or val >= last:
            return -1
        if self._binsize:
            return int((val - first) / self._binsize)
        return bisect_right(self._breaks, val) - 1

    def __repr__(self) -> str:
        return (
            f"BinFinder({list(self._breaks)!r}, include_lowest={self._include_lowest}, right={self._right})"
        )