"""Multi-dimensional binning of value vectors."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from numbers import Real
from typing import Iterable, Optional

from .bin_finder import BinFinder


@dataclass(frozen=True)
class BinDimension:
    """Size, bin labels and break points of one binning dimension."""

    size: int
    names: tuple[str, ...]
    breaks: tuple[float, ...]


def _is_vector(obj: object) -> bool:
    return isinstance(obj, Sequence) and not isinstance(obj, (str, bytes))


def _is_numeric_vector(obj: object) -> bool:
    return _is_vector(obj) and all(isinstance(x, Real) and not isinstance(x, bool) for x in obj)


class BinsManager:
    """Maps a vector of values to a single flat bin index.

    Each element of ``breaks`` defines the bins of one dimension. An element may
    be None only when ``categories`` supplies, at the same position, the values
    of a categorical track; every value then gets a bin of its own.
    """

    def __init__(
        self,
        breaks: Sequence[Optional[Sequence[float]]],
        include_lowest: bool = False,
        right: bool = True,
        categories: Optional[Sequence[Optional[Iterable[float]]]] = None,
    ) -> None:
        if not _is_vector(breaks):
            raise TypeError("'breaks' argument must be a vector")
        if not isinstance(include_lowest, bool):
            raise TypeError("'include_lowest' argument is not logical")
        if not isinstance(right, bool):
            raise TypeError("'right' argument is not logical")

        self._include_lowest = include_lowest
        self._right = right
        self._finders: list[BinFinder] = []
        self._categories: list[Optional[tuple[float, ...]]] = []
        self._track_mult: list[int] = []
        self._total_bins = 1

        for i, brk in enumerate(breaks):
            category_vals = None
            if brk is None and categories is not None:
                if i >= len(categories) or categories[i] is None:
                    raise ValueError(
                        f"breaks[{i + 1}]: breaks can be NULL only when the track expression "
                        "is a track or a virtual track"
                    )
                category_vals = tuple(sorted(set(float(v) for v in categories[i])))
            elif not _is_numeric_vector(brk):
                raise TypeError(f"breaks[{i + 1}] is not numeric")

            if category_vals is not None:
                points = [category_vals[0] - 0.5, *category_vals] if category_vals else []
                finder = BinFinder(points, False, right=True)
            else:
                finder = BinFinder([float(b) for b in brk], include_lowest, right)

            mult = 1 if not self._finders else self._track_mult[-1] * self._finders[-1].numbins
            self._finders.append(finder)
            self._categories.append(category_vals)
            self._track_mult.append(mult)
            self._total_bins *= finder.numbins

    @property
    def include_lowest(self) -> bool:
        return self._include_lowest

    @property
    def right(self) -> bool:
        return self._right

    @property
    def total_bins(self) -> int:
        return self._total_bins

    @property
    def bin_finders(self) -> tuple[BinFinder, ...]:
        return tuple(self._finders)

    @property
    def num_bin_finders(self) -> int:
        return len(self._finders)

    def vals2idx(self, vals: Iterable[float]) -> int:
        """Return the flat bin index of vals, or -1 if any value falls outside its bins."""
        res = 0
        for val, finder, mult in zip(vals, self._finders, self._track_mult):
            if math.isnan(val):
                return -1
            b = finder.val2bin(val)
            if b < 0:
                return -1
            res += b * mult
        return res

    def _label(self, finder: BinFinder, j: int) -> str:
        lo, hi = finder.breaks[j], finder.breaks[j + 1]
        if self._right:
            opening = "(" if j or not self._include_lowest else "["
            return f"{opening}{lo:g},{hi:g}]"
        closing = ")" if j != finder.numbins - 1 or not self._include_lowest else "]"
        return f"[{lo:g},{hi:g}{closing}"

    def dims(self) -> list[BinDimension]:
        """Describe every dimension: its number of bins, bin labels and breaks."""
        result = []
        for finder, category_vals in zip(self._finders, self._categories):
            if category_vals is not None:
                result.append(
                    BinDimension(
                        size=len(category_vals),
                        names=tuple(str(int(v)) for v in category_vals),
                        breaks=tuple(int(v) for v in category_vals),
                    )
                )
            else:
                result.append(
                    BinDimension(
                        size=finder.numbins,
                        names=tuple(self._label(finder, j) for j in range(finder.numbins)),
                        breaks=finder.breaks,
                    )
                )
        return result