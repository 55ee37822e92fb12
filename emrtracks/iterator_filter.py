"""Filters deciding whether iterator points pass, built as trees of AND/OR nodes."""

from __future__ import annotations

from bisect import bisect_left
from enum import Enum
from typing import Iterable, Optional

from .timestamp import MAX_HOUR, NA_ID, NA_REFCOUNT, Point, TimeStamp
from .track_iterator import TrackExpressionIterator


def _signed(value: int) -> int:
    return value - (1 << 32) if value >= 1 << 31 else value


def _at_hour(id_: int, hour: int) -> Point:
    return Point(id_, TimeStamp(hour, NA_REFCOUNT))


class FilterOp(Enum):
    NONE = "NONE"
    OR = "OR"
    AND = "AND"


class FilterItem:
    """A filter leaf (an iterator with time shifts) or an AND/OR node of two filters.

    A point passes a leaf when the leaf's iterator has a point of the same id
    within [hour + sshift, hour + eshift] with a matching reference. When a
    point fails, ``jumpto`` names the next point that may pass.
    """

    def __init__(self) -> None:
        self.op = FilterOp.NONE
        self.children: Optional[tuple[FilterItem, FilterItem]] = None
        self.is_not = False
        self.sshift = 0
        self.eshift = 0
        self.stime = 0
        self.etime = 0
        self.keepref = False
        self._itr: Optional[TrackExpressionIterator] = None
        self._ids: tuple[int, ...] = ()
        self._id2idx: dict[int, int] = {}
        self._itr_started = False
        self._jumpto = Point()
        self._true_upto = Point()

    @classmethod
    def leaf(
        cls,
        itr: TrackExpressionIterator,
        ids: Iterable[int],
        stime: int,
        etime: int,
        sshift: int,
        eshift: int,
        keepref: bool,
        is_not: bool,
    ) -> FilterItem:
        """Build a leaf; ids are all the ids known to the database."""
        item = cls()
        item._itr = itr
        item._ids = tuple(sorted(ids))
        item._id2idx = {pid: i for i, pid in enumerate(item._ids)}
        item.stime = stime
        item.etime = etime
        item.sshift = sshift
        item.eshift = eshift
        item.keepref = keepref
        item.is_not = is_not
        return item

    @classmethod
    def node(cls, op: FilterOp, left: FilterItem, right: FilterItem) -> FilterItem:
        if op not in (FilterOp.OR, FilterOp.AND):
            raise ValueError(f"Invalid filter operator {op.name}")
        item = cls()
        item.op = op
        item.children = (left, right)
        return item

    @property
    def is_leaf(self) -> bool:
        return self.children is None

    @property
    def jumpto(self) -> Point:
        return self._jumpto

    def is_passed(self, point: Point) -> bool:
        """Return True if point passes; otherwise jumpto is updated."""
        return self._is_passed_leaf(point) if self.is_leaf else self._is_passed_node(point)

    # ---- nodes ------------------------------------------------------------------

    @staticmethod
    def _reached(child: FilterItem, point: Point) -> bool:
        jump = child._jumpto
        return _signed(point.id) > _signed(jump.id) or (point.id == jump.id and point.hour >= jump.hour)

    def _is_passed_node(self, point: Point) -> bool:
        c0, c1 = self.children
        if self.op is FilterOp.OR:
            if (self._reached(c0, point) and c0.is_passed(point)) or (
                self._reached(c1, point) and c1.is_passed(point)
            ):
                return True
            self._jumpto = c0._jumpto if c0._jumpto < c1._jumpto else c1._jumpto
            return False

        if self.op is FilterOp.AND:
            passed = (c0.is_passed(point), c1.is_passed(point))
            if all(passed):
                return True
            for child, ok in zip(self.children, passed):
                if ok:
                    child._jumpto = _at_hour(point.id, point.hour)

            idx = 1 if c0._jumpto < c1._jumpto else 0
            while True:
                lead, other = self.children[idx], self.children[1 - idx]
                if c0._jumpto == c1._jumpto or lead._jumpto.id == NA_ID or other.is_passed(lead._jumpto):
                    self._jumpto = lead._jumpto
                    return False
                idx = 1 - idx

        return False

    # ---- leaves -----------------------------------------------------------------

    def _filtered_next(self) -> bool:
        cur = self._itr.point
        self._jumpto = _at_hour(cur.id, max(cur.hour - self.eshift, self.stime))
        return False

    def _filtered_end(self) -> bool:
        self._jumpto = Point()
        return False

    def _id2idx_of(self, id_: int) -> int:
        try:
            return self._id2idx[id_]
        except KeyError:
            raise KeyError(
                f"Id {id_} that was generated during the iteration does not exist in the database"
            ) from None

    def _next_passing_point(self) -> None:
        """After a NOT leaf failed, find the next point whose interval excludes the match."""
        id_ = self._itr.point.id
        while True:
            hour = self._itr.last_hour() + 1 - self.sshift
            if hour > self.etime or self._itr.id_only:
                id_idx = self._id2idx_of(id_) + 1
                if id_idx >= len(self._ids):
                    self._jumpto = Point()
                    return
                id_ = self._ids[id_idx]
                hour = self.stime
            candidate = _at_hour(id_, hour)
            if not self._is_passed_leaf(candidate):
                self._jumpto = candidate
                return

    def _is_passed_leaf(self, point: Point) -> bool:
        point_hour = point.hour

        if self.is_not:
            upto = self._true_upto
            if _signed(upto.id) > _signed(point.id) or (upto.id == point.id and upto.hour > point_hour):
                return True

            self.is_not = False
            try:
                res = self._is_passed_leaf(point)
                if res:
                    if self.keepref:
                        # other references at the same hour might still pass
                        self._jumpto = _at_hour(point.id, point_hour)
                    else:
                        self._next_passing_point()
                else:
                    self._true_upto = self._jumpto
                    self._jumpto = point
            finally:
                self.is_not = True
            return not res

        itr = self._itr
        sinterv = point_hour + self.sshift
        einterv = point_hour + self.eshift

        if self._itr_started:
            if itr.isend:
                return False
        else:
            self._itr_started = True
            if self.etime + self.eshift < 0 or self.stime + self.sshift > MAX_HOUR:
                return self._filtered_end()
            itr.begin()
            cur = itr.point
            if not itr.isend and (cur.id > point.id or (cur.id == point.id and cur.hour > einterv)):
                return self._filtered_next()

        cur = itr.point
        if cur.id < point.id or (cur.id == point.id and cur.hour < sinterv):
            if not itr.next_to(_at_hour(point.id, max(sinterv, 0))):
                return self._filtered_end()

        cur = itr.point
        if cur.id > point.id or cur.hour > einterv:
            return self._filtered_next()

        if cur.refcount == NA_REFCOUNT or point.refcount == NA_REFCOUNT:
            return True

        while True:
            cur = itr.point
            if not (cur.id == point.id and cur.hour <= einterv and cur.refcount <= point.refcount):
                break
            if cur.refcount == point.refcount:
                return True
            # references are sorted too: advance until a match or past the reference
            if not itr.next():
                return self._filtered_end()

        cur = itr.point
        if cur.id == point.id and cur.hour <= einterv:
            self._jumpto = _at_hour(point.id, point_hour)
            return False

        return self._filtered_next()

    # ---- description ------------------------------------------------------------

    def describe(self, depth: int = 0) -> str:
        pad = " " * (depth * 2)
        if self.is_leaf:
            lines = [
                f"{pad}NOT:     {int(self.is_not)}",
                f"{pad}SSHIFT:  {self.sshift}",
                f"{pad}ESHIFT:  {self.eshift}",
                f"{pad}KEEPREF: {int(self.keepref)}",
                f"{pad}{self._itr}",
            ]
        else:
            lines = [f"{pad}{self.op.name}"]
        return "\n".join(lines) + "\n"