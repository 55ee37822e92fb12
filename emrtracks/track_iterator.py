"""Iterators that walk track expressions point by point."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar, Iterable, Iterator

from .sparse_track import Op, SparseTrack, TrackIterator
from .timestamp import NA_REFCOUNT, Point, TimeStamp


class TrackExpressionIterator(ABC):
    """Base of iterators producing sorted (id, time stamp) points.

    ``point`` is the current point and ``isend`` tells whether the end was
    reached. Iterating the object restarts it and yields every point.
    """

    # True for iterators whose points stand for whole ids rather than hours.
    id_only: ClassVar[bool] = False

    def __init__(self, keepref: bool = False) -> None:
        self.keepref = keepref
        self.isend = True
        self.point = Point()

    @abstractmethod
    def begin(self) -> bool:
        """Move to the first point; return False if there is none."""

    @abstractmethod
    def next(self) -> bool:
        """Move to the next point; return False at the end."""

    @abstractmethod
    def next_to(self, jumpto: Point) -> bool:
        """Move to the next point at or after jumpto's id and hour; its reference is ignored."""

    @property
    @abstractmethod
    def size(self) -> int:
        """Upper bound of the number of points the iterator may produce."""

    @property
    @abstractmethod
    def idx(self) -> int:
        """Running index within [0, size]."""

    def last_hour(self) -> int:
        """Last hour covered by the current point."""
        return self.point.hour

    def __iter__(self) -> Iterator[Point]:
        if not self.begin():
            return
        yield self.point
        while self.next():
            yield self.point

    def __str__(self) -> str:
        return "<Unknown iterator>"


class TrackPointIterator(TrackExpressionIterator):
    """Iterates the points of a sparse track.

    Without ``keepref`` the references are dropped: points sharing an id and an
    hour collapse into one point whose reference is NA.
    """

    def __init__(
        self,
        track: SparseTrack,
        keepref: bool,
        stime: int,
        etime: int,
        vals: Iterable[float] = (),
        expiration: int = 0,
        op: Op = Op.EQ,
    ) -> None:
        super().__init__(keepref)
        self.track = track
        self._itr = TrackIterator(track, stime, etime, vals, expiration, op)

    def _take_point(self) -> None:
        src = self._itr.point
        if self.keepref:
            self.point = src
        else:
            self.point = Point(src.id, TimeStamp(src.hour, NA_REFCOUNT))

    def begin(self) -> bool:
        self._itr.begin()
        if self._itr.isend:
            self.isend = True
            return False
        self.isend = False
        self._take_point()
        return True

    def next(self) -> bool:
        while self._itr.next():
            src = self._itr.point
            if self.keepref or src.hour != self.point.hour or src.id != self.point.id:
                self._take_point()
                return True
        self.isend = True
        return False

    def next_to(self, jumpto: Point) -> bool:
        if self._itr.next_to(jumpto):
            self._take_point()
            return True
        self.isend = True
        return False

    @property
    def size(self) -> int:
        return self._itr.size

    @property
    def idx(self) -> int:
        return self._itr.idx

    def __str__(self) -> str:
        return f"<Track iterator {self.track.name}>"