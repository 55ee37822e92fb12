"""Sparse tracks: per-patient lists of time-stamped values, with percentiles and iteration."""

from __future__ import annotations

import math
import struct
from bisect import bisect_left
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Callable, Iterable, Optional

from .timestamp import Point, TimeStamp

_HEADER = struct.Struct("<IIQ")
_DATUM = struct.Struct("<II")
_REC = struct.Struct("<Id")
_VAL = struct.Struct("<d")
_PERCENTILE = struct.Struct("<f")


def _as_float32(x: float) -> float:
    return _PERCENTILE.unpack(_PERCENTILE.pack(x))[0]


class Op(Enum):
    """How a record's value is matched against the iterator's value set.

    EQ passes values contained in the set; the ordering operators pass values
    for which the comparison holds against at least one value of the set.
    """

    EQ = "eq"
    LT = "lt"
    LTE = "lte"
    GT = "gt"
    GTE = "gte"


@dataclass(frozen=True)
class Record:
    """One value of a patient at a time stamp."""

    id: int
    timestamp: TimeStamp
    val: float


class SparseTrack:
    """Values of patients sorted by id and time stamp.

    ``in_subset`` decides which patient ids are visible to iteration and
    counting; by default every id is.
    """

    def __init__(
        self,
        name: str,
        records: Iterable[Record],
        categorical: bool = False,
        base_track: Optional[SparseTrack] = None,
        in_subset: Optional[Callable[[int], bool]] = None,
    ) -> None:
        recs = sorted(records, key=lambda r: (r.id, r.timestamp))
        ids: list[int] = []
        starts: list[int] = []
        for idx, rec in enumerate(recs):
            if not ids or ids[-1] != rec.id:
                ids.append(rec.id)
                starts.append(idx)

        sorted_vals: list[float] = []
        percentiles: list[float] = []
        vals = sorted(float(r.val) for r in recs if not math.isnan(r.val))
        if vals:
            sorted_vals.append(vals[0])
            for i in range(1, len(vals)):
                if vals[i] != vals[i - 1]:
                    percentiles.append(_as_float32(i / len(vals)))
                    sorted_vals.append(vals[i])
            percentiles.append(1.0)

        self._setup(
            name,
            categorical,
            ids,
            starts,
            [r.timestamp for r in recs],
            [float(r.val) for r in recs],
            sorted_vals,
            None if categorical else percentiles,
            base_track,
            in_subset,
        )

    def _setup(self, name, categorical, ids, starts, stamps, vals, sorted_vals, percentiles, base_track, in_subset):
        self.name = name
        self.categorical = categorical
        self.base_track = base_track
        self.in_subset = in_subset
        self._ids = ids
        self._starts = starts
        self._stamps = stamps
        self._hours = [s.hour for s in stamps]
        self._vals = vals
        self._sorted_vals = sorted_vals
        self._percentiles = percentiles

    def _visible(self, pid: int) -> bool:
        return self.in_subset is None or self.in_subset(pid)

    # ---- sizes and value statistics -------------------------------------------------

    def __len__(self) -> int:
        return len(self._stamps)

    @property
    def size(self) -> int:
        return len(self._stamps)

    @property
    def unique_size(self) -> int:
        return self.base_track.unique_size if self.base_track else len(self._sorted_vals)

    @property
    def minval(self) -> float:
        if self.base_track:
            return self.base_track.minval
        if not self._sorted_vals:
            raise ValueError(f"Track {self.name} has no values")
        return self._sorted_vals[0]

    @property
    def maxval(self) -> float:
        if self.base_track:
            return self.base_track.maxval
        if not self._sorted_vals:
            raise ValueError(f"Track {self.name} has no values")
        return self._sorted_vals[-1]

    def _end(self, data_idx: int) -> int:
        return self._starts[data_idx + 1] if data_idx + 1 < len(self._starts) else len(self._stamps)

    def unique_vals(self) -> list[float]:
        if self.base_track:
            return self.base_track.unique_vals()
        return list(self._sorted_vals)

    def _require_percentiles(self) -> list[float]:
        if self._percentiles is None:
            raise ValueError(f"Track {self.name} is categorical and has no percentiles")
        return self._percentiles

    def percentile_upper(self, value: float) -> float:
        """Fraction of values that are smaller than or equal to value's slot."""
        if self.base_track:
            return self.base_track.percentile_upper(value)
        percentiles = self._require_percentiles()
        idx = bisect_left(self._sorted_vals, value)
        return percentiles[idx] if idx < len(percentiles) else 1.0

    def percentile_lower(self, value: float) -> float:
        """Fraction of values that are strictly smaller than value's slot."""
        if self.base_track:
            return self.base_track.percentile_lower(value)
        percentiles = self._require_percentiles()
        idx = bisect_left(self._sorted_vals, value)
        return 0.0 if idx == 0 else percentiles[min(idx, len(percentiles)) - 1]

    # ---- content access ---------------------------------------------------------------

    def ids(self, vals: Optional[Iterable[float]] = None) -> list[int]:
        """Ids of all patients, or of those with at least one value in vals."""
        if vals is None:
            return list(self._ids)
        wanted = {float(v) for v in vals}
        return [
            pid
            for data_idx, pid in enumerate(self._ids)
            if any(v in wanted for v in self._vals[self._starts[data_idx]:self._end(data_idx)])
        ]

    def data_recs(self) -> list[Record]:
        return [
            Record(pid, stamp, val)
            for data_idx, pid in enumerate(self._ids)
            for stamp, val in zip(
                self._stamps[self._starts[data_idx]:self._end(data_idx)],
                self._vals[self._starts[data_idx]:self._end(data_idx)],
            )
        ]

    def count_ids(self, ids: Iterable[int]) -> int:
        """Count the sorted ids that appear in the track and in the subset."""
        count = 0
        pos = 0
        for pid in ids:
            pos = bisect_left(self._ids, pid, pos)
            if pos >= len(self._ids):
                break
            if self._ids[pos] == pid:
                if self._visible(pid):
                    count += 1
                pos += 1
        return count

    # ---- serialization ----------------------------------------------------------------

    def serialize(self, fp: BinaryIO) -> None:
        """Write ids, records, unique values and (unless categorical) percentiles."""
        num_percentiles = len(self._sorted_vals)
        parts = [_HEADER.pack(len(self._ids), len(self._stamps), num_percentiles)]
        if self._ids:
            parts.extend(_DATUM.pack(pid, start) for pid, start in zip(self._ids, self._starts))
            parts.extend(_REC.pack(s.value, v) for s, v in zip(self._stamps, self._vals))
        if num_percentiles:
            parts.extend(_VAL.pack(v) for v in self._sorted_vals)
            if not self.categorical:
                parts.extend(_PERCENTILE.pack(p) for p in self._percentiles or ())
        payload = b"".join(parts)
        written = fp.write(payload)
        if written is not None and written != len(payload):
            raise OSError(f"Failed to write a track file {getattr(fp, 'name', '<stream>')}")

    @classmethod
    def unserialize(cls, name: str, fp: BinaryIO, categorical: bool) -> SparseTrack:
        def take(n: int, what: int) -> bytes:
            data = fp.read(n)
            if len(data) != n:
                raise ValueError(f"Invalid format of track {name} ({what})")
            return data

        data_size, num_recs, num_percentiles = _HEADER.unpack(take(_HEADER.size, 1))
        raw = take(data_size * _DATUM.size + num_recs * _REC.size + num_percentiles * _VAL.size, 2)
        pos = 0
        data = list(_DATUM.iter_unpack(raw[pos:pos + data_size * _DATUM.size]))
        pos += data_size * _DATUM.size
        recs = list(_REC.iter_unpack(raw[pos:pos + num_recs * _REC.size]))
        pos += num_recs * _REC.size
        sorted_vals = [v for (v,) in _VAL.iter_unpack(raw[pos:])]

        percentiles = None
        if not categorical:
            praw = take(num_percentiles * _PERCENTILE.size, 3)
            percentiles = [p for (p,) in _PERCENTILE.iter_unpack(praw)]

        track = cls.__new__(cls)
        track._setup(
            name,
            categorical,
            [pid for pid, _ in data],
            [start for _, start in data],
            [TimeStamp(value >> 8, value & 0xFF) for value, _ in recs],
            [val for _, val in recs],
            sorted_vals,
            percentiles,
            None,
            None,
        )
        return track


class TrackIterator:
    """Walks the points of a sparse track within [stime, etime].

    Records may be restricted to values matching ``vals`` under ``op``. With a
    non-zero ``expiration`` a record is skipped when the nearest earlier record
    of the same patient with another hour lies within ``expiration`` hours.
    """

    def __init__(
        self,
        track: SparseTrack,
        stime: int,
        etime: int,
        vals: Iterable[float] = (),
        expiration: int = 0,
        op: Op = Op.EQ,
    ) -> None:
        self.track = track
        self.stime = stime
        self.etime = etime
        self.vals = frozenset(float(v) for v in vals)
        self.expiration = expiration
        self.op = op
        self.point = Point()
        self.isend = True
        self._data_idx = 0
        self._rec_idx = -1
        self._running_idx = 0

    @property
    def size(self) -> int:
        return len(self.track)

    @property
    def idx(self) -> int:
        return self._running_idx

    def _passed_operator(self, val: float) -> bool:
        if math.isnan(val):
            return False
        if self.op is Op.EQ:
            return val in self.vals
        if self.op is Op.LT:
            return val < max(self.vals)
        if self.op is Op.LTE:
            return val <= max(self.vals)
        if self.op is Op.GT:
            return val > min(self.vals)
        return val >= min(self.vals)

    def _finish(self) -> bool:
        self.isend = True
        self._running_idx = len(self.track)
        return False

    def begin(self) -> bool:
        self._data_idx = 0
        self._rec_idx = -1
        self._running_idx = 0
        self.isend = False
        return self.next()

    def next(self) -> bool:
        self._rec_idx += 1
        return self._advance(None, 0)

    def next_to(self, jumpto: Point) -> bool:
        """Move to the next point at or after jumpto's id and hour (its reference is ignored)."""
        t = self.track
        if self._data_idx < len(t._ids) and t._ids[self._data_idx] < jumpto.id:
            self._data_idx = bisect_left(t._ids, jumpto.id, self._data_idx + 1)
            if self._data_idx >= len(t._ids):
                self.isend = True
                return False
            self._rec_idx = t._starts[self._data_idx]
        else:
            self._rec_idx += 1
        return self._advance(jumpto.id, jumpto.hour)

    def _has_competitors(self, hour: int) -> bool:
        t = self.track
        for irec in range(self._rec_idx - 1, t._starts[self._data_idx] - 1, -1):
            prev_hour = t._hours[irec]
            if prev_hour != hour and (not self.vals or self._passed_operator(t._vals[irec])):
                return prev_hour + self.expiration >= hour
        return False

    def _advance(self, jump_id: Optional[int], jump_hour: int) -> bool:
        t = self.track
        num_recs = len(t._stamps)
        while self._rec_idx < num_recs:
            pid = t._ids[self._data_idx]
            if not t._visible(pid):
                self._data_idx += 1
                if self._data_idx >= len(t._ids):
                    break
                self._rec_idx = t._starts[self._data_idx]
                continue

            end = t._end(self._data_idx)
            if self._rec_idx >= end:
                self._data_idx += 1
                continue

            hour = t._hours[self._rec_idx]
            jumping = jump_id is not None and pid == jump_id
            if self.stime <= hour <= self.etime and (not jumping or hour >= jump_hour):
                if self.vals and not self._passed_operator(t._vals[self._rec_idx]):
                    self._rec_idx += 1
                    continue
                if self.expiration and self._has_competitors(hour):
                    self._rec_idx += 1
                    continue
                self.point = Point(pid, t._stamps[self._rec_idx])
                self._running_idx = self._rec_idx
                return True

            if hour > self.etime:
                self._rec_idx = end
                continue

            stime = max(self.stime, jump_hour) if jumping else self.stime
            self._rec_idx = bisect_left(t._hours, stime, self._rec_idx + 1, end)
        return self._finish()