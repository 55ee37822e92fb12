# emrtracks

Building blocks for electronic medical record data kept as *tracks*. A track
is a series of values for each patient. Every value carries a time stamp,
which is an hour plus a reference count.

## Modules

- `emrtracks.timestamp`
  - `TimeStamp(hour, refcount)` holds a 24-bit hour and an 8-bit reference
    count. Values are truncated to those widths, so a refcount of `-1` becomes
    `NA_REFCOUNT`.
  - Time stamps sort by hour and then by reference.
  - `pack()` and `unpack()` convert to and from 4 little-endian bytes.
    `write(fp)` and `read(fp)` do the same on binary streams.
  - `Point(id, timestamp)` pairs a patient id with a time stamp.
- `emrtracks.time_converter`
  - Converts between hours counted from 1 March 1867 and calendar dates. The
    range covers 300 years.
  - `date2time(hour, dayofmonth, month, year)` takes a zero-based hour, day of
    month and month.
  - `time2year`, `time2month`, `time2dayofmonth` and `time2hour` convert in the
    other direction.
  - Values out of range raise `TimeRangeError`, a subclass of `ValueError`.
  - `is_leap_year` is also available.
- `emrtracks.intervals`
  - `TimeInterval(stime, etime)` is a closed interval of hours.
    `IdTimeInterval(id, tinterv)` is an interval that belongs to one id.
  - `sort_and_unify_overlaps` and `sort_and_unify_id_overlaps` clip intervals
    to a scope, drop the ones outside it, sort them and merge overlaps. The
    per-id version also drops ids that fail an `id_exists` callable.
  - `lower_bound` and `id_lower_bound` return the index of the interval that
    covers a time, or else of the latest one that precedes it. They return
    `None` when there is no such interval.
- `emrtracks.bin_finder`
  - `BinFinder(breaks, include_lowest=False, right=True)` maps values to bins.
    It follows the conventions of R's `cut`.
  - `val2bin` returns the bin index, or `-1` when the value is outside all
    bins.
  - Invalid breaks raise `BreaksError`. Breaks are invalid when there are
    fewer than two, when they repeat, or when they are unsorted.
- `emrtracks.bins`
  - `BinsManager(breaks, include_lowest=False, right=True, categories=None)`
    combines several dimensions into one flat index.
  - A dimension's breaks may be `None` when `categories` gives the values of a
    categorical track at the same position. Each value then gets its own bin.
  - `vals2idx(vals)` returns the flat index, or `-1`.
  - `dims()` returns a `BinDimension` for each dimension, holding its size, its
    bin labels and its breaks.
- `emrtracks.buffered_file`
  - `BufferedFile` is a binary file with a small read cache. It supports
    `getc`, `read`, `write`, `tell`, `seek` and `truncate`.
  - It can take an optional `fcntl` lock: shared for `"r"`, exclusive
    otherwise.
  - It works as a context manager.
  - `file_size(path)` returns the size of a file.
- `emrtracks.progress`
  - `ProgressReporter` writes `N%...` progress to a stream, `stderr` by
    default.
  - The number of steps between clock checks adapts to the elapsed time.
  - `report_last()` finishes the line.
- `emrtracks.logical_track`
  - `LogicalTrack(source, values)` names a source track and an optional list of
    integer values.
  - `serialize(path)` and `LogicalTrack.unserialize(path)` store the track in a
    small locked binary file. Reading an empty or malformed file gives an empty
    track.
  - `vtrack()` returns a virtual-track description as a dict.
- `emrtracks.sparse_track`
  - `SparseTrack(name, records, categorical=False, base_track=None, in_subset=None)`
    holds `Record(id, timestamp, val)` entries sorted by id and time.
  - `unique_vals`, `minval` and `maxval` describe the values.
    `percentile_upper` and `percentile_lower` answer percentile queries.
  - `ids`, `data_recs` and `count_ids` give access to the contents.
  - `serialize(fp)` and `SparseTrack.unserialize(name, fp, categorical)`
    handle the binary format.
  - `TrackIterator` walks the records within `[stime, etime]`. It has
    `begin`, `next` and `next_to`.
  - The walk can be restricted by value. `Op` selects the comparison: `EQ`,
    `LT`, `LTE`, `GT` or `GTE`. An `expiration` window can also be set.
- `emrtracks.track_iterator`
  - `TrackExpressionIterator` is the abstract iterator interface. Iterating
    over one restarts it and yields every `Point`.
  - `TrackPointIterator` iterates a sparse track. With `keepref=True` it keeps
    the references. With `keepref=False` it merges points that share an id
    and an hour.
- `emrtracks.iterator_filter`
  - `FilterItem.leaf(itr, ids, stime, etime, sshift, eshift, keepref, is_not)`
    builds a leaf from an iterator, with time shifts and optional negation.
  - `FilterItem.node(FilterOp.AND | FilterOp.OR, left, right)` combines two
    filters.
  - `is_passed(point)` tests a point. When the point fails, `jumpto` gives the
    next point that may pass.
  - `describe()` renders the item as text.

## Example

```python
from emrtracks.time_converter import date2time, time2year, time2month
from emrtracks.intervals import TimeInterval, sort_and_unify_overlaps

t = date2time(0, 0, 2, 1867)   # midnight, 1 March 1867 -> hour 0
assert t == 0
assert time2year(t) == 1867
assert time2month(t) == 2      # months are zero based

merged = sort_and_unify_overlaps(
    [TimeInterval(10, 20), TimeInterval(15, 30), TimeInterval(50, 60)],
    0, 55,
)
# [TimeInterval(10, 30), TimeInterval(50, 55)]
```

## What it does not do

The package works on tracks that you build in memory or read from streams.
It has no track database. It does not scan directories, keep track lists or
attribute files, or manage the patient id registry. It does not evaluate
track expressions or virtual tracks. There is no command-line program.

The package needs only the Python standard library and runs on Python 3.10 or
later. File locking needs a POSIX system.