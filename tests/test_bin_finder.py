import math

import pytest

from emrtracks.bin_finder import BinFinder, BreaksError

BREAK_SETS = [
    [0, 10, 20, 30],
    [0, 1, 5, 6, 20],
    [-3.5, -1, 0.25, 7],
    [2, 4],
]


def _probe_values(breaks):
    vals = []
    for b in breaks:
        vals.extend([b - 0.5, b, b + 0.5])
    return vals


@pytest.mark.parametrize("breaks", [[], [1.0]])
def test_too_few_breaks(breaks):
    with pytest.raises(BreaksError):
        BinFinder(breaks)


def test_duplicate_breaks():
    with pytest.raises(BreaksError, match="not unique"):
        BinFinder([0, 1, 1, 2])


def test_unsorted_breaks():
    with pytest.raises(BreaksError, match="not sorted"):
        BinFinder([0, 2, 1])


def test_breaks_error_is_value_error():
    with pytest.raises(ValueError):
        BinFinder([3, 3])


@pytest.mark.parametrize("breaks", BREAK_SETS)
def test_breaks_and_numbins(breaks):
    finder = BinFinder(breaks)
    assert finder.breaks == tuple(float(b) for b in breaks)
    assert finder.numbins == len(breaks) - 1


@pytest.mark.parametrize("breaks", BREAK_SETS)
def test_right_closed_invariant(breaks):
    finder = BinFinder(breaks)
    for v in _probe_values(breaks):
        b = finder.val2bin(v)
        if breaks[0] < v <= breaks[-1]:
            assert breaks[b] < v <= breaks[b + 1]
        else:
            assert b == -1


@pytest.mark.parametrize("breaks", BREAK_SETS)
def test_left_closed_invariant(breaks):
    finder = BinFinder(breaks, right=False)
    for v in _probe_values(breaks):
        b = finder.val2bin(v)
        if breaks[0] <= v < breaks[-1]:
            assert breaks[b] <= v < breaks[b + 1]
        else:
            assert b == -1


@pytest.mark.parametrize("breaks", BREAK_SETS)
def test_include_lowest_right(breaks):
    assert BinFinder(breaks).val2bin(breaks[0]) == -1
    assert BinFinder(breaks, include_lowest=True).val2bin(breaks[0]) == 0


@pytest.mark.parametrize("breaks", BREAK_SETS)
def test_include_lowest_left(breaks):
    assert BinFinder(breaks, right=False).val2bin(breaks[-1]) == -1
    finder = BinFinder(breaks, include_lowest=True, right=False)
    assert finder.val2bin(breaks[-1]) == finder.numbins - 1


@pytest.mark.parametrize("right", [True, False])
def test_nan_is_out_of_range(right):
    assert BinFinder([0, 1, 2], right=right).val2bin(math.nan) == -1


def test_last_break_maps_to_last_bin_when_right():
    finder = BinFinder([0, 10, 20, 30])
    assert finder.val2bin(30) == finder.numbins - 1


def test_repr_mentions_options():
    assert "right=False" in repr(BinFinder([0, 1], right=False))