import itertools
import math

import pytest

from emrtracks.bin_finder import BreaksError
from emrtracks.bins import BinsManager


def test_single_dimension_matches_bin_finder():
    mgr = BinsManager([[0, 1, 2, 3]])
    assert mgr.total_bins == 3
    for val in (0.5, 1.0, 1.5, 3.0):
        assert mgr.vals2idx([val]) == mgr.bin_finders[0].val2bin(val)


def test_total_bins_is_product():
    mgr = BinsManager([[0, 1, 2], [0.0, 10.0, 20.0, 30.0]])
    assert mgr.total_bins == mgr.bin_finders[0].numbins * mgr.bin_finders[1].numbins
    assert mgr.num_bin_finders == 2


def test_indexes_are_distinct_and_cover_range():
    mgr = BinsManager([[0, 1, 2], [0.0, 10.0, 20.0, 30.0]])
    centers = [[0.5, 1.5], [5.0, 15.0, 25.0]]
    idxs = [mgr.vals2idx(list(combo)) for combo in itertools.product(*centers)]
    assert sorted(idxs) == list(range(mgr.total_bins))


def test_first_dimension_varies_fastest():
    mgr = BinsManager([[0, 1, 2], [0, 10, 20]])
    assert mgr.vals2idx([0.5, 5]) == 0
    assert mgr.vals2idx([1.5, 5]) == 1


def test_out_of_range_or_nan_gives_minus_one():
    mgr = BinsManager([[0, 1, 2], [0, 10, 20]])
    assert mgr.vals2idx([5, 5]) == -1
    assert mgr.vals2idx([0.5, math.nan]) == -1
    assert mgr.vals2idx([0, 5]) == -1


def test_include_lowest():
    mgr = BinsManager([[0, 1, 2]], include_lowest=True)
    assert mgr.vals2idx([0]) == 0


def test_dims_labels_right_closed():
    mgr = BinsManager([[0, 1, 2]])
    (dim,) = mgr.dims()
    assert dim.size == 2
    assert dim.names == ("(0,1]", "(1,2]")
    assert dim.breaks == (0.0, 1.0, 2.0)


def test_dims_labels_include_lowest_right():
    (dim,) = BinsManager([[0, 1, 2]], include_lowest=True).dims()
    assert dim.names[0].startswith("[")
    assert dim.names[1].startswith("(")


def test_dims_labels_left_closed_include_lowest():
    (dim,) = BinsManager([[0, 1, 2]], include_lowest=True, right=False).dims()
    assert dim.names == ("[0,1)", "[1,2]")


def test_categorical_dimension():
    mgr = BinsManager([None], categories=[[5, 1, 2]])
    assert mgr.total_bins == 3
    assert mgr.vals2idx([1]) == 0
    assert mgr.vals2idx([2]) == 1
    assert mgr.vals2idx([5]) == 2
    (dim,) = mgr.dims()
    assert dim.names == ("1", "2", "5")
    assert dim.breaks == (1, 2, 5)


def test_none_breaks_without_categories():
    with pytest.raises(TypeError):
        BinsManager([None])
    with pytest.raises(ValueError):
        BinsManager([None], categories=[None])


def test_invalid_arguments():
    with pytest.raises(TypeError):
        BinsManager("abc")
    with pytest.raises(TypeError):
        BinsManager([["a", "b"]])
    with pytest.raises(TypeError):
        BinsManager([[0, 1]], include_lowest=1)
    with pytest.raises(TypeError):
        BinsManager([[0, 1]], right="yes")


def test_bad_breaks_propagate():
    with pytest.raises(BreaksError):
        BinsManager([[0, 0, 1]])