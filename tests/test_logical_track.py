import pytest

from emrtracks.logical_track import LogicalTrack


def test_round_trip_with_values(tmp_path):
    path = tmp_path / "lt.ltrack"
    track = LogicalTrack("source_track", [3, -7, 42])
    track.serialize(path)
    assert LogicalTrack.unserialize(path) == track


def test_round_trip_without_values(tmp_path):
    path = tmp_path / "lt.ltrack"
    LogicalTrack("plain").serialize(path)
    loaded = LogicalTrack.unserialize(path)
    assert loaded == LogicalTrack("plain")
    assert not loaded.has_values


def test_wire_format(tmp_path):
    path = tmp_path / "lt.ltrack"
    LogicalTrack("ab", [1]).serialize(path)
    assert path.read_bytes() == b"ab\x00\x01\x00\x00\x00\x01\x00\x00\x00"


def test_empty_file_gives_empty_track(tmp_path):
    path = tmp_path / "empty"
    path.write_bytes(b"")
    assert LogicalTrack.unserialize(path) == LogicalTrack()


def test_missing_terminator_gives_empty_track(tmp_path):
    path = tmp_path / "bad"
    path.write_bytes(b"abc")
    assert LogicalTrack.unserialize(path) == LogicalTrack()


def test_truncated_count_gives_empty_track(tmp_path):
    path = tmp_path / "bad"
    path.write_bytes(b"abc\x00\x01")
    assert LogicalTrack.unserialize(path) == LogicalTrack()


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        LogicalTrack.unserialize(tmp_path / "missing")


def test_counts():
    track = LogicalTrack("s", [1, 2])
    assert track.num_values == 2
    assert track.has_values
    assert LogicalTrack("s").num_values == 0


def test_vtrack_with_values():
    vt = LogicalTrack("src_track", [1, 2]).vtrack()
    assert vt["src"] == "src_track"
    assert vt["params"] == [1, 2]
    assert vt["keepref"] is True
    assert list(vt) == ["src", "time_shift", "func", "params", "keepref", "id_map", "filter"]


def test_vtrack_without_values():
    vt = LogicalTrack("src_track").vtrack()
    assert vt["params"] is None
    assert vt["func"] is None