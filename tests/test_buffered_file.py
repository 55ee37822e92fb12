import os

import pytest

from emrtracks.buffered_file import BufferedFile, file_size


@pytest.fixture
def sample(tmp_path):
    path = tmp_path / "data.bin"
    path.write_bytes(b"hello world")
    return path


def test_write_then_read_round_trip(tmp_path):
    path = tmp_path / "out.bin"
    with BufferedFile().open(path, "w") as bf:
        assert bf.write(b"hello world") == 11
        assert bf.file_size == 11
    with BufferedFile().open(path, "r") as bf:
        assert bf.read(5) == b"hello"
        assert bf.tell() == 5
        assert bf.read(100) == b" world"
        assert bf.tell() == 11


def test_getc_and_end(sample):
    with BufferedFile().open(sample, "r") as bf:
        chars = []
        while (c := bf.getc()) != -1:
            chars.append(c)
        assert bytes(chars) == sample.read_bytes()
        assert bf.eof


def test_read_at_end_returns_empty(sample):
    with BufferedFile().open(sample, "r") as bf:
        bf.read(11)
        assert bf.read(4) == b""
        assert bf.eof


def test_large_read_bypasses_cache(tmp_path):
    data = bytes(range(256)) * 20
    path = tmp_path / "big.bin"
    path.write_bytes(data)
    with BufferedFile(16).open(path, "r") as bf:
        assert bf.read(4000) == data[:4000]
        assert bf.tell() == 4000
        assert bf.read(8) == data[4000:4008]


def test_seek_set_bounds(sample):
    with BufferedFile().open(sample, "r") as bf:
        bf.seek(bf.file_size)
        assert bf.eof
        bf.seek(6)
        assert bf.read(5) == b"world"
        with pytest.raises(ValueError):
            bf.seek(bf.file_size + 1)
        with pytest.raises(ValueError):
            bf.seek(-1)


def test_seek_end_counts_from_last_byte(sample):
    with BufferedFile().open(sample, "r") as bf:
        bf.seek(0, os.SEEK_END)
        assert bf.tell() == bf.file_size - 1
        assert bf.getc() == ord("d")
        with pytest.raises(ValueError):
            bf.seek(bf.file_size, os.SEEK_END)


def test_seek_cur(sample):
    with BufferedFile().open(sample, "r") as bf:
        bf.seek(2)
        bf.seek(3, os.SEEK_CUR)
        assert bf.tell() == 5
        with pytest.raises(ValueError):
            bf.seek(-6, os.SEEK_CUR)
        with pytest.raises(ValueError):
            bf.seek(0, 99)


def test_write_invalidates_cache(tmp_path):
    path = tmp_path / "rw.bin"
    path.write_bytes(b"abcd")
    with BufferedFile().open(path, "r+") as bf:
        assert bf.read(4) == b"abcd"
        bf.seek(0)
        bf.write(b"XY")
        bf.seek(0)
        assert bf.read(4) == b"XYcd"
    assert path.read_bytes() == b"XYcd"


def test_truncate(sample):
    with BufferedFile().open(sample, "r+") as bf:
        bf.seek(3)
        bf.truncate()
        assert bf.file_size == 3
    assert sample.read_bytes() == b"hel"


def test_locked_open(sample):
    with BufferedFile().open(sample, "r+", lock=True) as bf:
        assert bf.read(5) == b"hello"


def test_closed_file_raises(sample):
    bf = BufferedFile().open(sample, "r")
    bf.close()
    assert not bf.opened
    with pytest.raises(ValueError):
        bf.read(1)


def test_open_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        BufferedFile().open(tmp_path / "missing", "r")


def test_file_size_function(sample, tmp_path):
    assert file_size(sample) == len(sample.read_bytes())
    with pytest.raises(OSError):
        file_size(tmp_path / "missing")