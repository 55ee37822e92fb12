"""A file with a small read cache and optional advisory locking."""

from __future__ import annotations

import os
from typing import Optional

try:
    import fcntl
except ImportError:  # pragma: no cover - non-POSIX platforms
    fcntl = None  # type: ignore[assignment]

DEFAULT_BUFSIZE = 1024


def file_size(path: str | os.PathLike) -> int:
    """Return the size of the file at path."""
    try:
        return os.stat(path).st_size
    except OSError as exc:
        raise OSError(exc.errno, f"Cannot stat file {os.fspath(path)}: {exc.strerror}") from exc


class BufferedFile:
    """Binary file with a cached read window and a tracked virtual position.

    Modes are the usual ``open`` modes ("r", "w", "r+", ...); the file is always
    binary. With ``lock`` the whole file is locked, shared for "r" and
    exclusive otherwise, until it is closed.
    """

    def __init__(self, bufsize: int = DEFAULT_BUFSIZE) -> None:
        self._bufsize = bufsize
        self._fp = None
        self._filename = ""
        self._eof = True
        self._file_size = 0
        self._vpos = -1
        self._ppos = 0
        self._sbuf = 0
        self._ebuf = 0
        self._buf = b""

    def __enter__(self) -> BufferedFile:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def opened(self) -> bool:
        return self._fp is not None

    @property
    def eof(self) -> bool:
        return self._eof

    @property
    def file_name(self) -> str:
        return self._filename

    @property
    def file_size(self) -> int:
        return self._file_size

    def _require_open(self):
        if self._fp is None:
            raise ValueError("I/O operation on a closed file")
        return self._fp

    def open(self, path: str | os.PathLike, mode: str, lock: bool = False) -> BufferedFile:
        self.close()
        self._filename = os.fspath(path)
        raw_mode = mode if "b" in mode else mode + "b"
        fp = open(self._filename, raw_mode, buffering=0)
        if lock:
            if fcntl is None:
                fp.close()
                raise OSError("File locking is not supported on this platform")
            try:
                fcntl.lockf(fp.fileno(), fcntl.LOCK_SH if mode == "r" else fcntl.LOCK_EX)
            except OSError:
                fp.close()
                raise
        self._fp = fp
        self._eof = False
        self._vpos = self._ppos = 0
        self._sbuf = self._ebuf = 0
        self._buf = b""
        self._file_size = os.fstat(fp.fileno()).st_size
        return self

    def close(self) -> None:
        if self._fp is not None:
            fp, self._fp = self._fp, None
            self._eof = True
            self._ppos = -1
            fp.close()

    def _read_raw(self, size: int) -> bytes:
        chunks = []
        remaining = size
        while remaining > 0:
            chunk = self._fp.read(remaining)
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)

    def getc(self) -> int:
        """Return the next byte, or -1 at the end of the file."""
        self._require_open()
        if self._sbuf <= self._vpos < self._ebuf:
            byte = self._buf[self._vpos - self._sbuf]
            self._vpos += 1
            return byte
        data = self.read(1)
        return data[0] if data else -1

    def read(self, size: int) -> bytes:
        fp = self._require_open()
        if self._sbuf <= self._vpos and self._vpos + size <= self._ebuf:
            start = self._vpos - self._sbuf
            self._vpos += size
            return self._buf[start:start + size]

        if self._ppos != self._vpos:
            fp.seek(self._vpos)

        if size <= self._bufsize:
            chunk = self._read_raw(self._bufsize)
            self._ppos = self._vpos + len(chunk)
            self._sbuf = self._vpos
            self._ebuf = self._ppos
            self._buf = chunk
            data = chunk[:size]
        else:
            data = self._read_raw(size)
            self._ppos = self._vpos + len(data)

        self._vpos += len(data)
        if not data:
            self._eof = True
        return data

    def write(self, data: bytes) -> int:
        fp = self._require_open()
        if self._ppos != self._vpos:
            fp.seek(self._vpos)
            self._ppos = self._vpos

        view = memoryview(data)
        written = 0
        while written < len(view):
            n = fp.write(view[written:])
            if not n:
                break
            written += n

        if written:
            if max(self._vpos, self._sbuf) < min(self._vpos + written, self._ebuf):
                self._sbuf = self._ebuf = 0
            self._vpos += written
            self._ppos = self._vpos
            self._file_size = max(self._file_size, self._vpos)
        return written

    def tell(self) -> int:
        return self._vpos

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> None:
        """Move the position.

        SEEK_END counts back from the last byte, SEEK_CUR must stay within the
        file's bytes and SEEK_SET may land just past the last byte.
        """
        if whence == os.SEEK_END:
            if offset < 0 or self._file_size - 1 < offset:
                raise ValueError(f"Invalid seek offset {offset}")
            self._vpos = self._file_size - offset - 1
        elif whence == os.SEEK_CUR:
            target = self._vpos + offset
            if target < 0 or target > self._file_size - 1:
                raise ValueError(f"Invalid seek offset {offset}")
            self._vpos = target
        elif whence == os.SEEK_SET:
            if offset < 0 or offset > self._file_size:
                raise ValueError(f"Invalid seek offset {offset}")
            self._vpos = offset
        else:
            raise ValueError(f"Invalid whence {whence}")
        self._eof = self._vpos == self._file_size

    def truncate(self) -> None:
        """Cut the file at the current position."""
        fp = self._require_open()
        os.ftruncate(fp.fileno(), self._vpos)
        self._ppos = -1
        self._file_size = self._vpos
        self._sbuf = self._ebuf = 0

    def stat(self) -> os.stat_result:
        return os.fstat(self._require_open().fileno())