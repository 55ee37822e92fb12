"""Logical tracks: named views over a source track, optionally restricted to values."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Any

from .buffered_file import BufferedFile

_COUNT = struct.Struct("<I")


@dataclass
class LogicalTrack:
    """A source track name and an optional list of integer values."""

    source: str = ""
    values: list[int] = field(default_factory=list)

    @property
    def num_values(self) -> int:
        return len(self.values)

    @property
    def has_values(self) -> bool:
        return bool(self.values)

    def serialize(self, path) -> None:
        """Write the track as a NUL-terminated source name, a value count and the values."""
        payload = (
            self.source.encode("utf-8")
            + b"\0"
            + _COUNT.pack(len(self.values))
            + struct.pack(f"<{len(self.values)}i", *self.values)
        )
        with BufferedFile().open(path, "w", lock=True) as bf:
            if bf.write(payload) != len(payload):
                raise OSError(f"Error while writing file {bf.file_name}")

    @classmethod
    def unserialize(cls, path) -> LogicalTrack:
        """Read a track; an empty or malformed file yields an empty track."""
        with BufferedFile().open(path, "r", lock=True) as bf:
            data = bf.read(bf.file_size) if bf.file_size else b""

        end = data.find(b"\0")
        if end < 0:
            return cls()
        source = data[:end].decode("utf-8")
        pos = end + 1
        if len(data) - pos < _COUNT.size:
            return cls()
        (count,) = _COUNT.unpack_from(data, pos)
        pos += _COUNT.size
        if not count:
            return cls(source)
        if len(data) - pos < 4 * count:
            return cls()
        return cls(source, list(struct.unpack_from(f"<{count}i", data, pos)))

    def vtrack(self) -> dict[str, Any]:
        """Return the virtual-track description of this logical track."""
        return {
            "src": self.source,
            "time_shift": None,
            "func": None,
            "params": list(self.values) if self.has_values else None,
            "keepref": True,
            "id_map": None,
            "filter": None,
        }