"""Hour/reference time stamps and (id, time stamp) points."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import BinaryIO, ClassVar

MAX_HOUR = 0xFFFFFF - 1
NA_HOUR = 0xFFFFFF
MAX_REFCOUNT = 0xFF - 1
NA_REFCOUNT = 0xFF
NA_ID = 0xFFFFFFFF

_PACKED = struct.Struct("<I")


def _stream_name(fp: object) -> str:
    return str(getattr(fp, "name", "<stream>"))


@dataclass(frozen=True, order=True)
class TimeStamp:
    """A 24-bit hour and an 8-bit reference count packed into 32 bits.

    Values are truncated to their bit widths, so a reference count of -1
    becomes NA_REFCOUNT.
    """

    hour: int = NA_HOUR
    refcount: int = NA_REFCOUNT

    MAX_HOUR: ClassVar[int] = MAX_HOUR
    NA_HOUR: ClassVar[int] = NA_HOUR
    MAX_REFCOUNT: ClassVar[int] = MAX_REFCOUNT
    NA_REFCOUNT: ClassVar[int] = NA_REFCOUNT
    PACKED_SIZE: ClassVar[int] = _PACKED.size

    def __post_init__(self) -> None:
        object.__setattr__(self, "hour", self.hour & 0xFFFFFF)
        object.__setattr__(self, "refcount", self.refcount & 0xFF)

    @property
    def value(self) -> int:
        """The packed 32-bit representation."""
        return (self.hour << 8) | self.refcount

    def pack(self) -> bytes:
        return _PACKED.pack(self.value)

    @classmethod
    def unpack(cls, data: bytes) -> TimeStamp:
        if len(data) != _PACKED.size:
            raise ValueError(f"Packed time stamp must be {_PACKED.size} bytes, got {len(data)}")
        (value,) = _PACKED.unpack(data)
        return cls(value >> 8, value & 0xFF)

    def write(self, fp: BinaryIO) -> None:
        written = fp.write(self.pack())
        if written is not None and written != _PACKED.size:
            raise OSError(f"Failed to write a file {_stream_name(fp)}")

    @classmethod
    def read(cls, fp: BinaryIO) -> TimeStamp:
        data = fp.read(_PACKED.size)
        if len(data) != _PACKED.size:
            raise ValueError(f"Invalid format of a file {_stream_name(fp)}")
        return cls.unpack(data)

    def __str__(self) -> str:
        return f"(hour {self.hour}, ref {self.refcount})"


@dataclass(frozen=True, order=True)
class Point:
    """A patient id together with a time stamp."""

    id: int = NA_ID
    timestamp: TimeStamp = field(default_factory=TimeStamp)

    @property
    def hour(self) -> int:
        return self.timestamp.hour

    @property
    def refcount(self) -> int:
        return self.timestamp.refcount

    def __str__(self) -> str:
        return f"({self.id}, {self.timestamp})"