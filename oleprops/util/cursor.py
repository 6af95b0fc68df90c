from __future__ import annotations

import struct
from contextlib import contextmanager
from typing import BinaryIO, Iterator

from oleprops.exceptions import PropertySetStructureError

# Property streams are little-endian regardless of the byte order mark
_U8 = struct.Struct("<B")
_I8 = struct.Struct("<b")
_U16 = struct.Struct("<H")
_I16 = struct.Struct("<h")
_U32 = struct.Struct("<I")
_I32 = struct.Struct("<i")
_U64 = struct.Struct("<Q")
_I64 = struct.Struct("<q")
_F32 = struct.Struct("<f")
_F64 = struct.Struct("<d")


class ByteCursor:
    """
    Bounds-checked read cursor over an in-memory property stream.

    Every seek or read that would leave the buffer raises
    PropertySetStructureError, which aborts the decode in progress.
    A cursor belongs to exactly one decode call.
    """

    def __init__(self, data: bytes | bytearray | memoryview):
        self._data = data if isinstance(data, bytes) else bytes(data)
        self._pos = 0

    @classmethod
    def from_source(
        cls, source: "bytes | bytearray | memoryview | BinaryIO | ByteCursor"
    ) -> "ByteCursor":
        """Wrap raw bytes or a binary file-like object. Cursors pass through."""
        if isinstance(source, ByteCursor):
            return source
        if isinstance(source, (bytes, bytearray, memoryview)):
            return cls(source)
        if hasattr(source, "read"):
            source.seek(0)
            return cls(source.read())
        raise TypeError(f"Cannot read property stream from {type(source).__name__}")

    @property
    def length(self) -> int:
        return len(self._data)

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    def tell(self) -> int:
        return self._pos

    def seek(self, offset: int) -> None:
        if offset < 0 or offset > len(self._data):
            raise PropertySetStructureError(
                f"Offset {offset} outside of stream (length {len(self._data)})"
            )
        self._pos = offset

    def skip(self, count: int) -> None:
        self.seek(self._pos + count)

    @contextmanager
    def saved_position(self) -> Iterator["ByteCursor"]:
        """Restore the current position when the block exits, however it exits."""
        position = self._pos
        try:
            yield self
        finally:
            self._pos = position

    def read_bytes(self, count: int) -> bytes:
        if count < 0 or self._pos + count > len(self._data):
            raise PropertySetStructureError(
                f"Cannot read {count} bytes at offset {self._pos} "
                f"(length {len(self._data)})"
            )
        chunk = self._data[self._pos : self._pos + count]
        self._pos += count
        return chunk

    def _unpack(self, fmt: struct.Struct):
        return fmt.unpack(self.read_bytes(fmt.size))[0]

    def read_u8(self) -> int:
        return self._unpack(_U8)

    def read_i8(self) -> int:
        return self._unpack(_I8)

    def read_u16(self) -> int:
        return self._unpack(_U16)

    def read_i16(self) -> int:
        return self._unpack(_I16)

    def read_u32(self) -> int:
        return self._unpack(_U32)

    def read_i32(self) -> int:
        return self._unpack(_I32)

    def read_u64(self) -> int:
        return self._unpack(_U64)

    def read_i64(self) -> int:
        return self._unpack(_I64)

    def read_f32(self) -> float:
        return self._unpack(_F32)

    def read_f64(self) -> float:
        return self._unpack(_F64)
