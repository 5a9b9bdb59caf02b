"""Growable byte buffer with a single read cursor."""

from __future__ import annotations

import struct

from .errors import OutOfBounds

ELEMENT_ALIGNMENT = 8


class ByteBuffer:
    """Owns the decoded file bytes and the read position into them.

    The buffer is mutable so compressed elements can be replaced in place by
    their inflated bytes (see :meth:`replace_region`); every other operation
    only moves the cursor forward or rewinds it to an earlier offset.
    """

    def __init__(self, data: bytes | bytearray, *, byte_order: str = "<") -> None:
        if byte_order not in ("<", ">"):
            raise ValueError(f"byte_order must be '<' or '>'; got {byte_order!r}")
        self._data = bytearray(data)
        self._cursor = 0
        self.byte_order = byte_order

    def __len__(self) -> int:
        return len(self._data)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def data(self) -> bytes:
        """Snapshot of the current buffer contents."""

        return bytes(self._data)

    def at_end(self) -> bool:
        return self._cursor >= len(self._data)

    def remaining(self) -> int:
        return len(self._data) - self._cursor

    def seek(self, position: int) -> None:
        if not 0 <= position <= len(self._data):
            raise OutOfBounds(
                f"cannot seek to {position}",
                offset=self._cursor,
                expected=f"0..{len(self._data)}",
                actual=position,
            )
        self._cursor = position

    def advance(self, count: int) -> None:
        self._require(count)
        self._cursor += count

    def align(self, boundary: int = ELEMENT_ALIGNMENT) -> int:
        """Round the cursor up to ``boundary``, never past the buffer end."""

        aligned = (self._cursor + boundary - 1) & ~(boundary - 1)
        self._cursor = min(aligned, len(self._data))
        return self._cursor

    def peek(self, count: int) -> bytes:
        self._require(count)
        return bytes(self._data[self._cursor : self._cursor + count])

    def read_bytes(self, count: int) -> bytes:
        chunk = self.peek(count)
        self._cursor += count
        return chunk

    def read_primitive(self, code: str) -> int | float:
        """Read one value described by a :mod:`struct` format character."""

        fmt = self.byte_order + code
        size = struct.calcsize(fmt)
        (value,) = struct.unpack_from(fmt, self._data, self._offset_for(size))
        self._cursor += size
        return value

    def read_array(self, code: str, count: int) -> tuple[int | float, ...]:
        fmt = f"{self.byte_order}{count}{code}"
        size = struct.calcsize(fmt)
        values = struct.unpack_from(fmt, self._data, self._offset_for(size))
        self._cursor += size
        return values

    def read_uint8(self) -> int:
        return int(self.read_primitive("B"))

    def read_uint16(self) -> int:
        return int(self.read_primitive("H"))

    def read_uint32(self) -> int:
        return int(self.read_primitive("I"))

    def read_int32(self) -> int:
        return int(self.read_primitive("i"))

    def read_uint64(self) -> int:
        return int(self.read_primitive("Q"))

    def replace_region(self, start: int, old_length: int, new_bytes: bytes) -> None:
        """Swap ``old_length`` bytes at ``start`` for ``new_bytes``.

        Bytes after the region shift by the size difference. The cursor is
        left at ``start`` so the caller re-reads the spliced content.
        """

        end = start + old_length
        if start < 0 or old_length < 0 or end > len(self._data):
            raise OutOfBounds(
                "replacement region exceeds buffer",
                offset=start,
                expected=f"end <= {len(self._data)}",
                actual=end,
            )
        self._data[start:end] = new_bytes
        self._cursor = start

    def _offset_for(self, size: int) -> int:
        self._require(size)
        return self._cursor

    def _require(self, count: int) -> None:
        if count < 0 or self._cursor + count > len(self._data):
            raise OutOfBounds(
                f"need {count} bytes but only {self.remaining()} remain",
                offset=self._cursor,
                expected=count,
                actual=self.remaining(),
            )


__all__ = ["ByteBuffer", "ELEMENT_ALIGNMENT"]
