"""Data element header decoding."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from .buffer import ELEMENT_ALIGNMENT, ByteBuffer
from .config import DEFAULT_OPTIONS, DecoderOptions
from .errors import InvalidLength, MisalignedElement
from .inflate import inflate_element
from .tags import DataType, data_type_name, resolve_data_type

TraceHook = Callable[..., None]

SMALL_ELEMENT_PAYLOAD = 4


@dataclass(frozen=True)
class ElementHeader:
    """Decoded ``(data type, byte length)`` pair of one data element.

    ``offset`` is where the header starts in the buffer and ``small`` tells
    whether the packed small-element form was used.
    """

    data_type: DataType | int
    byte_length: int
    offset: int
    small: bool = False

    @property
    def type_name(self) -> str:
        return data_type_name(self.data_type)

    @property
    def payload_offset(self) -> int:
        return self.offset + (4 if self.small else 8)

    @property
    def end_offset(self) -> int:
        """First byte after the payload, before alignment padding."""

        return self.payload_offset + self.byte_length


def read_element_header(
    buffer: ByteBuffer,
    options: DecoderOptions = DEFAULT_OPTIONS,
    trace: Optional[TraceHook] = None,
) -> ElementHeader:
    """Read the next data element header and leave the cursor at its payload.

    The small-element form is recognised by a nonzero upper half in the first
    32-bit word (bytes 2-3 of a little-endian file); nothing in the format
    flags it explicitly. Compressed elements are inflated in place and the
    header read is retried on the inflated bytes.
    """

    while True:
        start = buffer.align()
        # peek first so a truncated buffer reports OutOfBounds
        buffer.peek(SMALL_ELEMENT_PAYLOAD)
        # never true while align() clamps to the buffer end
        if start % ELEMENT_ALIGNMENT:
            raise MisalignedElement(
                "data element header is not 8-byte aligned",
                offset=start,
                expected=0,
                actual=start % ELEMENT_ALIGNMENT,
            )

        tag = buffer.read_uint32()
        if tag >> 16:
            if tag >> 16 > SMALL_ELEMENT_PAYLOAD:
                raise InvalidLength(
                    "small data element payload exceeds its 4-byte slot",
                    offset=start,
                    expected=f"<= {SMALL_ELEMENT_PAYLOAD}",
                    actual=tag >> 16,
                )
            header = ElementHeader(
                data_type=resolve_data_type(tag & 0xFFFF),
                byte_length=tag >> 16,
                offset=start,
                small=True,
            )
        else:
            header = ElementHeader(
                data_type=resolve_data_type(tag),
                byte_length=buffer.read_uint32(),
                offset=start,
            )
        _emit(trace, "element", header)

        if header.data_type != DataType.COMPRESSED:
            return header

        inflated = inflate_element(buffer, header, options)
        if trace is not None:
            trace(
                "inflate",
                offset=start,
                compressed_bytes=header.byte_length,
                inflated_bytes=inflated,
            )


def skip_element(buffer: ByteBuffer, header: ElementHeader) -> None:
    """Move the cursor past the payload of ``header``.

    The cursor must still be at the start of the payload.
    """

    buffer.advance(header.byte_length)


def _emit(trace: Optional[TraceHook], event: str, header: ElementHeader) -> None:
    if trace is None:
        return
    payload: dict[str, Any] = {
        "offset": header.offset,
        "data_type": header.type_name,
        "tag": int(header.data_type),
        "byte_length": header.byte_length,
        "small": header.small,
    }
    trace(event, **payload)


__all__ = [
    "ElementHeader",
    "SMALL_ELEMENT_PAYLOAD",
    "TraceHook",
    "read_element_header",
    "skip_element",
]
