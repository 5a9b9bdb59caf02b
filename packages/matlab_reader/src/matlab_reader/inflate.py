"""Inflation of ``miCOMPRESSED`` elements back into the live buffer."""

from __future__ import annotations

import zlib
from typing import TYPE_CHECKING

from .buffer import ByteBuffer
from .config import DEFAULT_OPTIONS, DecoderOptions
from .errors import DecompressionFailed

if TYPE_CHECKING:  # pragma: no cover - type checking import only
    from .elements import ElementHeader

# compressed wrappers always use the 8-byte header form
NORMAL_HEADER_SIZE = 8


def inflate_payload(payload: bytes, *, ratio: int = 20, attempts: int = 4) -> bytes:
    """Inflate a zlib stream whose uncompressed size is unknown.

    The output is capped at ``ratio * len(payload)`` bytes. Hitting the cap
    means the buffer was too small, so the cap is doubled and inflation is
    retried from scratch, at most ``attempts`` times.

    Raises:
        DecompressionFailed: on corrupt data, a truncated stream, or when the
            output still does not fit after the last attempt.
    """

    limit = max(ratio * len(payload), 1)
    for _ in range(attempts):
        inflater = zlib.decompressobj()
        try:
            output = inflater.decompress(payload, limit)
        except zlib.error as exc:
            raise DecompressionFailed(
                f"zlib stream is corrupt: {exc}", actual=len(payload)
            ) from exc
        if inflater.unconsumed_tail or (not inflater.eof and len(output) >= limit):
            limit *= 2
            continue
        if not inflater.eof:
            raise DecompressionFailed(
                "zlib stream ended before its end-of-stream marker",
                expected="complete stream",
                actual=len(payload),
            )
        return output

    raise DecompressionFailed(
        f"inflated data exceeds {limit // 2} bytes after {attempts} attempts",
        expected=f"<= {limit // 2} bytes",
    )


def inflate_element(
    buffer: ByteBuffer,
    header: "ElementHeader",
    options: DecoderOptions = DEFAULT_OPTIONS,
) -> int:
    """Replace a compressed element with its inflated bytes.

    ``buffer`` must be positioned at the element payload. On return the
    cursor sits at ``header.offset``, where the inflated element now starts.

    Returns:
        The number of inflated bytes spliced into the buffer.
    """

    start = header.offset
    payload = buffer.read_bytes(header.byte_length)
    try:
        inflated = inflate_payload(
            payload, ratio=options.inflate_ratio, attempts=options.inflate_attempts
        )
    except DecompressionFailed as exc:
        exc.offset = start
        raise

    region = NORMAL_HEADER_SIZE + header.byte_length
    if len(inflated) <= region:
        raise DecompressionFailed(
            "inflated element is not larger than its compressed form",
            offset=start,
            expected=f"> {region} bytes",
            actual=len(inflated),
        )

    buffer.replace_region(start, region, inflated)
    return len(inflated)


__all__ = ["NORMAL_HEADER_SIZE", "inflate_element", "inflate_payload"]
