"""Tests for inflating compressed elements into the buffer."""

from __future__ import annotations

import zlib

import pytest

from matlab_reader.buffer import ByteBuffer
from matlab_reader.config import DecoderOptions
from matlab_reader.elements import read_element_header
from matlab_reader.errors import DecompressionFailed
from matlab_reader.inflate import inflate_payload
from matlab_reader.tags import DataType

from .mat_builder import compressed, element


def test_inflate_payload_round_trips_zlib_stream() -> None:
    original = b"level five" * 40
    assert inflate_payload(zlib.compress(original)) == original


def test_small_output_cap_is_grown_until_data_fits() -> None:
    original = b"\x00" * 10_000
    assert inflate_payload(zlib.compress(original), ratio=1, attempts=12) == original


def test_output_cap_exhaustion_is_reported() -> None:
    original = b"\x00" * 10_000
    with pytest.raises(DecompressionFailed):
        inflate_payload(zlib.compress(original), ratio=1, attempts=2)


def test_corrupt_stream_raises_decompression_failed() -> None:
    with pytest.raises(DecompressionFailed):
        inflate_payload(b"\x78\x9c not a deflate stream")


def test_truncated_stream_raises_decompression_failed() -> None:
    stream = zlib.compress(b"abcdefgh" * 64)
    with pytest.raises(DecompressionFailed):
        inflate_payload(stream[: len(stream) // 2])


def test_splice_preserves_bytes_after_compressed_region() -> None:
    inner = element(DataType.UINT8, b"\x05" * 40)
    wrapper = compressed(inner)
    trailer = b"\xab\xcd\xef\x01"
    original = b"\x00" * 8 + wrapper + trailer
    buffer = ByteBuffer(original)
    buffer.advance(8)

    header = read_element_header(buffer)

    assert header.offset == 8
    assert header.data_type is DataType.UINT8
    assert header.byte_length == 40
    assert buffer.data[8 : 8 + len(inner)] == inner
    assert buffer.data[8 + len(inner)] == original[8 + len(wrapper)]
    assert buffer.data[8 + len(inner) :] == trailer
    assert len(buffer) == len(original) - len(wrapper) + len(inner)


def test_inflation_must_grow_the_replaced_region() -> None:
    # 64 distinct bytes do not compress, so the wrapper is larger than its content
    inner = bytes(range(64))
    buffer = ByteBuffer(compressed(inner))

    with pytest.raises(DecompressionFailed) as excinfo:
        read_element_header(buffer)

    assert excinfo.value.offset == 0
    assert excinfo.value.actual == 64


def test_inflate_options_are_applied() -> None:
    inner = element(DataType.UINT8, b"\x00" * 4_000)
    buffer = ByteBuffer(compressed(inner))
    options = DecoderOptions(inflate_ratio=1, inflate_attempts=1)

    with pytest.raises(DecompressionFailed) as excinfo:
        read_element_header(buffer, options)

    assert excinfo.value.offset == 0
