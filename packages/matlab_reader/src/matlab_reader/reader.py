"""Top-level driver: file header plus the stream of data elements."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional

from .buffer import ByteBuffer
from .config import DEFAULT_OPTIONS, DecoderOptions
from .elements import TraceHook, read_element_header, skip_element
from .errors import InvalidFileHeader
from .matrix import DecodeContext, Matrix, decode_matrix
from .tags import DataType

FILE_HEADER_SIZE = 128
SIGNATURE_SIZE = 116

_BYTE_ORDERS = {b"IM": "<", b"MI": ">"}


@dataclass(frozen=True)
class FileHeader:
    """The fixed 128-byte header at the start of every Level-5 file."""

    signature: bytes
    subsystem_offset: int
    version: int
    endian: bytes

    @property
    def text(self) -> str:
        """Descriptive text with trailing NUL and space padding removed."""

        return self.signature.rstrip(b"\x00 ").decode("latin-1")

    @property
    def byte_order(self) -> str:
        return _BYTE_ORDERS[self.endian]


def read_file_header(buffer: ByteBuffer) -> FileHeader:
    """Decode the file header and switch ``buffer`` to the file byte order.

    Raises:
        InvalidFileHeader: If the buffer is shorter than a header or the
            endian indicator is neither ``IM`` nor ``MI``.
    """

    if buffer.cursor != 0 or len(buffer) < FILE_HEADER_SIZE:
        raise InvalidFileHeader(
            "buffer does not start with a complete 128-byte header",
            offset=buffer.cursor,
            expected=FILE_HEADER_SIZE,
            actual=len(buffer) - buffer.cursor,
        )

    buffer.seek(FILE_HEADER_SIZE - 2)
    endian = buffer.read_bytes(2)
    if endian not in _BYTE_ORDERS:
        raise InvalidFileHeader(
            "unknown endian indicator",
            offset=FILE_HEADER_SIZE - 2,
            expected=["IM", "MI"],
            actual=endian.decode("latin-1"),
        )
    buffer.byte_order = _BYTE_ORDERS[endian]

    buffer.seek(0)
    signature = buffer.read_bytes(SIGNATURE_SIZE)
    subsystem_offset = buffer.read_uint64()
    version = buffer.read_uint16()
    buffer.advance(2)
    return FileHeader(
        signature=signature,
        subsystem_offset=subsystem_offset,
        version=version,
        endian=endian,
    )


def decode_elements(
    buffer: ByteBuffer,
    options: DecoderOptions = DEFAULT_OPTIONS,
    trace: Optional[TraceHook] = None,
) -> Iterator[Matrix]:
    """Yield every top-level matrix until the end of ``buffer``.

    Elements that are not matrices are skipped by their byte length.
    """

    context = DecodeContext(options=options, trace=trace)
    while True:
        buffer.align()
        if buffer.at_end():
            return
        header = read_element_header(buffer, options, trace)
        if header.data_type == DataType.MATRIX:
            yield decode_matrix(buffer, header, context)
        else:
            skip_element(buffer, header)


def iter_matrices(
    data: bytes | bytearray,
    options: DecoderOptions = DEFAULT_OPTIONS,
    trace: Optional[TraceHook] = None,
) -> Iterator[Matrix]:
    buffer = ByteBuffer(data)
    read_file_header(buffer)
    yield from decode_elements(buffer, options, trace)


@dataclass
class MatFile:
    """A fully decoded MAT-file together with its (inflated) buffer."""

    header: FileHeader
    matrices: list[Matrix]
    buffer: ByteBuffer = field(repr=False)

    @classmethod
    def from_bytes(
        cls,
        data: bytes | bytearray,
        options: DecoderOptions = DEFAULT_OPTIONS,
        trace: Optional[TraceHook] = None,
    ) -> "MatFile":
        buffer = ByteBuffer(data)
        header = read_file_header(buffer)
        matrices = list(decode_elements(buffer, options, trace))
        return cls(header=header, matrices=matrices, buffer=buffer)

    @classmethod
    def load(
        cls,
        path: Path | str,
        options: DecoderOptions = DEFAULT_OPTIONS,
        trace: Optional[TraceHook] = None,
    ) -> "MatFile":
        return cls.from_bytes(Path(path).read_bytes(), options, trace)

    def __iter__(self) -> Iterator[Matrix]:
        return iter(self.matrices)

    def __len__(self) -> int:
        return len(self.matrices)

    def names(self) -> list[str]:
        return [matrix.name for matrix in self.matrices]

    def get(self, name: str) -> Optional[Matrix]:
        for matrix in self.matrices:
            if matrix.name == name:
                return matrix
        return None

    def save(self, path: Path | str) -> None:
        """Write the buffer, with every compressed element inflated, to ``path``."""

        destination = Path(path)
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(self.buffer.data)


def load_mat(
    path: Path | str, options: DecoderOptions = DEFAULT_OPTIONS
) -> MatFile:
    """Read and decode the MAT-file at ``path``."""

    source = Path(path)
    if not source.exists():
        raise FileNotFoundError(f"MAT file not found: {source}")
    return MatFile.load(source, options)


__all__ = [
    "FILE_HEADER_SIZE",
    "FileHeader",
    "MatFile",
    "decode_elements",
    "iter_matrices",
    "load_mat",
    "read_file_header",
]
