"""Typed errors raised while decoding a MAT-file buffer."""

from __future__ import annotations

from typing import Any


class MatDecodeError(ValueError):
    """Raised when the buffer violates the Level-5 element grammar.

    Every decode error carries the byte offset where it was detected and,
    where it applies, what the grammar expected at that position and what was
    actually found.
    """

    kind = "decode_error"

    def __init__(
        self,
        message: str,
        *,
        offset: int | None = None,
        expected: Any = None,
        actual: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.offset = offset
        self.expected = expected
        self.actual = actual

    def __str__(self) -> str:
        if self.offset is None:
            return self.message
        return f"{self.message} (offset {self.offset})"

    def to_payload(self) -> dict[str, Any]:
        """Return a JSON-serialisable summary for structured logs."""

        return {
            "kind": self.kind,
            "message": self.message,
            "offset": self.offset,
            "expected": self.expected,
            "actual": self.actual,
        }


class OutOfBounds(MatDecodeError):
    """A read or advance would move the cursor past the end of the buffer."""

    kind = "out_of_bounds"


class MisalignedElement(MatDecodeError):
    """A data element header does not start on an 8-byte boundary."""

    kind = "misaligned_element"


class UnexpectedDataType(MatDecodeError):
    """A subelement carries a type tag the grammar does not allow there."""

    kind = "unexpected_data_type"


class InvalidLength(MatDecodeError):
    """A byte-length field is not the required value or multiple."""

    kind = "invalid_length"


class UnsupportedMatrixClass(MatDecodeError):
    """Cell, sparse, object or unknown matrix class encountered."""

    kind = "unsupported_matrix_class"


class DecompressionFailed(MatDecodeError):
    """A compressed element could not be inflated."""

    kind = "decompression_failed"


class FieldIndexExceeded(MatDecodeError):
    """More struct field matrices were found than declared field names."""

    kind = "field_index_exceeded"


class InvalidFileHeader(MatDecodeError):
    """The 128-byte file header is truncated or has an unknown byte order."""

    kind = "invalid_file_header"


class NestingTooDeep(MatDecodeError):
    """Struct nesting exceeded the configured recursion limit."""

    kind = "nesting_too_deep"


__all__ = [
    "DecompressionFailed",
    "FieldIndexExceeded",
    "InvalidFileHeader",
    "InvalidLength",
    "MatDecodeError",
    "MisalignedElement",
    "NestingTooDeep",
    "OutOfBounds",
    "UnexpectedDataType",
    "UnsupportedMatrixClass",
]
