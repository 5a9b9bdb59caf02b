"""Lookup tables for Level-5 data type tags and matrix class tags."""

from __future__ import annotations

from enum import IntEnum
from typing import Final


class DataType(IntEnum):
    """Data element type tags (``miINT8`` .. ``miUTF32``)."""

    INT8 = 1
    UINT8 = 2
    INT16 = 3
    UINT16 = 4
    INT32 = 5
    UINT32 = 6
    SINGLE = 7
    DOUBLE = 9
    INT64 = 12
    UINT64 = 13
    MATRIX = 14
    COMPRESSED = 15
    UTF8 = 16
    UTF16 = 17
    UTF32 = 18


class MatrixClass(IntEnum):
    """Array class tags stored in the array-flags subelement."""

    CELL = 1
    STRUCT = 2
    OBJECT = 3
    CHAR = 4
    SPARSE = 5
    DOUBLE = 6
    SINGLE = 7
    INT8 = 8
    UINT8 = 9
    INT16 = 10
    UINT16 = 11
    INT32 = 12
    UINT32 = 13
    INT64 = 14
    UINT64 = 15


# struct format characters; byte order is prepended by the buffer
ELEMENT_FORMATS: Final[dict[DataType, str]] = {
    DataType.INT8: "b",
    DataType.UINT8: "B",
    DataType.INT16: "h",
    DataType.UINT16: "H",
    DataType.INT32: "i",
    DataType.UINT32: "I",
    DataType.SINGLE: "f",
    DataType.DOUBLE: "d",
    DataType.INT64: "q",
    DataType.UINT64: "Q",
}

_ELEMENT_SIZES: Final[dict[DataType, int]] = {
    DataType.INT8: 1,
    DataType.UINT8: 1,
    DataType.INT16: 2,
    DataType.UINT16: 2,
    DataType.INT32: 4,
    DataType.UINT32: 4,
    DataType.SINGLE: 4,
    DataType.DOUBLE: 8,
    DataType.INT64: 8,
    DataType.UINT64: 8,
}

TEXT_TYPES: Final[frozenset[DataType]] = frozenset(
    {DataType.UTF8, DataType.UTF16, DataType.UTF32}
)

NUMERIC_CLASSES: Final[frozenset[MatrixClass]] = frozenset(
    {
        MatrixClass.DOUBLE,
        MatrixClass.SINGLE,
        MatrixClass.INT8,
        MatrixClass.UINT8,
        MatrixClass.INT16,
        MatrixClass.UINT16,
        MatrixClass.INT32,
        MatrixClass.UINT32,
        MatrixClass.INT64,
        MatrixClass.UINT64,
    }
)

SUPPORTED_CLASSES: Final[frozenset[MatrixClass]] = NUMERIC_CLASSES | {
    MatrixClass.STRUCT,
    MatrixClass.CHAR,
}


def resolve_data_type(tag: int) -> DataType | int:
    """Return the enum member for ``tag`` or the raw int when unknown."""

    try:
        return DataType(tag)
    except ValueError:
        return tag


def resolve_matrix_class(tag: int) -> MatrixClass | int:
    try:
        return MatrixClass(tag)
    except ValueError:
        return tag


def element_size(data_type: DataType | int) -> int:
    """Size in bytes of one value of ``data_type``; 0 when not numeric."""

    try:
        return _ELEMENT_SIZES.get(DataType(data_type), 0)
    except ValueError:
        return 0


def data_type_name(data_type: DataType | int) -> str:
    """MATLAB-style name (``miDOUBLE``) or ``"Invalid"`` for unknown tags."""

    try:
        return "mi" + DataType(data_type).name
    except ValueError:
        return "Invalid"


def matrix_class_name(matrix_class: MatrixClass | int) -> str:
    """MATLAB-style name (``mxDOUBLE_CLASS``) or ``"Invalid"``."""

    try:
        return f"mx{MatrixClass(matrix_class).name}_CLASS"
    except ValueError:
        return "Invalid"


__all__ = [
    "DataType",
    "ELEMENT_FORMATS",
    "MatrixClass",
    "NUMERIC_CLASSES",
    "SUPPORTED_CLASSES",
    "TEXT_TYPES",
    "data_type_name",
    "element_size",
    "matrix_class_name",
    "resolve_data_type",
    "resolve_matrix_class",
]
