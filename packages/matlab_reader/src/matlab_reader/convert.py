"""numpy views of decoded matrices."""

from __future__ import annotations

from typing import Any, Final

import numpy as np  # type: ignore[import-not-found]

from .matrix import CharMatrix, EmptyMatrix, Matrix, NumericMatrix, StructMatrix
from .tags import ELEMENT_FORMATS, DataType, MatrixClass

CLASS_DTYPES: Final[dict[MatrixClass, str]] = {
    MatrixClass.DOUBLE: "f8",
    MatrixClass.SINGLE: "f4",
    MatrixClass.INT8: "i1",
    MatrixClass.UINT8: "u1",
    MatrixClass.INT16: "i2",
    MatrixClass.UINT16: "u2",
    MatrixClass.INT32: "i4",
    MatrixClass.UINT32: "u4",
    MatrixClass.INT64: "i8",
    MatrixClass.UINT64: "u8",
}


def storage_dtype(data_type: DataType | int, byte_order: str = "<") -> np.dtype:
    """numpy dtype of the stored element type, in the file byte order."""

    code = ELEMENT_FORMATS.get(DataType(data_type))
    if code is None:
        raise ValueError(f"data type {data_type!r} has no numeric layout")
    return np.dtype(byte_order + code)


def to_ndarray(matrix: NumericMatrix) -> np.ndarray:
    """Reinterpret the raw payload as an array shaped like ``matrix.dims``.

    Values are stored column-major and are converted from the storage type to
    the dtype of the array class. The imaginary part is ignored.
    """

    raw = np.frombuffer(matrix.data, dtype=storage_dtype(matrix.data_type, matrix.byte_order))
    target = CLASS_DTYPES[MatrixClass(matrix.matrix_class)]
    values = raw.astype(target)
    if not matrix.dims:
        return values
    return values.reshape(matrix.dims, order="F")


def char_rows(matrix: CharMatrix) -> list[str]:
    """Split a 2-D char array into its rows."""

    if len(matrix.dims) != 2 or matrix.dims[0] <= 1:
        return [matrix.text]
    rows, cols = matrix.dims
    if rows * cols != len(matrix.text):
        return [matrix.text]
    grid = np.array(list(matrix.text)).reshape((rows, cols), order="F")
    return ["".join(row) for row in grid]


def to_python(matrix: Matrix) -> Any:
    """Convert a decoded matrix into ndarray/str/dict/list values."""

    if isinstance(matrix, NumericMatrix):
        return to_ndarray(matrix)
    if isinstance(matrix, CharMatrix):
        rows = char_rows(matrix)
        return rows[0] if len(rows) == 1 else rows
    if isinstance(matrix, StructMatrix):
        records = [
            {name: to_python(value) for name, value in record.items()}
            for record in matrix.records()
        ]
        if len(records) == 1:
            return records[0]
        return records
    if isinstance(matrix, EmptyMatrix):
        return None
    raise TypeError(f"unsupported matrix value: {type(matrix).__name__}")


def struct_field_labels(
    matrix: StructMatrix, array_name: str | None = None, *, filter_2d: bool = False
) -> list[str]:
    """Return ``name.field`` labels for the fields of the first struct element.

    With ``filter_2d`` only fields holding a 2-D array that is not a vector
    are listed.
    """

    prefix = array_name if array_name is not None else matrix.name
    labels: list[str] = []
    values = matrix.elements[0] if matrix.elements else ()
    for index, name in enumerate(matrix.field_names):
        if filter_2d:
            if index >= len(values):
                continue
            dims = values[index].dims
            if not (len(dims) == 2 and dims[0] != 1 and dims[1] != 1):
                continue
        labels.append(f"{prefix}.{name}")
    return labels


__all__ = [
    "CLASS_DTYPES",
    "char_rows",
    "storage_dtype",
    "struct_field_labels",
    "to_ndarray",
    "to_python",
]
