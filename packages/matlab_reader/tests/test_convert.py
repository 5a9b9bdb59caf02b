"""Tests for numpy views of decoded matrices."""

from __future__ import annotations

import numpy as np  # type: ignore[import-not-found]
import pytest

from matlab_reader import CharMatrix, MatFile, NumericMatrix, StructMatrix
from matlab_reader.convert import (
    char_rows,
    storage_dtype,
    struct_field_labels,
    to_ndarray,
    to_python,
)
from matlab_reader.matrix import ArrayFlags
from matlab_reader.tags import DataType, MatrixClass

from .mat_builder import char_matrix, double_matrix, element, mat_file, matrix, struct_matrix


def test_to_ndarray_reshapes_column_major() -> None:
    mat = MatFile.from_bytes(
        mat_file(double_matrix("A", [2, 3], [1.0, 2.0, 3.0, 4.0, 5.0, 6.0]))
    )
    result = mat.get("A")
    assert isinstance(result, NumericMatrix)

    array = to_ndarray(result)

    assert array.shape == (2, 3)
    assert array.dtype == np.float64
    np.testing.assert_array_equal(array, [[1.0, 3.0, 5.0], [2.0, 4.0, 6.0]])


def test_to_ndarray_upcasts_storage_type_to_class() -> None:
    data = element(DataType.UINT8, bytes([4, 5, 6]))
    mat = MatFile.from_bytes(mat_file(matrix(MatrixClass.DOUBLE, [3, 1], "v", data)))
    result = mat.get("v")
    assert isinstance(result, NumericMatrix)

    array = to_ndarray(result)

    assert array.dtype == np.float64
    np.testing.assert_array_equal(array[:, 0], [4.0, 5.0, 6.0])


def test_to_ndarray_honours_big_endian_payload() -> None:
    mat = MatFile.from_bytes(
        mat_file(double_matrix("B", [1, 2], [1.5, -2.0], order=">"), order=">")
    )
    result = mat.get("B")
    assert isinstance(result, NumericMatrix)

    np.testing.assert_array_equal(to_ndarray(result), [[1.5, -2.0]])


def test_storage_dtype_rejects_non_numeric_tags() -> None:
    assert storage_dtype(DataType.INT16, ">") == np.dtype(">i2")
    with pytest.raises(ValueError):
        storage_dtype(DataType.UTF8)


def test_char_rows_splits_column_major_text() -> None:
    flags = ArrayFlags(matrix_class=MatrixClass.CHAR)
    # rows "ab" and "cd" stored column by column
    value = CharMatrix(name="c", dims=(2, 2), flags=flags, text="acbd")

    assert char_rows(value) == ["ab", "cd"]
    single = CharMatrix(name="c", dims=(1, 3), flags=flags, text="xyz")
    assert char_rows(single) == ["xyz"]


def test_to_python_converts_struct_tree() -> None:
    raw = mat_file(
        struct_matrix(
            "s",
            ["v", "name"],
            [double_matrix("", [1, 2], [1.0, 2.0]), char_matrix("", "probe")],
        )
    )
    (result,) = MatFile.from_bytes(raw).matrices

    converted = to_python(result)

    assert set(converted) == {"v", "name"}
    assert converted["name"] == "probe"
    np.testing.assert_array_equal(converted["v"], [[1.0, 2.0]])


def test_struct_field_labels_filter_two_dimensional_fields() -> None:
    raw = mat_file(
        struct_matrix(
            "epsi",
            ["grid", "time", "label"],
            [
                double_matrix("", [2, 2], [1.0, 2.0, 3.0, 4.0]),
                double_matrix("", [1, 3], [0.0, 1.0, 2.0]),
                char_matrix("", "x"),
            ],
        )
    )
    (result,) = MatFile.from_bytes(raw).matrices
    assert isinstance(result, StructMatrix)

    assert struct_field_labels(result) == ["epsi.grid", "epsi.time", "epsi.label"]
    assert struct_field_labels(result, filter_2d=True) == ["epsi.grid"]
    assert struct_field_labels(result, "alias") == [
        "alias.grid",
        "alias.time",
        "alias.label",
    ]
