"""Tests for the data type and matrix class tables."""

from __future__ import annotations

from matlab_reader.tags import (
    DataType,
    MatrixClass,
    data_type_name,
    element_size,
    matrix_class_name,
    resolve_data_type,
    resolve_matrix_class,
)


def test_element_sizes_cover_numeric_tags() -> None:
    expected = {1: 1, 2: 1, 3: 2, 4: 2, 5: 4, 6: 4, 7: 4, 9: 8, 12: 8, 13: 8}
    for tag, size in expected.items():
        assert element_size(tag) == size


def test_non_numeric_and_reserved_tags_have_no_size() -> None:
    for tag in (8, 10, 11, 14, 15, 16, 17, 18, 0, 99):
        assert element_size(tag) == 0


def test_unknown_tags_are_kept_as_ints() -> None:
    assert resolve_data_type(9) is DataType.DOUBLE
    assert resolve_data_type(10) == 10
    assert not isinstance(resolve_data_type(10), DataType)
    assert resolve_matrix_class(16) == 16


def test_names_follow_matlab_spelling() -> None:
    assert data_type_name(DataType.COMPRESSED) == "miCOMPRESSED"
    assert data_type_name(11) == "Invalid"
    assert matrix_class_name(MatrixClass.STRUCT) == "mxSTRUCT_CLASS"
    assert matrix_class_name(0) == "Invalid"


def test_class_tags_match_file_format() -> None:
    assert [member.value for member in MatrixClass] == list(range(1, 16))
    assert MatrixClass.SPARSE == 5
    assert MatrixClass.UINT64 == 15
