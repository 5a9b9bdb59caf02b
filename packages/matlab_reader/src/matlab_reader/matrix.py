"""Recursive decoding of ``miMATRIX`` elements."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Optional, Sequence, Union

from .buffer import ELEMENT_ALIGNMENT, ByteBuffer
from .config import DEFAULT_OPTIONS, DecoderOptions
from .elements import ElementHeader, TraceHook, read_element_header
from .errors import (
    FieldIndexExceeded,
    InvalidLength,
    NestingTooDeep,
    UnexpectedDataType,
    UnsupportedMatrixClass,
)
from .tags import (
    SUPPORTED_CLASSES,
    TEXT_TYPES,
    DataType,
    MatrixClass,
    data_type_name,
    element_size,
    matrix_class_name,
    resolve_matrix_class,
)

ARRAY_FLAGS_LENGTH = 8
_COMPLEX_FLAG = 0x08
_GLOBAL_FLAG = 0x04
_LOGICAL_FLAG = 0x02
_NAME_TYPES = (DataType.INT8, DataType.UINT8)
_LEGACY_CHAR_TYPES = (DataType.UINT8, DataType.UINT16)


@dataclass(frozen=True)
class ArrayFlags:
    """Contents of the array-flags subelement."""

    matrix_class: MatrixClass | int
    flags: int = 0
    max_nonzero: int = 0

    @property
    def is_complex(self) -> bool:
        return bool(self.flags & _COMPLEX_FLAG)

    @property
    def is_global(self) -> bool:
        return bool(self.flags & _GLOBAL_FLAG)

    @property
    def is_logical(self) -> bool:
        return bool(self.flags & _LOGICAL_FLAG)

    @property
    def class_name(self) -> str:
        return matrix_class_name(self.matrix_class)


@dataclass(frozen=True)
class NumericMatrix:
    """Numeric array with its raw, not yet reinterpreted, payload.

    ``data_type`` is the storage tag, which MATLAB may narrow below the array
    class (a double array holding small integers is often stored as
    ``miUINT8``).
    """

    name: str
    dims: tuple[int, ...]
    flags: ArrayFlags
    data_type: DataType | int
    data: bytes
    byte_order: str = "<"
    imaginary: Optional[bytes] = None
    imaginary_type: Optional[DataType | int] = None
    field_name: Optional[str] = None

    @property
    def matrix_class(self) -> MatrixClass | int:
        return self.flags.matrix_class

    @property
    def count(self) -> int:
        size = element_size(self.data_type)
        return len(self.data) // size if size else 0


@dataclass(frozen=True)
class CharMatrix:
    """Character array decoded to text (column-major for 2-D arrays)."""

    name: str
    dims: tuple[int, ...]
    flags: ArrayFlags
    text: str
    data_type: DataType | int = DataType.UTF8
    field_name: Optional[str] = None


@dataclass(frozen=True)
class StructMatrix:
    """Struct array: one tuple of field values per element, in field order."""

    name: str
    dims: tuple[int, ...]
    flags: ArrayFlags
    field_names: tuple[str, ...]
    elements: tuple[tuple["Matrix", ...], ...] = ()
    field_name: Optional[str] = None

    def field(self, name: str, index: int = 0) -> "Matrix":
        """Return the value of field ``name`` for struct element ``index``."""

        try:
            position = self.field_names.index(name)
        except ValueError:
            raise KeyError(name) from None
        return self.elements[index][position]

    def records(self) -> list[dict[str, "Matrix"]]:
        return [dict(zip(self.field_names, values)) for values in self.elements]


@dataclass(frozen=True)
class EmptyMatrix:
    """Nested matrix element written with a byte length of zero."""

    name: str = ""
    dims: tuple[int, ...] = ()
    field_name: Optional[str] = None


Matrix = Union[NumericMatrix, CharMatrix, StructMatrix, EmptyMatrix]


class StructFieldWalker:
    """Hands out field names, in order, to the matrices nested in a struct."""

    def __init__(self, field_names: Sequence[str], element_count: int = 1) -> None:
        self._field_names = tuple(field_names)
        self._element_count = element_count
        self._element = 0
        self._index = 0

    @property
    def field_names(self) -> tuple[str, ...]:
        return self._field_names

    @property
    def index(self) -> int:
        return self._index

    @property
    def element(self) -> int:
        return self._element

    def remaining(self) -> int:
        return len(self._field_names) - self._index

    def next_field_name(self, offset: Optional[int] = None) -> str:
        if self._element_count == 0 or self._index >= len(self._field_names):
            raise FieldIndexExceeded(
                "struct contains more field matrices than field names",
                offset=offset,
                expected=len(self._field_names),
                actual=self._index + 1,
            )
        name = self._field_names[self._index]
        self._index += 1
        return name

    def next_element(self) -> None:
        """Start handing out names for the next struct array element."""

        if self._element + 1 >= self._element_count:
            raise FieldIndexExceeded(
                "struct array has no further elements",
                expected=self._element_count,
                actual=self._element + 2,
            )
        self._element += 1
        self._index = 0


@dataclass
class DecodeContext:
    """Attribution state threaded through one recursive decode.

    Each struct gets a child context holding its own walker, so a nested
    struct never overwrites the field position of the struct enclosing it.
    This differs from the reference reader, which keeps one walker for the
    whole decode and lets a nested struct replace it.
    """

    options: DecoderOptions = DEFAULT_OPTIONS
    trace: Optional[TraceHook] = None
    array_name: str = ""
    walker: Optional[StructFieldWalker] = None
    depth: int = 0
    path: tuple[str, ...] = field(default_factory=tuple)

    def enter_struct(self, walker: StructFieldWalker, label: str) -> "DecodeContext":
        return replace(
            self,
            walker=walker,
            depth=self.depth + 1,
            path=self.path + (label,),
        )


def decode_matrix(
    buffer: ByteBuffer,
    header: ElementHeader,
    context: Optional[DecodeContext] = None,
) -> Matrix:
    """Decode the body of one ``miMATRIX`` element.

    The cursor must be at the element payload. Subelements are read in the
    fixed order array flags, dimensions, name, class-specific body.
    """

    if context is None:
        context = DecodeContext()
    if context.depth > context.options.max_depth:
        raise NestingTooDeep(
            "struct nesting exceeds the configured limit",
            offset=header.offset,
            expected=f"<= {context.options.max_depth}",
            actual=context.depth,
        )

    size_at_entry = len(buffer)
    if header.byte_length == 0:
        field_name = _attribute_field(context, header.offset)
        return EmptyMatrix(field_name=field_name)

    flags = _read_array_flags(buffer, context)
    if flags.matrix_class not in SUPPORTED_CLASSES:
        raise UnsupportedMatrixClass(
            f"matrix class {flags.class_name} is not supported",
            offset=header.offset,
            expected="struct, char or numeric class",
            actual=int(flags.matrix_class),
        )

    field_name = _attribute_field(context, header.offset)
    dims = _read_dimensions(buffer, context)
    name = _read_name(buffer, context)
    if name:
        context.array_name = name

    matrix: Matrix
    if flags.matrix_class == MatrixClass.STRUCT:
        matrix = _read_struct(
            buffer, context, name, dims, flags, field_name, header, size_at_entry
        )
    elif flags.matrix_class == MatrixClass.CHAR:
        matrix = _read_char(buffer, context, name, dims, flags, field_name)
    else:
        matrix = _read_numeric(buffer, context, name, dims, flags, field_name)

    _check_extent(buffer, header, size_at_entry)
    if context.trace is not None:
        context.trace(
            "matrix",
            offset=header.offset,
            name=name,
            field=field_name,
            path=".".join(context.path + ((field_name,) if field_name else ())),
            matrix_class=flags.class_name,
            dims=list(dims),
        )
    return matrix


def _attribute_field(context: DecodeContext, offset: int) -> Optional[str]:
    if context.walker is None:
        return None
    return context.walker.next_field_name(offset)


def _expect_header(
    buffer: ByteBuffer,
    context: DecodeContext,
    allowed: Sequence[DataType],
    what: str,
) -> ElementHeader:
    header = read_element_header(buffer, context.options, context.trace)
    if header.data_type not in allowed:
        raise UnexpectedDataType(
            f"{what} has type {header.type_name}",
            offset=header.offset,
            expected=[data_type_name(item) for item in allowed],
            actual=header.type_name,
        )
    return header


def _read_array_flags(buffer: ByteBuffer, context: DecodeContext) -> ArrayFlags:
    header = _expect_header(buffer, context, (DataType.UINT32,), "array flags")
    if header.byte_length != ARRAY_FLAGS_LENGTH:
        raise InvalidLength(
            "array flags subelement must be 8 bytes",
            offset=header.offset,
            expected=ARRAY_FLAGS_LENGTH,
            actual=header.byte_length,
        )
    word = buffer.read_uint32()
    max_nonzero = buffer.read_uint32()
    return ArrayFlags(
        matrix_class=resolve_matrix_class(word & 0xFF),
        flags=(word >> 8) & 0xFF,
        max_nonzero=max_nonzero,
    )


def _read_dimensions(buffer: ByteBuffer, context: DecodeContext) -> tuple[int, ...]:
    header = _expect_header(buffer, context, (DataType.INT32,), "dimensions")
    if header.byte_length % 4:
        raise InvalidLength(
            "dimensions subelement must hold whole int32 values",
            offset=header.offset,
            expected="multiple of 4",
            actual=header.byte_length,
        )
    dims = tuple(int(value) for value in buffer.read_array("i", header.byte_length // 4))
    for extent in dims:
        if extent < 0:
            raise InvalidLength(
                "dimensions must not be negative",
                offset=header.offset,
                expected=">= 0",
                actual=extent,
            )
    return dims


def _read_name(buffer: ByteBuffer, context: DecodeContext) -> str:
    header = _expect_header(buffer, context, _NAME_TYPES, "array name")
    if header.byte_length == 0:
        return ""
    raw = buffer.read_bytes(header.byte_length)
    return raw.rstrip(b"\x00").decode("utf-8", errors="replace")


def _read_struct(
    buffer: ByteBuffer,
    context: DecodeContext,
    name: str,
    dims: tuple[int, ...],
    flags: ArrayFlags,
    field_name: Optional[str],
    header: ElementHeader,
    size_at_entry: int,
) -> StructMatrix:
    length_header = _expect_header(
        buffer, context, (DataType.INT32,), "field name length"
    )
    if length_header.byte_length != 4:
        raise InvalidLength(
            "field name length must be a single int32",
            offset=length_header.offset,
            expected=4,
            actual=length_header.byte_length,
        )
    name_length = buffer.read_int32()
    if name_length <= 0:
        raise InvalidLength(
            "field name length must be positive",
            offset=length_header.offset,
            expected="> 0",
            actual=name_length,
        )

    names_header = _expect_header(buffer, context, _NAME_TYPES, "field names")
    if names_header.byte_length % name_length:
        raise InvalidLength(
            "field names blob is not a multiple of the field name length",
            offset=names_header.offset,
            expected=f"multiple of {name_length}",
            actual=names_header.byte_length,
        )
    blob = buffer.read_bytes(names_header.byte_length)
    field_names = tuple(
        blob[start : start + name_length].rstrip(b"\x00").decode("utf-8", errors="replace")
        for start in range(0, len(blob), name_length)
    )

    # a fieldless struct holds no nested matrices whatever its dims
    element_count = math.prod(dims) if dims and field_names else 0
    walker = StructFieldWalker(field_names, element_count)
    child = context.enter_struct(walker, name or field_name or context.array_name)
    elements: list[tuple[Matrix, ...]] = []
    for index in range(element_count):
        if index:
            walker.next_element()
        values = []
        for _ in field_names:
            values.append(_read_nested(buffer, child))
        elements.append(tuple(values))

    # anything left inside the struct's extent is a surplus field matrix;
    # the end moves when a nested element was inflated
    end = header.end_offset + len(buffer) - size_at_entry
    if buffer.align() < end:
        _read_nested(buffer, child)

    return StructMatrix(
        name=name,
        dims=dims,
        flags=flags,
        field_names=field_names,
        elements=tuple(elements),
        field_name=field_name,
    )


def _read_nested(buffer: ByteBuffer, context: DecodeContext) -> Matrix:
    header = _expect_header(buffer, context, (DataType.MATRIX,), "struct field")
    return decode_matrix(buffer, header, context)


def _read_char(
    buffer: ByteBuffer,
    context: DecodeContext,
    name: str,
    dims: tuple[int, ...],
    flags: ArrayFlags,
    field_name: Optional[str],
) -> CharMatrix:
    allowed: tuple[DataType, ...] = tuple(sorted(TEXT_TYPES))
    if context.options.legacy_char_types:
        allowed += _LEGACY_CHAR_TYPES
    header = _expect_header(buffer, context, allowed, "char data")
    raw = buffer.read_bytes(header.byte_length)
    encoding = _text_encoding(header.data_type, buffer.byte_order)
    try:
        text = raw.decode(encoding)
    except UnicodeDecodeError as exc:
        raise UnexpectedDataType(
            f"char data is not valid {encoding}",
            offset=header.offset,
            expected=encoding,
            actual=exc.reason,
        ) from exc
    return CharMatrix(
        name=name,
        dims=dims,
        flags=flags,
        text=text,
        data_type=header.data_type,
        field_name=field_name,
    )


def _text_encoding(data_type: DataType | int, byte_order: str) -> str:
    suffix = "le" if byte_order == "<" else "be"
    if data_type == DataType.UTF8:
        return "utf-8"
    if data_type in (DataType.UTF16, DataType.UINT16):
        return f"utf-16-{suffix}"
    if data_type == DataType.UTF32:
        return f"utf-32-{suffix}"
    return "latin-1"


def _read_numeric(
    buffer: ByteBuffer,
    context: DecodeContext,
    name: str,
    dims: tuple[int, ...],
    flags: ArrayFlags,
    field_name: Optional[str],
) -> NumericMatrix:
    real_type, real = _read_numeric_part(buffer, context, "real part")
    imag_type: Optional[DataType | int] = None
    imag: Optional[bytes] = None
    if flags.is_complex:
        imag_type, imag = _read_numeric_part(buffer, context, "imaginary part")
    return NumericMatrix(
        name=name,
        dims=dims,
        flags=flags,
        data_type=real_type,
        data=real,
        byte_order=buffer.byte_order,
        imaginary=imag,
        imaginary_type=imag_type,
        field_name=field_name,
    )


def _read_numeric_part(
    buffer: ByteBuffer, context: DecodeContext, what: str
) -> tuple[DataType | int, bytes]:
    header = read_element_header(buffer, context.options, context.trace)
    size = element_size(header.data_type)
    if size == 0:
        raise UnexpectedDataType(
            f"{what} has non-numeric type {header.type_name}",
            offset=header.offset,
            expected="numeric data type",
            actual=header.type_name,
        )
    if header.byte_length % size:
        raise InvalidLength(
            f"{what} length is not a multiple of {header.type_name} size",
            offset=header.offset,
            expected=f"multiple of {size}",
            actual=header.byte_length,
        )
    return header.data_type, buffer.read_bytes(header.byte_length)


def _check_extent(buffer: ByteBuffer, header: ElementHeader, size_at_entry: int) -> None:
    end = header.end_offset + len(buffer) - size_at_entry
    consumed = _round_up(buffer.cursor)
    if consumed != _round_up(end):
        raise InvalidLength(
            "matrix contents do not match the matrix element length",
            offset=header.offset,
            expected=header.byte_length,
            actual=buffer.cursor - header.payload_offset,
        )


def _round_up(offset: int) -> int:
    return (offset + ELEMENT_ALIGNMENT - 1) & ~(ELEMENT_ALIGNMENT - 1)


__all__ = [
    "ARRAY_FLAGS_LENGTH",
    "ArrayFlags",
    "CharMatrix",
    "DecodeContext",
    "EmptyMatrix",
    "Matrix",
    "NumericMatrix",
    "StructFieldWalker",
    "StructMatrix",
    "decode_matrix",
]
