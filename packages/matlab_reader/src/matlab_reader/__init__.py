"""Public exports for the matlab_reader package."""

from importlib.metadata import PackageNotFoundError, version

from .config import DecoderOptions, OptionsError, load_options
from .errors import (
    DecompressionFailed,
    FieldIndexExceeded,
    InvalidFileHeader,
    InvalidLength,
    MatDecodeError,
    MisalignedElement,
    NestingTooDeep,
    OutOfBounds,
    UnexpectedDataType,
    UnsupportedMatrixClass,
)
from .matrix import (
    ArrayFlags,
    CharMatrix,
    EmptyMatrix,
    Matrix,
    NumericMatrix,
    StructMatrix,
)
from .reader import FileHeader, MatFile, iter_matrices, load_mat
from .tags import DataType, MatrixClass

try:
    __version__ = version("matlab-reader")
except PackageNotFoundError:  # pragma: no cover - fallback when not installed
    __version__ = "0.0.0"

__all__ = [
    "ArrayFlags",
    "CharMatrix",
    "DataType",
    "DecoderOptions",
    "DecompressionFailed",
    "EmptyMatrix",
    "FieldIndexExceeded",
    "FileHeader",
    "InvalidFileHeader",
    "InvalidLength",
    "MatDecodeError",
    "MatFile",
    "Matrix",
    "MatrixClass",
    "MisalignedElement",
    "NestingTooDeep",
    "NumericMatrix",
    "OptionsError",
    "OutOfBounds",
    "StructMatrix",
    "UnexpectedDataType",
    "UnsupportedMatrixClass",
    "__version__",
    "iter_matrices",
    "load_mat",
    "load_options",
]
