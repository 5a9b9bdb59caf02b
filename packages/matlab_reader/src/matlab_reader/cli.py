"""Command-line interface for the matlab-reader package."""

from __future__ import annotations

import hashlib
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import click

from .config import DEFAULT_OPTIONS, DecoderOptions, OptionsError, load_options
from .convert import struct_field_labels
from .errors import MatDecodeError
from .matrix import CharMatrix, EmptyMatrix, Matrix, NumericMatrix, StructMatrix
from .reader import MatFile


def _json_log(event: str, **payload: Any) -> None:
    message = {
        "timestamp": datetime.now(tz=timezone.utc).isoformat().replace("+00:00", "Z"),
        "component": "matlab-reader",
        "event": event,
        **payload,
    }
    click.echo(json.dumps(message, default=str))


@click.group()
def cli() -> None:
    """Entry point for the matlab-reader tool."""


@cli.command()
@click.argument("mat_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--options",
    "options_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="JSON file with decoder options",
)
@click.option("--verbose", is_flag=True, help="Log every element header and inflation")
@click.option(
    "--decompressed-out",
    "decompressed_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the buffer with compressed elements inflated to this path",
)
def inspect(
    mat_path: Path,
    options_path: Path | None,
    verbose: bool,
    decompressed_path: Path | None,
) -> None:
    """Decode a MAT-file and log a summary of every top-level matrix."""

    mat_sha = _sha256_file(mat_path)
    _json_log("start", command="inspect", input=str(mat_path), input_sha256=mat_sha)

    options = _resolve_options(options_path, command="inspect", mat_path=mat_path)
    trace = _trace_logger("inspect") if verbose else None
    mat = _decode(mat_path, options, trace, command="inspect")

    _json_log(
        "header",
        command="inspect",
        text=mat.header.text,
        version=mat.header.version,
        endian=mat.header.endian.decode("latin-1"),
        subsystem_offset=mat.header.subsystem_offset,
    )
    for matrix in mat:
        _json_log("matrix", command="inspect", **describe_matrix(matrix))

    if decompressed_path is not None:
        mat.save(decompressed_path)

    _json_log(
        "complete",
        command="inspect",
        input=str(mat_path),
        input_sha256=mat_sha,
        matrices=len(mat),
        buffer_bytes=len(mat.buffer),
        decompressed_out=str(decompressed_path) if decompressed_path else None,
    )


@cli.command()
@click.argument("mat_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--filter-2d", "filter_2d", is_flag=True, help="Only list 2-D non-vector fields")
@click.option(
    "--options",
    "options_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="JSON file with decoder options",
)
def fields(mat_path: Path, filter_2d: bool, options_path: Path | None) -> None:
    """List ``array.field`` labels of every top-level struct."""

    options = _resolve_options(options_path, command="fields", mat_path=mat_path)
    mat = _decode(mat_path, options, None, command="fields")
    count = 0
    for matrix in mat:
        if not isinstance(matrix, StructMatrix):
            continue
        for label in struct_field_labels(matrix, filter_2d=filter_2d):
            _json_log("field", command="fields", label=label)
            count += 1
    _json_log("complete", command="fields", input=str(mat_path), fields=count)


def describe_matrix(matrix: Matrix) -> dict[str, Any]:
    """Summarise a decoded matrix as a JSON-friendly mapping."""

    summary: dict[str, Any] = {
        "name": matrix.name,
        "field": matrix.field_name,
        "dims": list(matrix.dims),
    }
    if isinstance(matrix, NumericMatrix):
        summary.update(
            kind="numeric",
            matrix_class=matrix.flags.class_name,
            data_type=int(matrix.data_type),
            payload_bytes=len(matrix.data),
            complex=matrix.flags.is_complex,
        )
    elif isinstance(matrix, CharMatrix):
        summary.update(kind="char", matrix_class=matrix.flags.class_name, text=matrix.text)
    elif isinstance(matrix, StructMatrix):
        summary.update(
            kind="struct",
            matrix_class=matrix.flags.class_name,
            field_names=list(matrix.field_names),
            elements=[
                [describe_matrix(value) for value in values] for values in matrix.elements
            ],
        )
    elif isinstance(matrix, EmptyMatrix):
        summary.update(kind="empty")
    return summary


def _resolve_options(
    options_path: Path | None, *, command: str, mat_path: Path
) -> DecoderOptions:
    if options_path is None:
        return DEFAULT_OPTIONS
    try:
        return load_options(options_path)
    except OptionsError as exc:
        _json_log(
            "error",
            command=command,
            input=str(mat_path),
            options=str(options_path),
            kind="options_error",
            message=str(exc),
        )
        raise click.ClickException(str(exc)) from exc


def _decode(
    mat_path: Path, options: DecoderOptions, trace: Any, *, command: str
) -> MatFile:
    try:
        return MatFile.load(mat_path, options, trace)
    except MatDecodeError as exc:
        _json_log("error", command=command, input=str(mat_path), **exc.to_payload())
        raise click.ClickException(str(exc)) from exc


def _trace_logger(command: str) -> Any:
    def _trace(event: str, **payload: Any) -> None:
        _json_log(event, command=command, **payload)

    return _trace


def _sha256_file(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as fp:
        for chunk in iter(lambda: fp.read(8192), b""):
            digest.update(chunk)
    return digest.hexdigest()


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    cli()
