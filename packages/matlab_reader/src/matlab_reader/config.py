"""Decoder options and their JSON loader."""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping


@dataclass(frozen=True)
class DecoderOptions:
    """Tunables for a decoding pass.

    - max_depth: deepest struct nesting accepted before ``NestingTooDeep``.
    - inflate_ratio: initial output cap for inflation, as a multiple of the
      compressed payload size.
    - inflate_attempts: how many times the output cap may be doubled.
    - legacy_char_types: accept ``miUINT8``/``miUINT16`` char payloads in
      addition to the UTF tags.
    """

    max_depth: int = 64
    inflate_ratio: int = 20
    inflate_attempts: int = 4
    legacy_char_types: bool = False

    def __post_init__(self) -> None:
        for name in ("max_depth", "inflate_ratio", "inflate_attempts"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise OptionsError(f"{name} must be a positive integer; got {value!r}")
        if not isinstance(self.legacy_char_types, bool):
            raise OptionsError(
                f"legacy_char_types must be a boolean; got {self.legacy_char_types!r}"
            )


class OptionsError(ValueError):
    """Raised when decoder options are invalid."""


DEFAULT_OPTIONS = DecoderOptions()


def options_from_mapping(data: Mapping[str, Any]) -> DecoderOptions:
    known = {item.name for item in fields(DecoderOptions)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise OptionsError("unknown decoder options: " + ", ".join(unknown))
    return DecoderOptions(**dict(data))


def load_options(path: Path) -> DecoderOptions:
    """Load decoder options from a JSON object file."""

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise OptionsError(f"{path.name} is not valid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise OptionsError(f"{path.name} must contain a JSON object")
    return options_from_mapping(data)


__all__ = [
    "DEFAULT_OPTIONS",
    "DecoderOptions",
    "OptionsError",
    "load_options",
    "options_from_mapping",
]
