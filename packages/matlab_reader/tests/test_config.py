"""Tests for decoder options and their JSON loader."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from matlab_reader.config import (
    DEFAULT_OPTIONS,
    DecoderOptions,
    OptionsError,
    load_options,
    options_from_mapping,
)


def test_defaults() -> None:
    assert DEFAULT_OPTIONS.max_depth == 64
    assert DEFAULT_OPTIONS.inflate_ratio == 20
    assert DEFAULT_OPTIONS.inflate_attempts == 4
    assert DEFAULT_OPTIONS.legacy_char_types is False


def test_load_options_from_json(tmp_path: Path) -> None:
    path = tmp_path / "options.json"
    path.write_text(json.dumps({"max_depth": 3, "legacy_char_types": True}), encoding="utf-8")

    options = load_options(path)

    assert options == DecoderOptions(max_depth=3, legacy_char_types=True)


def test_unknown_keys_are_rejected() -> None:
    with pytest.raises(OptionsError) as excinfo:
        options_from_mapping({"max_depth": 2, "verbose": True})
    assert "verbose" in str(excinfo.value)


@pytest.mark.parametrize(
    "payload",
    [
        {"max_depth": 0},
        {"inflate_ratio": -1},
        {"inflate_attempts": "3"},
        {"inflate_attempts": True},
        {"legacy_char_types": "yes"},
    ],
)
def test_invalid_values_are_rejected(payload: dict[str, object]) -> None:
    with pytest.raises(OptionsError):
        options_from_mapping(payload)


def test_invalid_json_is_reported(tmp_path: Path) -> None:
    path = tmp_path / "options.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(OptionsError):
        load_options(path)


def test_non_object_json_is_reported(tmp_path: Path) -> None:
    path = tmp_path / "options.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(OptionsError):
        load_options(path)
