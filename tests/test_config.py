"""Tests for machindex configuration."""

import tomllib
from pathlib import Path

import pytest

from machindex.config import (
    IndexConfig,
    MachindexConfig,
    get_config_path,
    load_config,
    write_config_template,
)
from machindex.errors import InvalidConfig


def test_defaults_without_config_file(tmp_path: Path):
    """Missing config.toml yields defaults."""
    config = load_config(tmp_path)
    assert config == MachindexConfig()
    assert config.index.indent is None
    assert config.index.sort_keys is False


def test_load_config_values(tmp_path: Path):
    """Values from config.toml override defaults."""
    get_config_path(tmp_path).write_text("[index]\nindent = 2\nsort_keys = true\n")
    config = load_config(tmp_path)
    assert config.index == IndexConfig(indent=2, sort_keys=True)


def test_negative_indent_rejected(tmp_path: Path):
    """Invalid values fail validation with a typed error naming the field."""
    get_config_path(tmp_path).write_text("[index]\nindent = -1\n")
    with pytest.raises(InvalidConfig, match="index.indent") as exc_info:
        load_config(tmp_path)
    assert exc_info.value.path == get_config_path(tmp_path)


def test_malformed_toml_rejected(tmp_path: Path):
    """Unparsable TOML fails with a typed error, not a decoder exception."""
    get_config_path(tmp_path).write_text("index = [")
    with pytest.raises(InvalidConfig) as exc_info:
        load_config(tmp_path)
    assert isinstance(exc_info.value.__cause__, tomllib.TOMLDecodeError)
    assert str(get_config_path(tmp_path)) in str(exc_info.value)


def test_write_config_template(tmp_path: Path):
    """Template is valid TOML that loads back."""
    path = write_config_template(tmp_path)
    assert path == tmp_path / "config.toml"
    with open(path, "rb") as f:
        data = tomllib.load(f)
    assert data["index"]["sort_keys"] is False
    assert load_config(tmp_path) == MachindexConfig()
