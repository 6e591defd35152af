"""Configuration management for machindex."""

import tomllib
from pathlib import Path

import tomli_w
from pydantic import BaseModel, Field, ValidationError

from .constants import CONFIG_FILE
from .errors import InvalidConfig


class IndexConfig(BaseModel):
    """Formatting of the index file."""

    indent: int | None = Field(
        default=None, ge=0, description="JSON indentation (None writes compact JSON)"
    )
    sort_keys: bool = Field(default=False, description="Sort keys when writing the index")


class MachindexConfig(BaseModel):
    """Root configuration stored in <data_dir>/config.toml."""

    index: IndexConfig = Field(default_factory=IndexConfig)


def get_config_path(data_dir: Path) -> Path:
    """Get path to the config file of a data directory."""
    return data_dir / CONFIG_FILE


def load_config(data_dir: Path) -> MachindexConfig:
    """Load config from <data_dir>/config.toml.

    Args:
        data_dir: Path to the machine index data directory

    Returns:
        Loaded configuration, or defaults if config.toml doesn't exist

    Raises:
        InvalidConfig: If config.toml is not valid TOML or fails validation
    """
    config_path = get_config_path(data_dir)
    if not config_path.exists():
        return MachindexConfig()
    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
        return MachindexConfig.model_validate(data)
    except tomllib.TOMLDecodeError as e:
        raise InvalidConfig(config_path, str(e)) from e
    except ValidationError as e:
        reason = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise InvalidConfig(config_path, reason) from e


def write_config_template(data_dir: Path) -> Path:
    """Write default config.toml template.

    Args:
        data_dir: Path to the machine index data directory

    Returns:
        Path to the written config file
    """
    config_path = get_config_path(data_dir)
    # TOML has no null, so indent is left out to keep compact output
    template = {
        "index": {"sort_keys": False},
    }
    with open(config_path, "wb") as f:
        tomli_w.dump(template, f)
    return config_path
