"""Shared test fixtures for machindex tests."""

import json
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from machindex.core import MachineIndex


@pytest.fixture
def runner() -> CliRunner:
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Create an empty data directory."""
    d = tmp_path / "data"
    d.mkdir()
    return d


@pytest.fixture
def index(data_dir: Path) -> Generator[MachineIndex, None, None]:
    """Open a machine index on the data directory.

    Any machine still checked out is released on teardown.
    """
    idx = MachineIndex(data_dir)
    try:
        yield idx
    finally:
        idx.close()


@pytest.fixture
def write_index(data_dir: Path) -> Callable[[Any], Path]:
    """Return a helper writing raw content to <data_dir>/index.

    Dicts are dumped as JSON, strings are written as-is.
    """

    def _write(content: Any) -> Path:
        path = data_dir / "index"
        if isinstance(content, str):
            path.write_text(content)
        else:
            path.write_text(json.dumps(content))
        return path

    return _write


@pytest.fixture
def sample_index() -> dict[str, Any]:
    """Return an index document with two machines."""
    return {
        "version": 1,
        "machines": {
            "aaaa": {
                "name": "web",
                "provider": "docker",
                "data_path": "/home/user/project/.vagrant/machines/web/docker",
                "vagrantfile_path": "/home/user/project",
                "state": "running",
                "updated_at": "2014-03-02 11:11:44 +0100",
            },
            "bbbb": {
                "name": "db",
                "provider": "virtualbox",
                "vagrantfile_path": "/home/user/other",
                "state": "poweroff",
                "updated_at": "2014-03-02 11:12:00 +0100",
            },
        },
    }
