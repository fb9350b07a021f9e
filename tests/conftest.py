"""Pytest configuration and fixtures for TypeGraph CLI tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def sample_workspace_path() -> Path:
    """Workspace with a generated .tactica/types.ts."""
    return Path(__file__).parent / "fixtures" / "sample_workspace"


@pytest.fixture
def define_workspace_path() -> Path:
    """Workspace without generated declarations, only define() calls in src/."""
    return Path(__file__).parent / "fixtures" / "define_workspace"


@pytest.fixture
def temp_config_file(temp_dir: Path, monkeypatch) -> Path:
    """Point the CLI's config file at a temporary location."""
    config_file = temp_dir / "home" / "config.toml"
    monkeypatch.setattr("typegraph_cli.config.CONFIG_FILE", config_file)
    return config_file


@pytest.fixture
def simple_declarations() -> str:
    """Two declarations, B extending A."""
    return '''export type A = {
    x: string;
    y?: number;
};

export type B = A & {
    z: boolean;
};
'''


@pytest.fixture
def nested_object_declaration() -> str:
    """A declaration whose field type is an inline object literal."""
    return '''export type ConfigInstance = {
    name: string;
    options: {
        verbose: boolean;
        depth?: number;
    };
    enabled: boolean;
};

export type After = ConfigInstance & {
    extra: string;
};
'''
