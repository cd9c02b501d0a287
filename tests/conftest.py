"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest
import tomlkit
from manifest_files import write_package_json

from semtag.config import Config
from semtag.models import PackageInfo, Workspace


@pytest.fixture
def tmp_pyproject(tmp_path: Path) -> Path:
    """Create a temporary pyproject.toml file."""
    content = """\
# Release metadata
[project]
name = "test_package"
version = "1.0.0"  # bumped by semtag
dependencies = ["requests>=2.0"]
"""
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text(content)
    return pyproject


@pytest.fixture
def sample_toml_doc() -> tomlkit.TOMLDocument:
    """Create a sample TOML document."""
    content = """\
[project]
name = "My_Package"
version = "2.0.0"

[tool.uv.workspace]
members = ["packages/*", "libs/*"]
"""
    return tomlkit.parse(content)


@pytest.fixture
def workspace(tmp_path: Path) -> Workspace:
    """A three-package npm-style workspace: a, b, c."""
    write_package_json(tmp_path, "root", "1.0.0", workspaces=["packages/*"])
    packages = []
    for name in ("a", "b", "c"):
        path = tmp_path / "packages" / name
        write_package_json(path, name, "1.0.0")
        packages.append(PackageInfo(name=name, path=path, version="1.0.0"))
    return Workspace(root=tmp_path, packages=packages)


@pytest.fixture
def config() -> Config:
    return Config()
