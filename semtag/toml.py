"""TOML reading and writing utilities.

Uses tomlkit to preserve formatting and comments when modifying
pyproject.toml and Cargo.toml files. This is important for keeping release
commits readable and diff-friendly.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomlkit
from packaging.utils import canonicalize_name


def load_toml(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a TOML file.

    Returns a TOMLDocument that preserves formatting when modified and saved.
    """
    return tomlkit.parse(path.read_text())


def save_toml(path: Path, doc: tomlkit.TOMLDocument) -> None:
    """Save a TOMLDocument back to disk, preserving original formatting."""
    path.write_text(tomlkit.dumps(doc))


def get_table(doc: Any, *keys: str) -> Any:
    """Walk nested tables, returning an empty dict when any level is missing."""
    node = doc
    for key in keys:
        if not hasattr(node, "get"):
            return {}
        node = node.get(key, {})
    return node


def get_pyproject_name(doc: tomlkit.TOMLDocument) -> str | None:
    """Extract the canonical package name from [project] or [tool.poetry].

    Names are normalized per PEP 503 (lowercase, hyphens instead of
    underscores) for consistent comparison.
    """
    name = get_table(doc, "project").get("name") or get_table(
        doc, "tool", "poetry"
    ).get("name")
    return canonicalize_name(str(name)) if name else None


def get_pyproject_version(doc: tomlkit.TOMLDocument) -> str | None:
    """Extract version from [project].version, then [tool.poetry].version."""
    version = get_table(doc, "project").get("version") or get_table(
        doc, "tool", "poetry"
    ).get("version")
    return str(version) if version else None


def get_cargo_name(doc: tomlkit.TOMLDocument) -> str | None:
    name = get_table(doc, "package").get("name")
    return str(name) if name else None


def get_cargo_version(doc: tomlkit.TOMLDocument) -> str | None:
    version = get_table(doc, "package").get("version")
    # Workspace-inherited versions look like {workspace = true}
    return version if isinstance(version, str) and version else None


def get_workspace_member_globs(doc: tomlkit.TOMLDocument) -> list[str]:
    """Extract workspace member glob patterns.

    Reads [tool.uv.workspace].members for pyproject.toml files and
    [workspace].members for Cargo.toml files. These patterns
    (e.g., "packages/*", "crates/*") define which directories contain
    workspace packages.
    """
    members = get_table(doc, "tool", "uv", "workspace").get("members") or get_table(
        doc, "workspace"
    ).get("members")
    return [str(m) for m in members] if members else []
