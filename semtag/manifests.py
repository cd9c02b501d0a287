"""Reading and writing versions in package manifests.

A package directory may hold several manifests. They are consulted in a
fixed priority order (package.json, pyproject.toml, Cargo.toml) and the
first one that declares a version wins. When writing, every manifest present
in the directory receives the new version.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, cast

from .errors import ManifestError
from .models import ManifestVersion
from .shell import log
from .toml import (
    get_cargo_name,
    get_cargo_version,
    get_pyproject_name,
    get_pyproject_version,
    get_table,
    load_toml,
    save_toml,
)

PACKAGE_JSON = "package.json"
PYPROJECT_TOML = "pyproject.toml"
CARGO_TOML = "Cargo.toml"

MANIFEST_FILES = (PACKAGE_JSON, PYPROJECT_TOML, CARGO_TOML)


def manifest_paths(directory: Path) -> list[Path]:
    """Return every manifest present in a directory, in priority order."""
    return [directory / name for name in MANIFEST_FILES if (directory / name).is_file()]


def _read_package_json(path: Path) -> dict[str, Any]:
    data = json.loads(path.read_text())
    if not isinstance(data, dict):
        raise ValueError("top-level value is not an object")
    return data


def read_manifest(path: Path) -> tuple[str | None, str | None]:
    """Read (name, version) from a single manifest.

    Raises:
        ManifestError: If the file can't be parsed.
    """
    try:
        if path.name == PACKAGE_JSON:
            data = _read_package_json(path)
            name, version = data.get("name"), data.get("version")
            return (str(name) if name else None, str(version) if version else None)
        doc = load_toml(path)
    except (OSError, ValueError) as e:
        raise ManifestError(f"Could not read {path}: {e}") from e

    if path.name == CARGO_TOML:
        return get_cargo_name(doc), get_cargo_version(doc)
    return get_pyproject_name(doc), get_pyproject_version(doc)


def get_version(directory: Path) -> ManifestVersion | None:
    """Find the declared version of the package in ``directory``.

    Unreadable manifests are reported and skipped rather than aborting the
    lookup.

    Returns:
        The first manifest version found, or None if no manifest in the
        directory declares one.
    """
    for path in manifest_paths(directory):
        try:
            _, version = read_manifest(path)
        except ManifestError as e:
            log(e.message, "warning")
            continue
        if version:
            return ManifestVersion(version=version, path=path, kind=path.name)
    return None


def set_version(path: Path, version: str) -> None:
    """Write ``version`` into a manifest file.

    JSON manifests are rewritten with two-space indentation; TOML manifests
    go through tomlkit so comments and layout survive.

    Raises:
        ManifestError: If the file can't be read or has no version field.
    """
    try:
        if path.name == PACKAGE_JSON:
            data = _read_package_json(path)
            data["version"] = version
            path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n")
            return

        doc = load_toml(path)
        if path.name == CARGO_TOML:
            table = get_table(doc, "package")
        elif "version" in get_table(doc, "project"):
            table = get_table(doc, "project")
        else:
            table = get_table(doc, "tool", "poetry")

        if "version" not in table:
            raise ManifestError(
                f"No version field to update in {path}",
                suggestions=[
                    "Declare a static version in the manifest",
                    "Add the package to the skip list if its version is managed elsewhere",
                ],
            )
        cast(dict[str, Any], table)["version"] = version
        save_toml(path, doc)
    except (OSError, ValueError) as e:
        raise ManifestError(f"Could not update {path}: {e}") from e
