"""Workspace discovery.

Reads workspace member globs from the root manifests, expands them, and
collects a PackageInfo for every member that declares a name. Members are
returned in sorted glob order, which is the order strategies process them
in.
"""

from __future__ import annotations

import glob
import json
from pathlib import Path

from .errors import ManifestError
from .manifests import CARGO_TOML, PACKAGE_JSON, PYPROJECT_TOML, manifest_paths, read_manifest
from .models import PackageInfo, Workspace
from .shell import log
from .toml import get_workspace_member_globs, load_toml
from .versions import coerce_version


def _package_json_member_globs(path: Path) -> list[str]:
    """Extract "workspaces" from package.json (list or {packages: [...]})."""
    try:
        data = json.loads(path.read_text())
    except (OSError, ValueError) as e:
        raise ManifestError(f"Could not read {path}: {e}") from e
    workspaces = data.get("workspaces") if isinstance(data, dict) else None
    if isinstance(workspaces, dict):
        workspaces = workspaces.get("packages")
    return [str(w) for w in workspaces] if isinstance(workspaces, list) else []


def get_member_globs(root: Path) -> list[str]:
    """Collect workspace member globs from every root manifest."""
    globs: list[str] = []
    if (root / PACKAGE_JSON).is_file():
        globs.extend(_package_json_member_globs(root / PACKAGE_JSON))
    for name in (PYPROJECT_TOML, CARGO_TOML):
        if (root / name).is_file():
            globs.extend(get_workspace_member_globs(load_toml(root / name)))
    # De-duplicate while keeping declaration order
    return list(dict.fromkeys(globs))


def _package_info(directory: Path) -> PackageInfo | None:
    """Build a PackageInfo from the first manifest that declares a name."""
    name: str | None = None
    version: str | None = None
    for path in manifest_paths(directory):
        manifest_name, manifest_version = read_manifest(path)
        name = name or manifest_name
        version = version or manifest_version
    if not name:
        return None
    return PackageInfo(
        name=name, path=directory, version=coerce_version(version or "0.0.0")
    )


def discover_workspace(root: Path | None = None) -> Workspace:
    """Scan the workspace and discover all packages.

    A root that declares no workspace members is treated as a single-package
    workspace containing only the root package.

    Args:
        root: Workspace root. Defaults to the current directory.

    Returns:
        The discovered workspace.
    """
    root = (root or Path.cwd()).resolve()
    member_globs = get_member_globs(root)

    if not member_globs:
        root_pkg = _package_info(root)
        return Workspace(root=root, packages=[root_pkg] if root_pkg else [])

    # Expand globs to find all package directories
    member_dirs: list[Path] = []
    for pattern in member_globs:
        if pattern.startswith("!"):
            continue
        for match in sorted(glob.glob(str(root / pattern))):
            p = Path(match)
            if p.is_dir() and manifest_paths(p) and p not in member_dirs:
                member_dirs.append(p)

    excluded = {
        Path(match)
        for pattern in member_globs
        if pattern.startswith("!")
        for match in glob.glob(str(root / pattern[1:]))
    }

    packages: list[PackageInfo] = []
    for d in member_dirs:
        if d in excluded:
            continue
        info = _package_info(d)
        if info is None:
            log(f"Skipping {d.relative_to(root)}: no package name in its manifest", "warning")
            continue
        packages.append(info)

    if not packages:
        log("No packages found matching workspace members", "warning")
    return Workspace(root=root, packages=packages)
