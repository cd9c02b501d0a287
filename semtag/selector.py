"""Choosing which workspace packages a run applies to."""

from __future__ import annotations

from fnmatch import fnmatchcase
from pathlib import Path

from .models import PackageInfo
from .shell import log


def matches_package_target(package_name: str, target: str) -> bool:
    """Check a package name against one target.

    Targets are tried from most to least specific:
    - exact name: "@acme/ui"
    - scope wildcard: "@acme/*" matches every package in the scope
    - prefix wildcard: "tools/*" matches "tools/lint", "tools/fmt/core"
    - global wildcard: "*"
    - any other glob: "ui-*"
    """
    if package_name == target:
        return True
    if target == "*":
        return True
    if target.endswith("/*") and not any(c in target[:-2] for c in "*?["):
        return package_name.startswith(target[:-1])
    return fnmatchcase(package_name, target)


def _relative_dir(package: PackageInfo, root: Path | None) -> str | None:
    if root is None:
        return None
    try:
        relative = package.path.resolve().relative_to(root.resolve())
    except ValueError:
        return None
    return relative.as_posix() or "."


def matches_directory_target(package: PackageInfo, target: str, root: Path | None) -> bool:
    """Check a package's directory (relative to the workspace root) against a glob."""
    relative = _relative_dir(package, root)
    if relative is None:
        return False
    normalized = target.rstrip("/") or "."
    if normalized.startswith("./") and len(normalized) > 2:
        normalized = normalized[2:]
    return relative == normalized or fnmatchcase(relative, normalized)


def select_packages(
    packages: list[PackageInfo],
    targets: list[str] | None = None,
    skip: list[str] | None = None,
    root: Path | None = None,
) -> list[PackageInfo]:
    """Filter packages down to the ones a run should process.

    Args:
        packages: Workspace packages in processing order.
        targets: Name or directory patterns. Empty means every package.
        skip: Names (or name patterns) to exclude. Exclusion is applied last
            and wins over any target match.
        root: Workspace root for directory-based targets.

    Returns:
        The selected packages, in their original order.
    """
    targets = [t.strip() for t in targets or [] if t.strip()]
    skip = list(skip or [])

    if targets:
        selected = [
            pkg
            for pkg in packages
            if any(
                matches_package_target(pkg.name, t) or matches_directory_target(pkg, t, root)
                for t in targets
            )
        ]
        if not selected:
            log(f"No packages matched targets: {', '.join(targets)}", "warning")
    else:
        selected = list(packages)

    kept = []
    for pkg in selected:
        if any(matches_package_target(pkg.name, s) for s in skip):
            log(f"Skipping {pkg.name} (in skip list)")
            continue
        kept.append(pkg)
    return kept
