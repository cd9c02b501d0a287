"""Release strategies: synced → single → async.

A strategy drives the version calculator over a workspace and turns its
answers into manifest updates, a commit and tags:

- Synced: one version for the whole workspace, one tag, one commit
- Single: exactly one configured package, its own scoped tag
- Async: every selected package versioned independently, one aggregate
  commit and one tag per updated package

Every mutation is split into a compute half (building FileUpdates, tag
names and commit messages into a StrategyResult) and an apply half that
is skipped in dry-run mode.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from .calculator import calculate_version
from .config import Config
from .errors import (
    ConfigError,
    GitOperationError,
    ManifestError,
    PackageNotFoundError,
    VersionCalculationError,
)
from .gitops import commit, create_tag, latest_tag, stage_files
from .manifests import manifest_paths, read_manifest, set_version
from .models import FileUpdate, PackageInfo, StrategyResult, VersionQuery, Workspace
from .selector import select_packages
from .shell import log, step
from .tags import format_tag, package_scope, resolve_tag_pattern, tag_glob
from .templates import format_commit_message, has_placeholders


class StrategyKind(str, Enum):
    SYNCED = "synced"
    SINGLE = "single"
    ASYNC = "async"

    def __str__(self) -> str:
        return self.value


def select_strategy(config: Config, targets: list[str] | None = None) -> StrategyKind:
    """Pick the strategy a run should use.

    The synced flag wins. Otherwise exactly one configured package with no
    command-line targets means Single, and anything else is Async.
    """
    if config.synced:
        return StrategyKind.SYNCED
    if len(config.packages) == 1 and not targets:
        return StrategyKind.SINGLE
    return StrategyKind.ASYNC


def run_strategy(
    kind: StrategyKind,
    config: Config,
    workspace: Workspace,
    targets: list[str] | None = None,
) -> StrategyResult:
    """Run one of the release strategies against a workspace."""
    if kind == StrategyKind.SYNCED:
        return run_synced(config, workspace)
    if kind == StrategyKind.SINGLE:
        return run_single(config, workspace)
    return run_async(config, workspace, targets)


# ---------------------------------------------------------------------------
# Compute helpers
# ---------------------------------------------------------------------------


def plan_updates(package: str, directory: Path, version: str) -> list[FileUpdate]:
    """Every manifest in ``directory`` that declares a version gets one update."""
    updates: list[FileUpdate] = []
    for path in manifest_paths(directory):
        try:
            _, current = read_manifest(path)
        except ManifestError as e:
            log(e.message, "warning")
            continue
        if current:
            updates.append(FileUpdate(package=package, path=path, version=version))
    return updates


def build_query(
    config: Config, latest: str, path: Path, name: str | None = None
) -> VersionQuery:
    return VersionQuery(
        latest_tag=latest,
        release_type=config.force_type,
        path=path,
        name=name,
        tag_prefix=config.tag_prefix,
        branch_pattern=config.branch_pattern,
        base_branch=config.base_branch,
        prerelease_identifier=config.prerelease_identifier,
    )


def _tag_for(config: Config, version: str, package_name: str | None = None) -> str:
    return format_tag(
        version,
        config.tag_prefix,
        package_name,
        tag_template=config.tag_template,
        package_tag_template=config.package_tag_template,
    )


def find_latest_tag(config: Config, package_name: str | None = None) -> str:
    """Latest release tag produced by the configured tag templates."""
    templates = (config.tag_template, config.package_tag_template)
    return latest_tag(
        tag_glob(config.tag_prefix, package_name, *templates),
        resolve_tag_pattern(package_name, config.tag_prefix, *templates),
    )


def async_commit_message(config: Config, released: list[tuple[str, str]]) -> str:
    """Commit message for an Async run.

    A single released package gets the configured template (when it has
    placeholders to fill); otherwise the message lists every package name
    with the first package's version.

    Args:
        config: Run configuration holding the commit message template.
        released: (package name, version) pairs in release order.
    """
    if len(released) == 1 and has_placeholders(config.commit_message):
        name, version = released[0]
        return format_commit_message(
            config.commit_message,
            version,
            package_name=name,
            scope=package_scope(name),
            prefix=config.tag_prefix,
        )
    names = ", ".join(name for name, _ in released)
    return f"chore(release): {names} {released[0][1]}"


# ---------------------------------------------------------------------------
# Apply helpers (guarded by dry run)
# ---------------------------------------------------------------------------


def apply_updates(updates: list[FileUpdate], dry_run: bool) -> None:
    for update in updates:
        if dry_run:
            log(f"[DRY RUN] Would update {update.path} to {update.version}")
            continue
        set_version(update.path, update.version)
        log(f"Updated {update.path.name} for {update.package} to {update.version}", "success")


def commit_changes(files: list[Path], message: str, config: Config) -> None:
    if config.dry_run:
        log(f'[DRY RUN] Would commit {len(files)} file(s) with message: "{message}"')
        return
    stage_files(files)
    commit(message, skip_hooks=config.skip_hooks)
    log(f'Created commit: "{message}"', "success")


def apply_tag(tag: str, message: str, dry_run: bool) -> None:
    if dry_run:
        log(f"[DRY RUN] Would create tag: {tag}")
        return
    create_tag(tag, message)
    log(f"Created tag: {tag}", "success")


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


def run_synced(config: Config, workspace: Workspace) -> StrategyResult:
    """Give every non-skipped package the same next version.

    The workspace root is the reference target for the calculation. Its
    manifests are updated too when they declare a version.

    Raises:
        SemtagError: Any calculation, manifest or git failure.
    """
    step("Synced versioning")
    result = StrategyResult(strategy=str(StrategyKind.SYNCED), dry_run=config.dry_run)

    latest = find_latest_tag(config)
    log(f"Latest tag: {latest or '<none>'}")
    next_version = calculate_version(config, build_query(config, latest, workspace.root))
    if not next_version:
        log("No version change needed")
        return result

    root = workspace.root.resolve()
    root_pkg = next((p for p in workspace.packages if p.path.resolve() == root), None)
    updates = plan_updates(root_pkg.name if root_pkg else "root", root, next_version)
    seen = {root}
    for pkg in select_packages(workspace.packages, skip=config.skip, root=workspace.root):
        if pkg.path.resolve() in seen:
            continue
        seen.add(pkg.path.resolve())
        pkg_updates = plan_updates(pkg.name, pkg.path, next_version)
        if not pkg_updates:
            log(f"No manifest with a version field in {pkg.name}, skipping", "warning")
        updates.extend(pkg_updates)

    if not updates:
        log("No packages were updated", "warning")
        return result

    result.updates = updates
    result.tags = [_tag_for(config, next_version)]
    result.commit_message = format_commit_message(
        config.commit_message, next_version, prefix=config.tag_prefix
    )
    log(
        f"Updating {len(result.updated_packages)} package(s) to version {next_version}",
        "success",
    )

    apply_updates(updates, config.dry_run)
    commit_changes([u.path for u in updates], result.commit_message, config)
    apply_tag(result.tags[0], result.commit_message, config.dry_run)
    return result


def run_single(config: Config, workspace: Workspace) -> StrategyResult:
    """Release the one package named in the configuration.

    Raises:
        ConfigError: If the configuration doesn't name exactly one package.
        PackageNotFoundError: If that package isn't in the workspace.
        SemtagError: Any calculation, manifest or git failure.
    """
    if len(config.packages) != 1:
        raise ConfigError(
            "Single mode requires exactly one package name",
            suggestions=[
                'Set "packages" to a list with one package name',
                'Set "synced": true to version all packages together',
            ],
        )

    name = config.packages[0]
    step(f"Single package versioning: {name}")
    pkg = next((p for p in workspace.packages if p.name == name), None)
    if pkg is None:
        raise PackageNotFoundError(
            f"Package '{name}' not found in workspace",
            suggestions=[
                "Check the package name in your configuration",
                "Available packages: " + ", ".join(p.name for p in workspace.packages),
            ],
        )

    result = StrategyResult(strategy=str(StrategyKind.SINGLE), dry_run=config.dry_run)
    latest = find_latest_tag(config, name)
    log(f"Latest tag for {name}: {latest or '<none>'}")
    next_version = calculate_version(config, build_query(config, latest, pkg.path, name))
    if not next_version:
        log(f"No version change needed for {name}")
        return result

    updates = plan_updates(name, pkg.path, next_version)
    if not updates:
        raise ManifestError(f"No manifest with a version field found for {name} in {pkg.path}")

    result.updates = updates
    result.tags = [_tag_for(config, next_version, name)]
    result.commit_message = format_commit_message(
        config.commit_message,
        next_version,
        package_name=name,
        scope=package_scope(name),
        prefix=config.tag_prefix,
    )
    log(f"Updating {name} to version {next_version}", "success")

    apply_updates(updates, config.dry_run)
    commit_changes([u.path for u in updates], result.commit_message, config)
    apply_tag(result.tags[0], result.commit_message, config.dry_run)
    return result


def _calculate_package(config: Config, pkg: PackageInfo) -> str:
    latest = find_latest_tag(config, pkg.name)
    log(f"  {pkg.name}: latest tag {latest or '<none>'}")
    return calculate_version(config, build_query(config, latest, pkg.path, pkg.name))


def run_async(
    config: Config, workspace: Workspace, targets: list[str] | None = None
) -> StrategyResult:
    """Version each selected package independently.

    Packages are processed one at a time in selection order. A package whose
    calculation fails with a VersionCalculationError or GitOperationError is
    logged and skipped; failures creating its tag are logged too. Only a
    failure of the aggregate commit is raised.

    Args:
        config: Run configuration.
        workspace: Discovered workspace.
        targets: Command-line targets. When given they replace the configured
            package list.
    """
    step("Independent package versioning")
    effective_targets = list(targets) if targets else list(config.packages)
    if not effective_targets:
        log("No targets specified, processing all non-skipped packages")
    selected = select_packages(workspace.packages, effective_targets, config.skip, workspace.root)

    result = StrategyResult(strategy=str(StrategyKind.ASYNC), dry_run=config.dry_run)
    released: list[tuple[str, str]] = []

    for pkg in selected:
        try:
            next_version = _calculate_package(config, pkg)
        except (VersionCalculationError, GitOperationError) as e:
            log(f"Failed to calculate version for {pkg.name}: {e.message}", "error")
            continue

        if not next_version:
            log(f"No version change needed for {pkg.name}")
            continue

        updates = plan_updates(pkg.name, pkg.path, next_version)
        if not updates:
            log(f"No manifest with a version field in {pkg.name}, skipping", "warning")
            continue

        apply_updates(updates, config.dry_run)
        result.updates.extend(updates)
        result.tags.append(_tag_for(config, next_version, pkg.name))
        released.append((pkg.name, next_version))

    if not released:
        log("No targeted packages required a version update")
        return result

    result.commit_message = async_commit_message(config, released)
    commit_changes([u.path for u in result.updates], result.commit_message, config)

    for tag, (name, version) in zip(result.tags, released):
        try:
            apply_tag(tag, f"chore(release): {name} {version}", config.dry_run)
        except GitOperationError as e:
            log(f"Failed to create tag {tag} for {name}: {e.message}", "error")

    return result
