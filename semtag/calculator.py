"""The version calculator: one target in, one next version out.

calculate_version() strings together tag stripping, mismatch resolution,
release type resolution and prerelease-aware bumping. Its result is either
a valid semantic version or an empty string meaning "nothing to release";
every other failure is raised.
"""

from __future__ import annotations

from pathlib import Path

from .config import Config
from .errors import NoTagsFoundError, VersionCalculationError
from .manifests import get_version
from .mismatch import resolve_current_version
from .models import ReleaseType, VersionQuery
from .release_type import release_type_from_branch, resolve_release_type
from .shell import log
from .tags import strip_tag
from .versions import bump_version, coerce_version, parse_version, with_prerelease

NO_CHANGE = ""


def _label(query: VersionQuery) -> str:
    return query.name or "project"


def _target_dir(query: VersionQuery) -> Path:
    return query.path or Path.cwd()


def first_release_version(config: Config, query: VersionQuery) -> str:
    """Version for a target that has never been tagged.

    An explicit or branch-derived release type bumps the manifest version.
    Without one, the manifest version is released as-is, and a target with
    no manifest at all starts from the configured initial version. A
    prerelease identifier turns either starting point into its first
    prerelease (``0.1.0`` → ``0.1.0-beta.0``).
    """
    release_type: ReleaseType | None = query.release_type
    if release_type is None and query.branch_pattern:
        release_type = release_type_from_branch(query.branch_pattern, query.base_branch)

    identifier = query.prerelease_identifier or None
    manifest = get_version(_target_dir(query))

    if manifest is None:
        log(f"No tags or manifest version found for {_label(query)}, using initial version")
        return with_prerelease(config.initial_version, identifier)

    log(
        f"No tags found for {_label(query)}, using {manifest.kind} "
        f"version: {manifest.version} as base"
    )
    base = coerce_version(manifest.version)
    try:
        if release_type is None:
            return with_prerelease(base, identifier)
        return bump_version(base, release_type, identifier)
    except ValueError as e:
        raise VersionCalculationError(
            f"Invalid version {manifest.version!r} in {manifest.path}: {e}"
        ) from e


def calculate_version(config: Config, query: VersionQuery) -> str:
    """Calculate the next version for a single target.

    Args:
        config: Run configuration (preset, mismatch strategy, initial version).
        query: Per-target inputs. An empty ``latest_tag`` means the target
            has never been released.

    Returns:
        The next version, or an empty string when no release is needed.

    Raises:
        VersionCalculationError: If the tag doesn't encode a valid version or
            a version can't be bumped. VersionMismatchError under the
            "error" mismatch strategy.
        GitOperationError: If git fails for a reason other than a missing
            tag history.
    """
    if not query.latest_tag.strip():
        return first_release_version(config, query)

    tag_version = strip_tag(
        query.latest_tag,
        query.name,
        query.tag_prefix,
        config.tag_template,
        config.package_tag_template,
    )
    if tag_version is None:
        raise VersionCalculationError(
            f"Tag {query.latest_tag!r} does not contain a valid semantic version "
            f"after removing prefix {query.tag_prefix!r}",
            suggestions=[
                "Check that tagPrefix matches the prefix used by existing tags",
                "Check that tagTemplate/packageTagTemplate match existing tags",
            ],
        )

    manifest = get_version(query.path) if query.path is not None else None
    try:
        current = resolve_current_version(
            tag_version, manifest, config.mismatch_strategy, query.latest_tag
        )
    except ValueError as e:
        raise VersionCalculationError(
            f"Invalid version {manifest.version!r} in {manifest.path}: {e}"
        ) from e

    try:
        release_type = resolve_release_type(config, query)
    except NoTagsFoundError:
        log("No tags found, proceeding with initial version calculation")
        return first_release_version(config, query)

    if release_type is None:
        return NO_CHANGE

    try:
        next_version = bump_version(current, release_type, query.prerelease_identifier)
        parse_version(next_version)
    except ValueError as e:
        raise VersionCalculationError(
            f"Failed to bump {current} for {_label(query)}: {e}"
        ) from e

    log(f"{_label(query)}: {current} → {next_version} ({release_type})")
    return next_version
