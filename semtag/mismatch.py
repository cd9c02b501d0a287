"""Detecting and resolving disagreement between manifests and tags.

A manifest that is ahead of the latest tag usually means a tag was never
pushed; one that is behind usually means a release was tagged without the
manifest being updated. How the disagreement is settled depends on the
configured MismatchStrategy.
"""

from __future__ import annotations

from .errors import VersionMismatchError
from .models import ManifestVersion, MismatchInfo, MismatchSeverity, MismatchStrategy
from .shell import log
from .versions import clean_version, coerce_version, compare_versions, parse_version


def detect_mismatch(tag_version: str, manifest_version: str) -> MismatchInfo:
    """Classify how far a manifest version has drifted from a tag version.

    - major: the major or minor components differ, or the tag is a stable
      release while the manifest is a prerelease of the same version
      (a release that was reverted in the manifest)
    - none: the versions are equal or differ only below the minor level

    Raises:
        ValueError: If either version is not valid semver.
    """
    tag = parse_version(tag_version)
    manifest = parse_version(manifest_version)

    if tag.major != manifest.major or tag.minor != manifest.minor:
        direction = "ahead of" if manifest > tag else "behind"
        return MismatchInfo(
            detected=True,
            severity=MismatchSeverity.MAJOR,
            message=(
                f"Manifest version {manifest_version} is {direction} "
                f"the latest tag version {tag_version}"
            ),
        )

    same_release = (tag.major, tag.minor, tag.patch) == (
        manifest.major,
        manifest.minor,
        manifest.patch,
    )
    if same_release and tag.prerelease is None and manifest.prerelease is not None:
        return MismatchInfo(
            detected=True,
            severity=MismatchSeverity.MAJOR,
            message=(
                f"Tag {tag_version} is a stable release but the manifest declares "
                f"prerelease {manifest_version}; the release may have been reverted"
            ),
        )

    return MismatchInfo()


def _mismatch_details(info: MismatchInfo, manifest: ManifestVersion, latest_tag: str) -> str:
    return (
        f"Version mismatch detected!\n"
        f"• {manifest.kind} version: {manifest.version}\n"
        f"• Latest Git tag: {latest_tag}\n"
        f"{info.message}"
    )


def resolve_current_version(
    tag_version: str,
    manifest: ManifestVersion | None,
    strategy: MismatchStrategy,
    latest_tag: str = "",
) -> str:
    """Pick the version that further calculation should start from.

    Without a manifest the tag version is used. Short manifest versions are
    padded first (``1.2`` → ``1.2.0``). A manifest version that still isn't
    semver is passed over in favour of the tag, with a warning under
    "prefer-git". When no significant mismatch is detected the semantically
    greater version wins, with ties going to the tag. Otherwise the mismatch
    strategy decides.

    Raises:
        VersionMismatchError: Under the "error" strategy when a mismatch is
            detected.
        ValueError: Under "prefer-package" or "error" when the manifest
            version is not a semantic version.
    """
    if manifest is None:
        return tag_version

    manifest_version = clean_version(coerce_version(manifest.version))
    if manifest_version is None:
        if strategy in (MismatchStrategy.PREFER_PACKAGE, MismatchStrategy.ERROR):
            raise ValueError(f"{manifest.version!r} is not a valid semantic version")
        if strategy == MismatchStrategy.PREFER_GIT:
            log(
                f"{manifest.kind} version {manifest.version!r} in {manifest.path} is not "
                f"a valid semantic version; using the Git tag version {tag_version}",
                "warning",
            )
        return tag_version

    info = detect_mismatch(tag_version, manifest_version)
    if not info.detected:
        if compare_versions(manifest_version, tag_version) > 0:
            return manifest_version
        return tag_version

    details = _mismatch_details(info, manifest, latest_tag or tag_version)
    if strategy == MismatchStrategy.ERROR:
        raise VersionMismatchError(
            details,
            suggestions=[
                "Push missing tags: git push origin --tags",
                f"Update {manifest.kind} to match the latest tag",
                'Set "mismatchStrategy" to "prefer-git" or "prefer-package"',
            ],
        )
    if strategy == MismatchStrategy.PREFER_PACKAGE:
        log(f"{details}\nUsing the {manifest.kind} version {manifest_version} as the base.")
        return manifest_version
    if strategy == MismatchStrategy.PREFER_GIT:
        log(f"{details}\nUsing the Git tag version {tag_version} as the base.", "warning")
    return tag_version
