"""Version parsing and prerelease-aware bumping.

Increments follow the usual semver rules for promoting prereleases: a
standard bump on a prerelease whose lower-order components are already zero
releases the version it was building toward (``1.0.0-next.0`` + major →
``1.0.0``) instead of starting another cycle.
"""

from __future__ import annotations

import re

import semver

from .models import ReleaseType

STANDARD_BUMP_TYPES = frozenset(
    {ReleaseType.MAJOR, ReleaseType.MINOR, ReleaseType.PATCH}
)

_PRE_VARIANTS = {
    ReleaseType.MAJOR: ReleaseType.PREMAJOR,
    ReleaseType.MINOR: ReleaseType.PREMINOR,
    ReleaseType.PATCH: ReleaseType.PREPATCH,
}

_LEADING_NOISE = re.compile(r"^[=v\s]+")


def clean_version(version_str: str) -> str | None:
    """Normalize a loose version string, or return None if it isn't semver.

    Strips surrounding whitespace, a leading "v" or "=", and build metadata:
    - " v1.2.3 " → "1.2.3"
    - "=1.2.3-beta.1+sha.abc" → "1.2.3-beta.1"
    - "release-1" → None
    """
    candidate = _LEADING_NOISE.sub("", version_str.strip())
    if not semver.Version.is_valid(candidate):
        return None
    return str(semver.Version.parse(candidate).replace(build=None))


def parse_version(version_str: str) -> semver.Version:
    """Parse a version string into a semver.Version object.

    Raises:
        ValueError: If the string is not a valid semantic version.
    """
    cleaned = clean_version(version_str)
    if cleaned is None:
        raise ValueError(f"{version_str!r} is not a valid semantic version")
    return semver.Version.parse(cleaned)


def coerce_version(version_str: str) -> str:
    """Pad an incomplete release version with zeros.

    Manifests sometimes declare "1" or "1.2"; those become "1.0.0" and
    "1.2.0". Anything else is returned unchanged.
    """
    if re.fullmatch(r"\d+(\.\d+)?", version_str.strip()):
        parts = version_str.strip().split(".")
        while len(parts) < 3:
            parts.append("0")
        return ".".join(parts)
    return version_str


def compare_versions(left: str, right: str) -> int:
    """Compare two versions under semver precedence (-1, 0 or 1)."""
    return parse_version(left).compare(parse_version(right))


def _promotes(version: semver.Version, release_type: ReleaseType) -> bool:
    """Whether a standard bump only needs to drop the prerelease suffix.

    True when ``version`` is a prerelease and every component below the
    bump's granularity is already zero.
    """
    if version.prerelease is None:
        return False
    if release_type == ReleaseType.MAJOR:
        return version.minor == 0 and version.patch == 0
    if release_type == ReleaseType.MINOR:
        return version.patch == 0
    return release_type == ReleaseType.PATCH


def _start_prerelease(base: semver.Version, identifier: str | None) -> semver.Version:
    return base.replace(prerelease=f"{identifier}.0" if identifier else "0")


def _next_prerelease(version: semver.Version, identifier: str | None) -> semver.Version:
    """Advance an existing prerelease, switching identifier when it changes."""
    parts = str(version.prerelease).split(".")
    for i in range(len(parts) - 1, -1, -1):
        if parts[i].isdigit():
            parts[i] = str(int(parts[i]) + 1)
            break
    else:
        parts.append("0")

    if identifier and (parts[0] != identifier or not parts[1:2] or not parts[1].isdigit()):
        parts = [identifier, "0"]
    return version.replace(prerelease=".".join(parts))


def increment(
    version_str: str, release_type: ReleaseType | str, identifier: str | None = None
) -> str:
    """Apply a single semver increment.

    Examples:
        increment("1.2.3", "minor") → "1.3.0"
        increment("1.2.3", "premajor", "next") → "2.0.0-next.0"
        increment("1.2.3-beta.1", "prerelease", "beta") → "1.2.3-beta.2"
        increment("2.0.0-rc.1", "major") → "2.0.0"
    """
    release_type = ReleaseType(release_type)
    v = parse_version(version_str)
    base = v.replace(prerelease=None)

    if release_type in STANDARD_BUMP_TYPES and _promotes(v, release_type):
        return str(base)
    if release_type == ReleaseType.MAJOR:
        return str(semver.Version(v.major + 1, 0, 0))
    if release_type == ReleaseType.MINOR:
        return str(semver.Version(v.major, v.minor + 1, 0))
    if release_type == ReleaseType.PATCH:
        return str(semver.Version(v.major, v.minor, v.patch + 1))
    if release_type == ReleaseType.PREMAJOR:
        return str(_start_prerelease(semver.Version(v.major + 1, 0, 0), identifier))
    if release_type == ReleaseType.PREMINOR:
        return str(_start_prerelease(semver.Version(v.major, v.minor + 1, 0), identifier))
    if release_type == ReleaseType.PREPATCH:
        return str(_start_prerelease(semver.Version(v.major, v.minor, v.patch + 1), identifier))

    # prerelease
    if v.prerelease is None:
        return str(_start_prerelease(base.bump_patch(), identifier))
    return str(_next_prerelease(v, identifier))


def bump_version(
    current: str,
    release_type: ReleaseType | str,
    prerelease_identifier: str | None = None,
) -> str:
    """Compute the next version, accounting for prerelease state.

    - A stable version with an identifier and a standard bump starts a
      prerelease cycle instead: "1.3.0" + major + "next" → "2.0.0-next.0".
    - A prerelease with a standard bump is promoted when its lower-order
      components are zero ("1.0.0-next.0" + major → "1.0.0"), otherwise it
      gets a plain increment and the identifier is not carried forward.
    - Everything else is a direct increment with the identifier passed
      through.

    Args:
        current: Current version string.
        release_type: Release type to apply.
        prerelease_identifier: Optional prerelease label. An empty string is
            treated as no identifier.

    Returns:
        The next version string.

    Raises:
        ValueError: If ``current`` is not a valid semantic version or the
            release type is unknown.
    """
    release_type = ReleaseType(release_type)
    identifier = prerelease_identifier or None
    version = parse_version(current)

    if release_type in STANDARD_BUMP_TYPES:
        if version.prerelease is not None:
            return increment(current, release_type)
        if identifier:
            return increment(current, _PRE_VARIANTS[release_type], identifier)
    return increment(current, release_type, identifier)


def with_prerelease(version_str: str, identifier: str | None) -> str:
    """Attach a fresh ``identifier.0`` suffix to a stable version."""
    v = parse_version(version_str)
    if not identifier or v.prerelease is not None:
        return str(v)
    return str(_start_prerelease(v, identifier))
