"""Conventional commit parsing and release type recommendation.

A commit header looks like ``type(scope)!: description``. Breaking changes
are flagged by ``!`` before the colon or by a ``BREAKING CHANGE:`` footer.
Presets decide which commit types map to which release type.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict

from .errors import ConfigError
from .models import ReleaseType

HEADER_PATTERN = re.compile(
    r"^(?P<type>[A-Za-z]+)(?:\((?P<scope>[^)]*)\))?(?P<breaking>!)?:\s*(?P<description>.+)$"
)
BREAKING_FOOTER = re.compile(r"^BREAKING[ -]CHANGE:", re.MULTILINE)


class Preset(BaseModel):
    """Classification rules for a conventional-commit preset."""

    model_config = ConfigDict(frozen=True)

    name: str
    types_minor: frozenset[str]
    types_patch: frozenset[str]
    bang_is_breaking: bool = True


PRESETS: dict[str, Preset] = {
    "conventionalcommits": Preset(
        name="conventionalcommits",
        types_minor=frozenset({"feat", "feature"}),
        types_patch=frozenset({"fix", "perf"}),
    ),
    "angular": Preset(
        name="angular",
        types_minor=frozenset({"feat"}),
        types_patch=frozenset({"fix", "perf", "revert"}),
        bang_is_breaking=False,
    ),
}
PRESETS["conventional-commits"] = PRESETS["conventionalcommits"]


def get_preset(name: str) -> Preset:
    try:
        return PRESETS[name]
    except KeyError:
        raise ConfigError(
            f"Unknown conventional-commit preset {name!r}",
            suggestions=[f"Use one of: {', '.join(sorted(PRESETS))}"],
        ) from None


class ParsedCommit(BaseModel):
    """A commit message split into its conventional-commit parts."""

    model_config = ConfigDict(frozen=True)

    message: str
    commit_type: str | None = None
    scope: str | None = None
    description: str = ""
    bang: bool = False
    breaking_footer: bool = False

    @property
    def is_conventional(self) -> bool:
        return self.commit_type is not None

    @property
    def is_release(self) -> bool:
        """Release commits made by this tool (``chore(release): ...``)."""
        return self.commit_type == "chore" and (
            self.scope == "release" or self.description.startswith("release")
        )

    @classmethod
    def from_message(cls, message: str) -> ParsedCommit:
        header = message.strip().split("\n", 1)[0].strip()
        match = HEADER_PATTERN.match(header)
        if not match:
            return cls(message=message, description=header)
        return cls(
            message=message,
            commit_type=match.group("type").lower(),
            scope=match.group("scope") or None,
            description=match.group("description").strip(),
            bang=bool(match.group("breaking")),
            breaking_footer=bool(BREAKING_FOOTER.search(message)),
        )

    def is_breaking(self, preset: Preset) -> bool:
        return self.breaking_footer or (self.bang and preset.bang_is_breaking)


def classify(commit: ParsedCommit, preset: Preset) -> ReleaseType | None:
    """Release type implied by one commit under a preset, if any."""
    if not commit.is_conventional or commit.is_release:
        return None
    if commit.is_breaking(preset):
        return ReleaseType.MAJOR
    if commit.commit_type in preset.types_minor:
        return ReleaseType.MINOR
    if commit.commit_type in preset.types_patch:
        return ReleaseType.PATCH
    return None


_RANK = {ReleaseType.PATCH: 1, ReleaseType.MINOR: 2, ReleaseType.MAJOR: 3}


def recommend_release_type(messages: list[str], preset_name: str) -> ReleaseType | None:
    """Strongest release type across a list of commit messages.

    Returns:
        MAJOR, MINOR or PATCH, or None when no commit calls for a release.

    Raises:
        ConfigError: If the preset is unknown.
    """
    preset = get_preset(preset_name)
    best: ReleaseType | None = None
    for message in messages:
        release_type = classify(ParsedCommit.from_message(message), preset)
        if release_type and (best is None or _RANK[release_type] > _RANK[best]):
            best = release_type
            if best == ReleaseType.MAJOR:
                break
    return best
