"""Data models for semtag.

These Pydantic models represent the values passed between the resolvers,
the calculator and the strategies. Everything built per run is frozen:
queries are created just before a calculation and discarded after.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class ReleaseType(str, Enum):
    """Kinds of version increment."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    PREMAJOR = "premajor"
    PREMINOR = "preminor"
    PREPATCH = "prepatch"
    PRERELEASE = "prerelease"

    def __str__(self) -> str:
        return self.value


class MismatchSeverity(str, Enum):
    NONE = "none"
    MINOR = "minor"
    MAJOR = "major"


class MismatchStrategy(str, Enum):
    """How to resolve a manifest/tag disagreement."""

    PREFER_GIT = "prefer-git"
    PREFER_PACKAGE = "prefer-package"
    ERROR = "error"
    IGNORE = "ignore"


class VersionQuery(BaseModel):
    """Per-target inputs to the version calculator.

    Attributes:
        latest_tag: Latest known tag for the target; empty when none exists.
        release_type: Explicit release type that overrides every other rule.
        path: Directory of the target, used for manifest lookup and for
              scoping commit history.
        name: Package name when tags are scoped (``name@v1.2.3``).
        tag_prefix: Prefix in front of the version inside the tag.
        branch_pattern: Ordered ``regex:releaseType`` rules.
        base_branch: Branch that release branches are merged into.
        prerelease_identifier: Label such as "beta" or "next".
    """

    model_config = ConfigDict(frozen=True)

    latest_tag: str = ""
    release_type: ReleaseType | None = None
    path: Path | None = None
    name: str | None = None
    tag_prefix: str = ""
    branch_pattern: list[str] = Field(default_factory=list)
    base_branch: str | None = None
    prerelease_identifier: str | None = None


class MismatchInfo(BaseModel):
    """Outcome of comparing a manifest version against a tag version."""

    model_config = ConfigDict(frozen=True)

    detected: bool = False
    severity: MismatchSeverity = MismatchSeverity.NONE
    message: str = ""


class ManifestVersion(BaseModel):
    """A version found in a manifest file."""

    model_config = ConfigDict(frozen=True)

    version: str
    path: Path
    kind: str


class PackageInfo(BaseModel):
    """Metadata for a single package in the workspace.

    Attributes:
        name: Package name as declared in its manifest.
        path: Absolute path to the package directory.
        version: Current version string from its manifest.
    """

    name: str
    path: Path
    version: str = "0.0.0"


class Workspace(BaseModel):
    root: Path
    packages: list[PackageInfo] = Field(default_factory=list)


class FileUpdate(BaseModel):
    """A pending manifest write: the compute half of a mutation.

    Attributes:
        package: Name of the package the manifest belongs to.
        path: Path to the manifest file.
        version: Version to write.
    """

    package: str
    path: Path
    version: str


class StrategyResult(BaseModel):
    """Everything a strategy computed, whether or not it was applied."""

    strategy: str
    dry_run: bool = False
    updates: list[FileUpdate] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    commit_message: str | None = None

    @property
    def updated_packages(self) -> list[str]:
        """Names of updated packages, in update order and without duplicates."""
        return list(dict.fromkeys(u.package for u in self.updates))
