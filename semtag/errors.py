"""Error types raised by semtag.

Every error carries a human-readable message, a short machine-friendly code,
and optionally a list of suggested remediations that the CLI prints below
the message.
"""

from __future__ import annotations

from .shell import log


class SemtagError(Exception):
    """Base class for all semtag errors."""

    code = "SEMTAG_ERROR"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        suggestions: list[str] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.suggestions = list(suggestions or [])

    def log_error(self) -> None:
        """Print the message followed by numbered suggestions."""
        log(self.message, "error")
        if self.suggestions:
            log("\nSuggested solutions:")
            for i, suggestion in enumerate(self.suggestions, start=1):
                log(f"{i}. {suggestion}")


class ConfigError(SemtagError):
    """Malformed or contradictory configuration."""

    code = "INVALID_CONFIG"


class PackageNotFoundError(SemtagError):
    """A named package is not part of the workspace."""

    code = "PACKAGE_NOT_FOUND"


class ManifestError(SemtagError):
    """A manifest could not be read or updated."""

    code = "MANIFEST_ERROR"


class VersionCalculationError(SemtagError):
    """Unexpected failure while resolving the next version."""

    code = "VERSION_CALCULATION_ERROR"


class VersionMismatchError(VersionCalculationError):
    """Manifest and tag versions disagree under the "error" mismatch policy."""

    code = "VERSION_MISMATCH"


class GitOperationError(SemtagError):
    """A git subprocess failed."""

    code = "GIT_ERROR"


class TagAlreadyExistsError(GitOperationError):
    """The tag about to be created is already present."""

    code = "TAG_ALREADY_EXISTS"

    def __init__(self, tag: str) -> None:
        super().__init__(
            f"Tag '{tag}' already exists in the repository",
            suggestions=[
                f"Delete the existing tag: git tag -d {tag}",
                "Use a different version by incrementing manually",
                "Check if this version was already released",
            ],
        )
        self.tag = tag


class NoTagsFoundError(GitOperationError):
    """git reported that the repository has no tags at all."""

    code = "NO_TAGS"
