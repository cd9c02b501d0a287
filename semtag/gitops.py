"""Git queries and mutations used by the version engine.

Every call runs sequentially through shell.git(). Failures are translated
into GitOperationError subclasses so callers can tell "tag already exists"
and "repository has no tags" apart from generic failures.
"""

from __future__ import annotations

import re
import subprocess
from pathlib import Path

from .errors import GitOperationError, NoTagsFoundError, TagAlreadyExistsError
from .shell import git, log
from .tags import version_from_tag
from .versions import clean_version, parse_version

_COMMIT_SEPARATOR = "--semtag-commit--"


def _run(*args: str, cwd: Path | None = None) -> str:
    """Run git, translating failures into GitOperationError."""
    try:
        return git(*args, cwd=cwd)
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or "").strip()
        if "No names found" in stderr:
            raise NoTagsFoundError(f"No tags found: {stderr}") from e
        raise GitOperationError(
            f"git {' '.join(args)} failed: {stderr or f'exit code {e.returncode}'}"
        ) from e
    except FileNotFoundError as e:
        raise GitOperationError(
            "git executable not found", suggestions=["Install git and make sure it is on PATH"]
        ) from e


def is_git_repository(directory: Path) -> bool:
    if not (directory / ".git").exists():
        return False
    try:
        return git("rev-parse", "--is-inside-work-tree", cwd=directory) == "true"
    except (subprocess.CalledProcessError, FileNotFoundError):
        return False


def list_tags(match: str = "*") -> list[str]:
    """List tags matching a glob, newest commit first."""
    output = _run("tag", "--list", match, "--sort=-creatordate")
    return [t for t in output.splitlines() if t.strip()]


def latest_tag(match: str = "*", pattern: re.Pattern[str] | None = None) -> str:
    """Find the semantically latest tag matching a glob.

    Tags are compared by the version ``pattern`` captures; tags it doesn't
    match, or that don't carry a valid semantic version, are ignored. This
    handles tags created out of order (v0.7.1 tagged after v0.8.0).

    Args:
        match: Glob passed to ``git tag --list``.
        pattern: Full-tag pattern with a ``version`` group, from
            tags.resolve_tag_pattern(). Without one the whole tag is
            treated as the version.

    Returns:
        The latest tag, or an empty string if none matched.
    """
    tags = list_tags(match)
    versioned: list[tuple[str, str]] = []
    for tag in tags:
        version = version_from_tag(tag, pattern) if pattern else clean_version(tag)
        if version is not None:
            versioned.append((tag, version))

    if not versioned:
        return ""

    chronological = versioned[0][0]
    semantic = max(versioned, key=lambda tv: parse_version(tv[1]))[0]
    if semantic != chronological:
        log(
            f"Tag ordering differs: chronological latest is {chronological}, "
            f"using semantic latest {semantic}"
        )
    return semantic


def current_branch() -> str:
    return _run("rev-parse", "--abbrev-ref", "HEAD")


def last_merge_branch(patterns: list[str], base_branch: str) -> str | None:
    """Name of the most recent local branch merged into ``base_branch``.

    Only branches whose name matches one of ``patterns`` (regexes) count.
    Returns None when nothing matches or git can't answer.
    """
    try:
        output = _run(
            "for-each-ref",
            "--sort=-committerdate",
            "--format=%(refname:short)",
            "refs/heads",
            "--merged",
            base_branch,
        )
    except GitOperationError as e:
        log(f"Could not determine last merged branch: {e.message}", "warning")
        return None

    compiled: list[re.Pattern[str]] = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern))
        except re.error:
            continue

    for branch in output.splitlines():
        branch = branch.strip()
        if not branch or branch == base_branch:
            continue
        if any(p.search(branch) for p in compiled):
            return branch
    return None


def commits_since(tag: str, path: Path | None = None) -> int:
    """Count commits on HEAD since ``tag``, optionally limited to a path.

    With an empty tag the nearest reachable tag is used; a repository
    without tags raises NoTagsFoundError.
    """
    base = tag or _run("describe", "--tags", "--abbrev=0")
    args = ["rev-list", "--count", f"{base}..HEAD"]
    if path is not None:
        args.extend(["--", str(path)])
    return int(_run(*args) or "0")


def commit_history(rev_range: str, path: Path | None = None) -> list[str]:
    """Return full commit messages in a revision range, newest first."""
    args = ["log", rev_range, f"--format=%B%n{_COMMIT_SEPARATOR}"]
    if path is not None:
        args.extend(["--", str(path)])
    output = _run(*args)
    return [m.strip() for m in output.split(_COMMIT_SEPARATOR) if m.strip()]


def stage_files(files: list[Path]) -> None:
    if not files:
        raise GitOperationError("No files specified for commit")
    _run("add", "--", *(str(f) for f in files))


def commit(message: str, skip_hooks: bool = False) -> None:
    if not message:
        raise GitOperationError("Commit message is required")
    args = ["commit", "-m", message]
    if skip_hooks:
        args.append("--no-verify")
    _run(*args)


def create_tag(tag: str, message: str) -> None:
    """Create an annotated tag on HEAD.

    Raises:
        TagAlreadyExistsError: If the tag is already present.
        GitOperationError: For any other failure.
    """
    try:
        _run("tag", "-a", tag, "-m", message)
    except GitOperationError as e:
        if "already exists" in e.message:
            raise TagAlreadyExistsError(tag) from e
        raise
