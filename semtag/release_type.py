"""Deciding which kind of release applies to a target.

Rules are tried in order and the first that produces a type wins:
1. an explicit release type on the query
2. branch-pattern rules (``regex:releaseType``)
3. conventional commits since the latest tag
"""

from __future__ import annotations

import re

from .commits import recommend_release_type
from .config import Config
from .gitops import commit_history, commits_since, current_branch, last_merge_branch
from .models import ReleaseType, VersionQuery
from .shell import log


def parse_branch_rule(rule: str) -> tuple[str, ReleaseType] | None:
    """Split a ``regex:releaseType`` rule, or return None if it's invalid.

    The release type follows the last colon, so the regex itself may contain
    colons.
    """
    if ":" not in rule:
        log(f'Invalid branch pattern "{rule}" - missing colon. Skipping.', "warning")
        return None
    regex, _, type_name = rule.rpartition(":")
    try:
        return regex, ReleaseType(type_name.strip())
    except ValueError:
        log(
            f'Invalid branch pattern "{rule}" - unknown release type '
            f'"{type_name}". Skipping.',
            "warning",
        )
        return None


def match_branch_pattern(branch: str, rules: list[str]) -> ReleaseType | None:
    """Release type of the first rule whose regex matches ``branch``."""
    for rule in rules:
        parsed = parse_branch_rule(rule)
        if parsed is None:
            continue
        regex, release_type = parsed
        try:
            matched = re.search(regex, branch) is not None
        except re.error as e:
            log(f'Invalid branch pattern "{rule}": {e}. Skipping.', "warning")
            continue
        if matched:
            log(f"Branch {branch} matches {regex}: using {release_type} release")
            return release_type
    return None


def release_type_from_branch(rules: list[str], base_branch: str | None) -> ReleaseType | None:
    """Match branch rules against the most relevant branch name.

    The most recent branch merged into the base branch is preferred over the
    current branch when one can be found.
    """
    branch = current_branch()
    if base_branch:
        regexes = [rule.rpartition(":")[0] for rule in rules if ":" in rule]
        merged = last_merge_branch(regexes, base_branch)
        if merged:
            log(f"Using last branch merged into {base_branch}: {merged}")
            branch = merged
    return match_branch_pattern(branch, rules)


def release_type_from_commits(
    latest_tag: str, path=None, preset: str = "conventionalcommits", name: str | None = None
) -> ReleaseType | None:
    """Infer a release type from commits made since ``latest_tag``.

    Raises:
        NoTagsFoundError: If git reports that the repository has no tags.
    """
    label = name or "project"
    if commits_since(latest_tag, path) == 0:
        log(f"No new commits found for {label} since {latest_tag}, skipping version bump")
        return None

    messages = commit_history(f"{latest_tag}..HEAD", path)
    release_type = recommend_release_type(messages, preset)
    if release_type is None:
        log(f"No relevant commits found for {label} since {latest_tag}, skipping version bump")
    return release_type


def resolve_release_type(config: Config, query: VersionQuery) -> ReleaseType | None:
    """Decide what kind of bump applies to the query's target.

    Returns:
        The release type, or None when no rule calls for a release.
    """
    if query.release_type is not None:
        return query.release_type

    if query.branch_pattern:
        release_type = release_type_from_branch(query.branch_pattern, query.base_branch)
        if release_type is not None:
            return release_type

    if not query.latest_tag.strip():
        return None

    return release_type_from_commits(query.latest_tag, query.path, config.preset, query.name)
