"""Placeholder substitution for commit message and tag templates.

Templates use ``${name}`` placeholders. The recognised names are
``version``, ``packageName``, ``prefix`` and ``scope``. A placeholder whose
value isn't available in the current context renders as an empty string and
logs a warning; rendering never fails.
"""

from __future__ import annotations

import re

from .shell import log

PLACEHOLDER = re.compile(r"\$\{([^}]*)\}")

KNOWN_PLACEHOLDERS = frozenset({"version", "packageName", "prefix", "scope"})


def has_placeholders(template: str) -> bool:
    return PLACEHOLDER.search(template) is not None


def render_template(template: str, **values: str | None) -> str:
    """Substitute ``${...}`` placeholders in a template.

    Args:
        template: Template text, e.g. "chore(release): ${packageName} ${version}".
        **values: Placeholder values. None means "not available here".

    Returns:
        The rendered string.
    """

    def substitute(match: re.Match[str]) -> str:
        key = match.group(1)
        value = values.get(key)
        if value is None:
            if key in KNOWN_PLACEHOLDERS:
                log(
                    f"Template placeholder ${{{key}}} has no value here; "
                    f"substituting an empty string in {template!r}",
                    "warning",
                )
            else:
                log(f"Unknown template placeholder ${{{key}}} in {template!r}", "warning")
            return ""
        return value

    return PLACEHOLDER.sub(substitute, template)


def format_commit_message(
    template: str,
    version: str,
    package_name: str | None = None,
    scope: str | None = None,
    prefix: str | None = None,
) -> str:
    """Render a commit message template for a release."""
    return render_template(
        template,
        version=version,
        packageName=package_name,
        scope=scope,
        prefix=prefix,
    )
