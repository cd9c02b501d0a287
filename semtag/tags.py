"""Tag formatting, lookup and version extraction.

Tags are rendered from templates: ``${prefix}${version}`` (``v1.2.3``) for
a whole repository and ``${packageName}@${prefix}${version}``
(``@scope/name@v1.2.3``) for a single package. The same template drives
the ``git tag --list`` glob and the pattern that pulls the version back out
of a tag, so custom templates are found again on the next run. Package
names come from manifests and may contain regex or glob metacharacters, so
every substituted value is escaped.
"""

from __future__ import annotations

import re

from .templates import PLACEHOLDER, render_template
from .versions import clean_version

DEFAULT_TAG_TEMPLATE = "${prefix}${version}"
DEFAULT_PACKAGE_TAG_TEMPLATE = "${packageName}@${prefix}${version}"

VERSION_PATTERN = r"\d+\.\d+\.\d+(?:-[0-9A-Za-z.-]+)?(?:\+[0-9A-Za-z.-]+)?"

_GLOB_SPECIAL = frozenset("*?[")


def package_scope(package_name: str | None) -> str | None:
    """The npm scope of a package name without its ``@`` (``@acme/ui`` → ``acme``)."""
    if not package_name or not package_name.startswith("@") or "/" not in package_name:
        return None
    return package_name[1:].split("/", 1)[0] or None


def _template_values(package_name: str | None, prefix: str) -> dict[str, str | None]:
    return {
        "prefix": prefix,
        "packageName": package_name,
        "scope": package_scope(package_name),
    }


def _select_template(
    package_name: str | None, tag_template: str, package_tag_template: str
) -> str:
    return package_tag_template if package_name else tag_template


def resolve_tag_pattern(
    package_name: str | None,
    prefix: str,
    tag_template: str = DEFAULT_TAG_TEMPLATE,
    package_tag_template: str = DEFAULT_PACKAGE_TAG_TEMPLATE,
) -> re.Pattern[str]:
    """Build the pattern that matches a whole tag and captures its version.

    Literal template text and every substituted value are escaped
    independently. The ``@`` that follows ``${packageName}`` is optional,
    so ``corev1.0.0`` is recognised as well as ``core@v1.0.0``.

    Examples:
        resolve_tag_pattern(None, "v").fullmatch("v1.2.3")["version"] → "1.2.3"
        resolve_tag_pattern("@acme/ui+", "v").fullmatch("@acme/ui+@v2.0.0")["version"] → "2.0.0"
    """
    template = _select_template(package_name, tag_template, package_tag_template)
    values = _template_values(package_name, prefix)

    parts: list[str] = []
    previous_key: str | None = None
    have_version = False
    for i, piece in enumerate(PLACEHOLDER.split(template)):
        if i % 2:
            previous_key = piece
            if piece == "version":
                parts.append("(?P=version)" if have_version else f"(?P<version>{VERSION_PATTERN})")
                have_version = True
            else:
                parts.append(re.escape(values.get(piece) or ""))
            continue
        if previous_key == "packageName" and piece.startswith("@"):
            parts.append("@?" + re.escape(piece[1:]))
        else:
            parts.append(re.escape(piece))
        previous_key = None

    if not have_version:
        raise ValueError(f"Tag template {template!r} has no ${{version}} placeholder")
    return re.compile("".join(parts))


def version_from_tag(tag: str, pattern: re.Pattern[str]) -> str | None:
    """The cleaned version captured by ``pattern``, or None if the tag doesn't match."""
    match = pattern.fullmatch(tag.strip())
    if match is None:
        return None
    return clean_version(match.group("version"))


def strip_tag(
    tag: str,
    package_name: str | None,
    prefix: str,
    tag_template: str = DEFAULT_TAG_TEMPLATE,
    package_tag_template: str = DEFAULT_PACKAGE_TAG_TEMPLATE,
) -> str | None:
    """Recover the semantic version encoded in a tag.

    Returns:
        The cleaned version string, or None if the tag wasn't produced by
        the template or doesn't carry a semantic version.
    """
    pattern = resolve_tag_pattern(package_name, prefix, tag_template, package_tag_template)
    return version_from_tag(tag, pattern)


def format_tag(
    version: str,
    prefix: str,
    package_name: str | None = None,
    tag_template: str = DEFAULT_TAG_TEMPLATE,
    package_tag_template: str = DEFAULT_PACKAGE_TAG_TEMPLATE,
) -> str:
    """Format the tag for a release.

    Examples:
        format_tag("1.2.3", "v") → "v1.2.3"
        format_tag("1.2.3", "v", "@acme/ui") → "@acme/ui@v1.2.3"
    """
    template = _select_template(package_name, tag_template, package_tag_template)
    return render_template(template, version=version, **_template_values(package_name, prefix))


def _escape_glob(value: str) -> str:
    return "".join(f"[{c}]" if c in _GLOB_SPECIAL else c for c in value)


def tag_glob(
    prefix: str,
    package_name: str | None = None,
    tag_template: str = DEFAULT_TAG_TEMPLATE,
    package_tag_template: str = DEFAULT_PACKAGE_TAG_TEMPLATE,
) -> str:
    """Glob for ``git tag --list`` that narrows tags to those the template produces."""
    template = _select_template(package_name, tag_template, package_tag_template)
    values = _template_values(package_name, prefix)
    parts: list[str] = []
    for i, piece in enumerate(PLACEHOLDER.split(template)):
        if not i % 2:
            parts.append(_escape_glob(piece))
        elif piece == "version":
            parts.append("*")
        else:
            parts.append(_escape_glob(values.get(piece) or ""))
    return "".join(parts)
