"""Configuration loading.

Configuration is read once per run into a frozen Config model. Keys may be
written in snake_case or in camelCase (``tagPrefix``, ``branchPattern``), so
existing ``version.config.json`` files load unchanged.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import semver
import tomlkit
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from .errors import ConfigError
from .models import MismatchStrategy, ReleaseType
from .tags import DEFAULT_PACKAGE_TAG_TEMPLATE, DEFAULT_TAG_TEMPLATE
from .toml import get_table, load_toml

DEFAULT_CONFIG_FILE = "version.config.json"
DEFAULT_PRERELEASE_IDENTIFIER = "rc"


class Config(BaseModel):
    """Per-run settings. Read-only once loaded."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    tag_prefix: str = "v"
    preset: str = "conventionalcommits"
    base_branch: str = "main"
    synced: bool = False
    packages: list[str] = Field(default_factory=list)
    branch_pattern: list[str] = Field(default_factory=list)
    prerelease_identifier: str | None = None
    skip: list[str] = Field(default_factory=list)
    commit_message: str = "chore(release): ${version}"
    tag_template: str = DEFAULT_TAG_TEMPLATE
    package_tag_template: str = DEFAULT_PACKAGE_TAG_TEMPLATE
    mismatch_strategy: MismatchStrategy = MismatchStrategy.PREFER_GIT
    initial_version: str = "0.1.0"
    skip_hooks: bool = False
    dry_run: bool = False
    force_type: ReleaseType | None = None

    @field_validator("prerelease_identifier")
    @classmethod
    def _empty_identifier_is_none(cls, value: str | None) -> str | None:
        return value or None

    @field_validator("tag_template", "package_tag_template")
    @classmethod
    def _template_has_version(cls, value: str) -> str:
        if "${version}" not in value:
            raise ValueError(f"{value!r} must contain the ${{version}} placeholder")
        return value

    @field_validator("initial_version")
    @classmethod
    def _initial_version_is_semver(cls, value: str) -> str:
        if not semver.Version.is_valid(value):
            raise ValueError(f"{value!r} is not a valid semantic version")
        return value


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        if path.suffix == ".toml":
            doc = load_toml(path)
            table = get_table(doc, "tool", "semtag") or doc
            return dict(table.unwrap() if hasattr(table, "unwrap") else table)
        data = json.loads(path.read_text())
    except (OSError, ValueError) as e:
        raise ConfigError(
            f"Failed to parse config file {path}: {e}",
            suggestions=["Check the file for syntax errors"],
        ) from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain an object")
    return data


def _validate(data: dict[str, Any], source: str) -> Config:
    try:
        return Config.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigError(f"Invalid configuration in {source}: {problems}") from e


def load_config(path: Path | str | None = None, root: Path | None = None) -> Config:
    """Load configuration for a run.

    Lookup order when no explicit path is given:
    1. ``version.config.json`` in the root
    2. ``[tool.semtag]`` in the root pyproject.toml
    3. built-in defaults

    Args:
        path: Explicit config file (JSON, or TOML when it ends in .toml).
        root: Directory to search. Defaults to the current directory.

    Raises:
        ConfigError: If an explicit file is missing, a file can't be parsed,
            or values fail validation.
    """
    root = root or Path.cwd()

    if path is not None:
        config_path = Path(path)
        if not config_path.is_absolute():
            config_path = root / config_path
        if not config_path.is_file():
            raise ConfigError(
                f"Could not locate the config file at {config_path}",
                suggestions=[
                    f"Create {DEFAULT_CONFIG_FILE} in the repository root",
                    "Pass the correct path with --config",
                ],
            )
        return _validate(_read_config_file(config_path), str(config_path))

    default_path = root / DEFAULT_CONFIG_FILE
    if default_path.is_file():
        return _validate(_read_config_file(default_path), str(default_path))

    pyproject = root / "pyproject.toml"
    if pyproject.is_file():
        try:
            table = get_table(tomlkit.parse(pyproject.read_text()), "tool", "semtag")
        except ValueError as e:
            raise ConfigError(f"Failed to parse {pyproject}: {e}") from e
        if table:
            return _validate(dict(table.unwrap()), f"{pyproject} [tool.semtag]")

    return Config()


def apply_cli_overrides(
    config: Config,
    *,
    dry_run: bool = False,
    synced: bool = False,
    bump: str | None = None,
    prerelease: str | None = None,
    skip: list[str] | None = None,
) -> Config:
    """Return a copy of ``config`` with command-line flags layered on top.

    Flags that weren't given leave the configured values alone.

    Raises:
        ConfigError: If ``bump`` is not a known release type.
    """
    updates: dict[str, Any] = {}
    if dry_run:
        updates["dry_run"] = True
    if synced:
        updates["synced"] = True
    if bump:
        try:
            updates["force_type"] = ReleaseType(bump)
        except ValueError as e:
            raise ConfigError(
                f"Invalid bump type {bump!r}",
                suggestions=[
                    "Use one of: " + ", ".join(t.value for t in ReleaseType),
                ],
            ) from e
    if prerelease is not None:
        updates["prerelease_identifier"] = prerelease or DEFAULT_PRERELEASE_IDENTIFIER
    if skip:
        updates["skip"] = list(dict.fromkeys([*config.skip, *skip]))
    return config.model_copy(update=updates) if updates else config
