"""Tests for semtag.calculator."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from manifest_files import write_package_json, write_pyproject

from semtag.calculator import NO_CHANGE, calculate_version
from semtag.config import Config
from semtag.errors import (
    GitOperationError,
    NoTagsFoundError,
    VersionCalculationError,
    VersionMismatchError,
)
from semtag.models import MismatchStrategy, ReleaseType, VersionQuery


class TestTaggedTarget:
    """Targets with an existing release tag."""

    def test_explicit_patch(self, tmp_path: Path) -> None:
        write_package_json(tmp_path, "app", "1.2.3")
        query = VersionQuery(
            latest_tag="v1.2.3", release_type=ReleaseType.PATCH, path=tmp_path, tag_prefix="v"
        )

        assert calculate_version(Config(), query) == "1.2.4"

    def test_scoped_tag(self, tmp_path: Path) -> None:
        query = VersionQuery(
            latest_tag="@acme/ui@v1.0.0",
            release_type=ReleaseType.MINOR,
            path=tmp_path,
            name="@acme/ui",
            tag_prefix="v",
        )

        assert calculate_version(Config(), query) == "1.1.0"

    def test_prerelease_identifier_applied(self, tmp_path: Path) -> None:
        query = VersionQuery(
            latest_tag="v1.3.0",
            release_type=ReleaseType.MAJOR,
            path=tmp_path,
            tag_prefix="v",
            prerelease_identifier="next",
        )

        assert calculate_version(Config(), query) == "2.0.0-next.0"

    @patch("semtag.release_type.commit_history")
    @patch("semtag.release_type.commits_since")
    def test_commit_inference(
        self, mock_since: MagicMock, mock_history: MagicMock, tmp_path: Path
    ) -> None:
        mock_since.return_value = 3
        mock_history.return_value = ["fix: one", "feat(api): two", "chore: three"]
        query = VersionQuery(latest_tag="v0.4.1", path=tmp_path, tag_prefix="v")

        assert calculate_version(Config(), query) == "0.5.0"
        mock_since.assert_called_once_with("v0.4.1", tmp_path)

    @patch("semtag.release_type.commit_history")
    @patch("semtag.release_type.commits_since")
    def test_no_new_commits_is_no_change(
        self, mock_since: MagicMock, mock_history: MagicMock, tmp_path: Path
    ) -> None:
        mock_since.return_value = 0
        query = VersionQuery(latest_tag="v1.0.0", path=tmp_path, tag_prefix="v")

        assert calculate_version(Config(), query) == NO_CHANGE

    @patch("semtag.release_type.commit_history")
    @patch("semtag.release_type.commits_since")
    def test_unclassified_commits_is_no_change(
        self, mock_since: MagicMock, mock_history: MagicMock, tmp_path: Path
    ) -> None:
        mock_since.return_value = 2
        mock_history.return_value = ["docs: typo", "update readme"]
        query = VersionQuery(latest_tag="v1.0.0", path=tmp_path, tag_prefix="v")

        assert calculate_version(Config(), query) == ""

    @patch("semtag.release_type.commits_since")
    def test_no_names_found_falls_back_to_first_release(
        self, mock_since: MagicMock, tmp_path: Path
    ) -> None:
        mock_since.side_effect = NoTagsFoundError("No tags found: fatal: No names found")
        write_package_json(tmp_path, "app", "0.3.0")
        query = VersionQuery(latest_tag="v0.2.0", path=tmp_path, tag_prefix="v")

        assert calculate_version(Config(), query) == "0.3.0"

    @patch("semtag.release_type.commits_since")
    def test_other_git_errors_propagate(self, mock_since: MagicMock, tmp_path: Path) -> None:
        mock_since.side_effect = GitOperationError("git rev-list failed")
        query = VersionQuery(latest_tag="v1.0.0", path=tmp_path, tag_prefix="v")

        with pytest.raises(GitOperationError):
            calculate_version(Config(), query)

    @patch("semtag.calculator.bump_version")
    def test_invalid_bump_result_is_wrapped(self, mock_bump: MagicMock, tmp_path: Path) -> None:
        mock_bump.return_value = "2.0"
        query = VersionQuery(
            latest_tag="v1.2.3", release_type=ReleaseType.MAJOR, path=tmp_path, tag_prefix="v"
        )

        with pytest.raises(VersionCalculationError, match="Failed to bump 1.2.3"):
            calculate_version(Config(), query)

    def test_invalid_tag_raises(self, tmp_path: Path) -> None:
        query = VersionQuery(
            latest_tag="nightly", release_type=ReleaseType.PATCH, path=tmp_path, tag_prefix="v"
        )

        with pytest.raises(VersionCalculationError, match="nightly"):
            calculate_version(Config(), query)


class TestMismatchPolicy:
    def test_error_policy_raises(self, tmp_path: Path) -> None:
        write_package_json(tmp_path, "app", "2.0.0")
        config = Config(mismatch_strategy=MismatchStrategy.ERROR)
        query = VersionQuery(
            latest_tag="v1.0.0", release_type=ReleaseType.PATCH, path=tmp_path, tag_prefix="v"
        )

        with pytest.raises(VersionMismatchError):
            calculate_version(config, query)

    def test_prefer_package(self, tmp_path: Path) -> None:
        write_pyproject(tmp_path, "app", "2.0.0")
        config = Config(mismatch_strategy=MismatchStrategy.PREFER_PACKAGE)
        query = VersionQuery(
            latest_tag="v1.0.0", release_type=ReleaseType.PATCH, path=tmp_path, tag_prefix="v"
        )

        assert calculate_version(config, query) == "2.0.1"

    def test_prefer_git(self, tmp_path: Path) -> None:
        write_package_json(tmp_path, "app", "2.0.0")
        query = VersionQuery(
            latest_tag="v1.0.0", release_type=ReleaseType.PATCH, path=tmp_path, tag_prefix="v"
        )

        assert calculate_version(Config(), query) == "1.0.1"

    def test_greater_patch_level_wins_without_mismatch(self, tmp_path: Path) -> None:
        write_package_json(tmp_path, "app", "1.0.4")
        query = VersionQuery(
            latest_tag="v1.0.2", release_type=ReleaseType.PATCH, path=tmp_path, tag_prefix="v"
        )

        assert calculate_version(Config(), query) == "1.0.5"


class TestFirstRelease:
    """Targets that have never been tagged."""

    def test_no_manifest_uses_initial_version(self, tmp_path: Path) -> None:
        assert calculate_version(Config(), VersionQuery(path=tmp_path)) == "0.1.0"

    def test_configured_initial_version(self, tmp_path: Path) -> None:
        config = Config(initial_version="1.0.0")
        assert calculate_version(config, VersionQuery(path=tmp_path)) == "1.0.0"

    def test_initial_version_gains_prerelease(self, tmp_path: Path) -> None:
        query = VersionQuery(path=tmp_path, prerelease_identifier="beta")
        assert calculate_version(Config(), query) == "0.1.0-beta.0"

    def test_manifest_version_without_type(self, tmp_path: Path) -> None:
        write_package_json(tmp_path, "app", "1.4.0")
        assert calculate_version(Config(), VersionQuery(path=tmp_path)) == "1.4.0"

    def test_manifest_version_bumped_by_explicit_type(self, tmp_path: Path) -> None:
        write_package_json(tmp_path, "app", "1.4.0")
        query = VersionQuery(path=tmp_path, release_type=ReleaseType.MINOR)
        assert calculate_version(Config(), query) == "1.5.0"

    @patch("semtag.release_type.current_branch")
    def test_manifest_version_bumped_by_branch(
        self, mock_current: MagicMock, tmp_path: Path
    ) -> None:
        mock_current.return_value = "release/next"
        write_package_json(tmp_path, "app", "1.4.0")
        query = VersionQuery(path=tmp_path, branch_pattern=["release/.*:major"])

        assert calculate_version(Config(), query) == "2.0.0"

    @patch("semtag.release_type.commits_since")
    def test_commit_history_not_consulted(self, mock_since: MagicMock, tmp_path: Path) -> None:
        calculate_version(Config(), VersionQuery(path=tmp_path))
        mock_since.assert_not_called()


class TestInvalidManifestVersion:
    @pytest.mark.parametrize(
        "strategy", [MismatchStrategy.PREFER_GIT, MismatchStrategy.IGNORE]
    )
    @pytest.mark.parametrize("manifest_version", ["1.3.0a1", "latest"])
    def test_lenient_policies_continue_from_tag(
        self, strategy: MismatchStrategy, manifest_version: str, tmp_path: Path
    ) -> None:
        write_pyproject(tmp_path, "app", manifest_version)
        query = VersionQuery(
            latest_tag="v1.2.3", release_type=ReleaseType.PATCH, path=tmp_path, tag_prefix="v"
        )

        assert calculate_version(Config(mismatch_strategy=strategy), query) == "1.2.4"

    def test_short_manifest_version_is_padded(self, tmp_path: Path) -> None:
        write_package_json(tmp_path, "app", "1.2")
        query = VersionQuery(
            latest_tag="v1.2.3", release_type=ReleaseType.PATCH, path=tmp_path, tag_prefix="v"
        )

        assert calculate_version(Config(mismatch_strategy=MismatchStrategy.IGNORE), query) == "1.2.4"

    @pytest.mark.parametrize(
        "strategy", [MismatchStrategy.PREFER_PACKAGE, MismatchStrategy.ERROR]
    )
    def test_strict_policies_raise(self, strategy: MismatchStrategy, tmp_path: Path) -> None:
        write_package_json(tmp_path, "app", "latest")
        query = VersionQuery(
            latest_tag="v1.0.0", release_type=ReleaseType.PATCH, path=tmp_path, tag_prefix="v"
        )

        with pytest.raises(VersionCalculationError, match="Invalid version 'latest'"):
            calculate_version(Config(mismatch_strategy=strategy), query)

    def test_first_release(self, tmp_path: Path) -> None:
        write_package_json(tmp_path, "app", "latest")

        with pytest.raises(VersionCalculationError, match="Invalid version 'latest'"):
            calculate_version(Config(), VersionQuery(path=tmp_path))

    def test_first_release_pads_short_version(self, tmp_path: Path) -> None:
        write_package_json(tmp_path, "app", "2")
        assert calculate_version(Config(), VersionQuery(path=tmp_path)) == "2.0.0"


class TestCustomTagTemplates:
    def test_package_template(self, tmp_path: Path) -> None:
        config = Config(package_tag_template="${prefix}${packageName}-${version}")
        query = VersionQuery(
            latest_tag="vui-1.0.0",
            release_type=ReleaseType.MINOR,
            path=tmp_path,
            name="ui",
            tag_prefix="v",
        )

        assert calculate_version(config, query) == "1.1.0"

    def test_tag_not_from_template_raises(self, tmp_path: Path) -> None:
        config = Config(tag_template="release-${version}")
        query = VersionQuery(
            latest_tag="v1.0.0", release_type=ReleaseType.PATCH, path=tmp_path, tag_prefix="v"
        )

        with pytest.raises(VersionCalculationError, match="v1.0.0"):
            calculate_version(config, query)
