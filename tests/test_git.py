#!/usr/bin/env python3
# this_file: tests/test_git.py
"""Tests for the git command wrapper."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from envtag.git import GitError, GitRepository


def _completed(stdout: str = "") -> MagicMock:
    result = MagicMock()
    result.stdout = stdout
    return result


class TestListTags:
    """Tag listing keeps git's order and drops blank lines."""

    @patch("subprocess.run")
    def test_list_tags_when_output_then_lines_in_order(self, mock_run, tmp_path: Path):
        mock_run.return_value = _completed("dev-v1.0.10-20240102\ndev-v1.0.9-20240101\n\n")

        tags = GitRepository(tmp_path).list_tags()

        assert tags == ["dev-v1.0.10-20240102", "dev-v1.0.9-20240101"]
        mock_run.assert_called_once_with(
            ["git", "tag", "--list", "--sort=refname"], cwd=tmp_path, capture_output=True, text=True, check=True
        )

    @patch("subprocess.run")
    def test_list_tags_when_empty_then_empty_list(self, mock_run, tmp_path: Path):
        mock_run.return_value = _completed("")

        assert GitRepository(tmp_path).list_tags() == []


class TestErrors:
    """Failures surface as :class:`GitError` with the command and stderr."""

    @patch("subprocess.run")
    def test_create_tag_when_exists_then_git_error(self, mock_run, tmp_path: Path):
        mock_run.side_effect = subprocess.CalledProcessError(
            128, ["git", "tag", "prod-v1.0.0-20230101"], stderr="fatal: tag already exists\n"
        )

        with pytest.raises(GitError) as excinfo:
            GitRepository(tmp_path).create_tag("prod-v1.0.0-20230101")

        assert excinfo.value.command == ["git", "tag", "prod-v1.0.0-20230101"]
        assert excinfo.value.stderr == "fatal: tag already exists"
        assert "already exists" in str(excinfo.value)

    @patch("subprocess.run")
    def test_run_when_git_missing_then_git_error(self, mock_run, tmp_path: Path):
        mock_run.side_effect = FileNotFoundError("git")

        with pytest.raises(GitError, match="not found"):
            GitRepository(tmp_path).list_tags()


class TestRepositoryState:
    """Work-tree detection and cleanliness checks."""

    @patch("subprocess.run")
    def test_is_repository_when_inside_work_tree_then_true(self, mock_run, tmp_path: Path):
        mock_run.return_value = _completed("true\n")

        assert GitRepository(tmp_path).is_repository()

    @patch("subprocess.run")
    def test_is_repository_when_git_fails_then_false(self, mock_run, tmp_path: Path):
        mock_run.side_effect = subprocess.CalledProcessError(128, "git", stderr="not a git repo")

        assert not GitRepository(tmp_path).is_repository()

    @patch("subprocess.run")
    def test_is_clean_when_status_output_then_false(self, mock_run, tmp_path: Path):
        mock_run.return_value = _completed(" M package.json\n")

        assert not GitRepository(tmp_path).is_clean()


class TestPush:
    """Pushing the branch and, optionally, the created tags."""

    @patch("subprocess.run")
    def test_push_when_remote_missing_then_plain_push(self, mock_run, tmp_path: Path):
        mock_run.return_value = _completed()

        GitRepository(tmp_path).push()

        assert mock_run.call_args[0][0] == ["git", "push"]

    @patch("subprocess.run")
    def test_push_when_remote_given_then_pushes_to_it(self, mock_run, tmp_path: Path):
        mock_run.return_value = _completed()

        GitRepository(tmp_path).push("upstream")

        assert mock_run.call_args[0][0] == ["git", "push", "upstream"]

    @patch("subprocess.run")
    def test_push_tags_when_names_then_origin_by_default(self, mock_run, tmp_path: Path):
        mock_run.return_value = _completed()

        GitRepository(tmp_path).push_tags(["prod-v1.0.0-20230101", "dev-v0.0.1-20230101"])

        assert mock_run.call_args[0][0] == [
            "git",
            "push",
            "origin",
            "prod-v1.0.0-20230101",
            "dev-v0.0.1-20230101",
        ]

    @patch("subprocess.run")
    def test_push_tags_when_no_names_then_nothing_run(self, mock_run, tmp_path: Path):
        GitRepository(tmp_path).push_tags([])

        mock_run.assert_not_called()
