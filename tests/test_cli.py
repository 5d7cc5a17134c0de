"""Tests for the command-line entry point."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from repo_archiver.cli import build_parser, main
from repo_archiver.constants import DEFAULT_REPO_LIMIT
from repo_archiver.github import FetchError
from repo_archiver.keys import TerminalError
from repo_archiver.models import Repository


def _repo(name: str, created: str = "2015-06-01") -> Repository:
	return Repository(
		name=name,
		created_at=f"{created}T12:00:00Z" if len(created) == 10 else created,
		pushed_at=f"{created}T12:00:00Z",
	)


class TestBuildParser:
	def test_defaults(self) -> None:
		args = build_parser().parse_args([])
		assert args.dry_run is False
		assert args.age is None
		assert args.limit == DEFAULT_REPO_LIMIT
		assert args.verbose is False
		assert args.log_file is None

	def test_flags(self) -> None:
		args = build_parser().parse_args(["--dry-run", "--age", "6m", "--limit", "50"])
		assert args.dry_run is True
		assert args.age == "6m"
		assert args.limit == 50


class TestMain:
	def test_bad_age_exits_before_fetching(self, capsys: pytest.CaptureFixture[str]) -> None:
		with patch("repo_archiver.cli.fetch_repositories") as fetch:
			assert main(["--age", "8x"]) == 1
		fetch.assert_not_called()
		assert "Invalid age unit" in capsys.readouterr().err

	def test_missing_gh(self, capsys: pytest.CaptureFixture[str]) -> None:
		with (
			patch("repo_archiver.config.shutil.which", return_value=None),
			patch("repo_archiver.cli.fetch_repositories") as fetch,
		):
			assert main(["--age", "8y"]) == 1
		fetch.assert_not_called()
		assert "GitHub CLI not found" in capsys.readouterr().err

	def test_fetch_error(self, capsys: pytest.CaptureFixture[str]) -> None:
		with (
			patch("repo_archiver.config.shutil.which", return_value="/usr/bin/gh"),
			patch("repo_archiver.cli.fetch_repositories", side_effect=FetchError("gh command failed: auth required")),
		):
			assert main(["--age", "8y"]) == 1
		assert "gh command failed: auth required" in capsys.readouterr().err

	def test_no_old_repos(self, capsys: pytest.CaptureFixture[str]) -> None:
		with (
			patch("repo_archiver.config.shutil.which", return_value="/usr/bin/gh"),
			patch("repo_archiver.cli.fetch_repositories", return_value=[_repo("fresh", "2099-01-01")]),
		):
			assert main(["--age", "8y"]) == 0
		out = capsys.readouterr().out
		assert "Finding repos older than 8 years" in out
		assert "No repos found older than 8 years." in out

	def test_requires_terminal(self, capsys: pytest.CaptureFixture[str]) -> None:
		with (
			patch("repo_archiver.config.shutil.which", return_value="/usr/bin/gh"),
			patch("repo_archiver.cli.fetch_repositories", return_value=[_repo("old", "2010-01-01")]),
			patch("repo_archiver.cli.KeyReader", side_effect=TerminalError("An interactive terminal is required")),
		):
			assert main(["--age", "8y"]) == 1
		assert "An interactive terminal is required" in capsys.readouterr().err

	def test_other_runtime_errors_propagate(self) -> None:
		with (
			patch("repo_archiver.config.shutil.which", return_value="/usr/bin/gh"),
			patch("repo_archiver.cli.fetch_repositories", return_value=[_repo("old", "2010-01-01")]),
			patch("repo_archiver.cli.KeyReader", side_effect=RuntimeError("Archive executor already started")),
		):
			with pytest.raises(RuntimeError, match="already started"):
				main(["--age", "8y"])

	@pytest.mark.parametrize("age", ["99999999m", "100000y"])
	def test_age_too_large_exits_before_fetching(self, age: str, capsys: pytest.CaptureFixture[str]) -> None:
		with patch("repo_archiver.cli.fetch_repositories") as fetch:
			assert main(["--age", age]) == 1
		fetch.assert_not_called()
		assert "Age too large" in capsys.readouterr().err
