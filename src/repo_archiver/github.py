"""GitHub CLI wrappers -- list repositories and archive one."""

from __future__ import annotations

import logging
import subprocess

from pydantic import TypeAdapter, ValidationError

from repo_archiver.config import ArchiverConfig
from repo_archiver.constants import REPO_JSON_FIELDS
from repo_archiver.models import Repository

logger = logging.getLogger(__name__)

_REPO_LIST = TypeAdapter(list[Repository])


class FetchError(RuntimeError):
	"""The repository list could not be obtained or decoded."""


def _run_gh(config: ArchiverConfig, *args: str) -> subprocess.CompletedProcess[bytes]:
	"""Run `gh` with captured output.

	Raises:
		OSError: If the binary cannot be started.
		subprocess.TimeoutExpired: If the command outlives `config.gh_timeout`.
	"""
	cmd = [config.gh_binary, *args]
	logger.debug("Executing: %s", " ".join(cmd))
	result = subprocess.run(cmd, capture_output=True, timeout=config.gh_timeout, check=False)
	if result.stderr:
		logger.debug("gh stderr: %s", result.stderr.decode("utf-8", errors="replace").strip())
	return result


def decode_repositories(payload: bytes | str) -> list[Repository]:
	try:
		return _REPO_LIST.validate_json(payload)
	except ValidationError as exc:
		raise FetchError(f"Could not decode gh output: {exc}") from exc


def fetch_repositories(config: ArchiverConfig) -> list[Repository]:
	"""List the user's non-archived source repositories (up to `config.limit`)."""
	try:
		result = _run_gh(
			config,
			"repo", "list",
			"--source",
			"--no-archived",
			"--limit", str(config.limit),
			"--json", REPO_JSON_FIELDS,
		)
	except OSError as exc:
		raise FetchError(f"Failed to run {config.gh_binary} CLI. Is it installed? ({exc})") from exc
	except subprocess.TimeoutExpired as exc:
		raise FetchError(f"gh repo list timed out after {config.gh_timeout}s") from exc

	if result.returncode != 0:
		stderr = result.stderr.decode("utf-8", errors="replace").strip()
		raise FetchError(f"gh command failed: {stderr}")

	repos = decode_repositories(result.stdout)
	logger.debug("gh returned %d repositories", len(repos))
	return repos


def archive_repository(name: str, config: ArchiverConfig) -> subprocess.CompletedProcess[bytes]:
	"""Archive `name` through `gh repo archive --yes`.

	Raises OSError or subprocess.TimeoutExpired when gh could not run to
	completion; a non-zero exit is reported through the returned result.
	"""
	return _run_gh(config, "repo", "archive", name, "--yes")
