"""Shared fixtures for repo-archiver tests."""

from __future__ import annotations

import pytest

from repo_archiver.config import ArchiverConfig


@pytest.fixture()
def fast_config() -> ArchiverConfig:
	"""Config with every delay zeroed so batches finish immediately."""
	return ArchiverConfig(
		dry_run=False,
		dry_run_delay=0.0,
		inter_item_delay=0.0,
		poll_timeout=0.001,
		spinner_interval=0.0,
	)
