"""Runtime configuration built from command-line flags."""

from __future__ import annotations

import argparse
import shutil
from dataclasses import dataclass

from repo_archiver.constants import (
	DEFAULT_REPO_LIMIT,
	DRY_RUN_DELAY,
	GH_BINARY,
	INPUT_POLL_TIMEOUT,
	INTER_ITEM_DELAY,
	SPINNER_INTERVAL,
)


@dataclass
class ArchiverConfig:
	"""Settings for one archive session."""

	dry_run: bool = False
	age: str | None = None  # compact token such as "8y"; None shows the picker
	limit: int = DEFAULT_REPO_LIMIT
	gh_binary: str = GH_BINARY
	dry_run_delay: float = DRY_RUN_DELAY
	inter_item_delay: float = INTER_ITEM_DELAY
	gh_timeout: float = 120.0
	poll_timeout: float = INPUT_POLL_TIMEOUT
	spinner_interval: float = SPINNER_INTERVAL
	verbose: bool = False
	log_file: str | None = None

	@classmethod
	def from_args(cls, args: argparse.Namespace) -> ArchiverConfig:
		return cls(
			dry_run=args.dry_run,
			age=args.age,
			limit=args.limit,
			verbose=args.verbose,
			log_file=args.log_file,
		)


def validate_config(config: ArchiverConfig) -> list[tuple[str, str]]:
	"""Return (level, message) pairs; level is "error" or "warning"."""
	issues: list[tuple[str, str]] = []

	if config.limit <= 0:
		issues.append(("error", f"limit must be positive, got {config.limit}"))
	elif config.limit > 1000:
		issues.append(("warning", f"limit {config.limit} is large; gh may take a while to list repositories"))

	if shutil.which(config.gh_binary) is None:
		issues.append(("error", f"GitHub CLI not found: '{config.gh_binary}'. Is it installed?"))

	if config.inter_item_delay < 0.05:
		issues.append(("warning", f"inter_item_delay {config.inter_item_delay}s may trip GitHub rate limits"))

	if config.poll_timeout <= 0 or config.poll_timeout >= 0.1:
		issues.append(("warning", f"poll_timeout {config.poll_timeout}s should be between 0 and 0.1s"))

	return issues
