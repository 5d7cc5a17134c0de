"""CLI entry point for repo-archiver."""

from __future__ import annotations

import argparse
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler

from repo_archiver.age import AgeParseError, parse_age
from repo_archiver.catalog import Catalog, filter_repositories
from repo_archiver.config import ArchiverConfig, validate_config
from repo_archiver.constants import DEFAULT_REPO_LIMIT
from repo_archiver.github import FetchError, fetch_repositories
from repo_archiver.keys import KeyReader, TerminalError
from repo_archiver.session import Session
from repo_archiver.tui import print_summary, run_age_picker, run_session

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(
		prog="repo-archiver",
		description="Interactive CLI to archive old GitHub repos",
	)
	parser.add_argument(
		"--dry-run", action="store_true",
		help="Show what would be archived without making changes",
	)
	parser.add_argument(
		"--age", default=None,
		help="Archive repos older than this age (e.g. '8y' for 8 years, '6m' for 6 months). "
		"Without it an interactive picker is shown.",
	)
	parser.add_argument(
		"--limit", type=int, default=DEFAULT_REPO_LIMIT,
		help=f"Maximum number of repositories to list (default {DEFAULT_REPO_LIMIT})",
	)
	parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
	parser.add_argument("--log-file", default=None, help="Write logs to this file instead of stderr")
	return parser


def setup_logging(config: ArchiverConfig) -> None:
	"""Route logs to --log-file when given, otherwise to stderr through rich."""
	level = logging.DEBUG if config.verbose else logging.WARNING
	handler: logging.Handler
	if config.log_file:
		handler = logging.FileHandler(config.log_file, encoding="utf-8")
		handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
	else:
		handler = RichHandler(console=Console(stderr=True), show_path=False)
	logging.basicConfig(level=level, handlers=[handler], force=True)


def _run(config: ArchiverConfig, console: Console) -> int:
	if config.age is not None:
		age = parse_age(config.age)
	else:
		with KeyReader() as keys:
			picked = run_age_picker(keys, console)
		if picked is None:
			return 0
		age = picked

	console.print(f"Finding repos older than {age.display()}...")
	repos = filter_repositories(fetch_repositories(config), age.cutoff_date())
	if not repos:
		console.print(f"No repos found older than {age.display()}.")
		return 0

	console.print(f"Found {len(repos)} repos. Launching TUI...")
	session = Session(Catalog(repos), dry_run=config.dry_run)
	with KeyReader() as keys:
		run_session(session, keys, config, console)
	print_summary(console, session)
	return 0


def main(argv: list[str] | None = None) -> int:
	parser = build_parser()
	args = parser.parse_args(argv)
	config = ArchiverConfig.from_args(args)
	setup_logging(config)
	err = Console(stderr=True)

	# Bad tokens are reported before anything touches the terminal.
	if config.age is not None:
		try:
			parse_age(config.age)
		except AgeParseError as exc:
			err.print(f"Error: {exc}", style="red", markup=False)
			return 1

	errors = 0
	for level, msg in validate_config(config):
		if level == "error":
			err.print(f"Error: {msg}", style="red", markup=False)
			errors += 1
		else:
			logger.warning(msg)
	if errors:
		return 1

	try:
		return _run(config, Console())
	except FetchError as exc:
		err.print(f"Error: {exc}", style="red", markup=False)
		return 1
	except TerminalError as exc:
		err.print(f"Error: {exc}", style="red", markup=False)
		return 1
	except KeyboardInterrupt:
		return 130


if __name__ == "__main__":
	sys.exit(main())
