"""Archive executor -- serially archive a captured batch on a background thread."""

from __future__ import annotations

import logging
import queue
import subprocess
import threading
import time

from repo_archiver import github
from repo_archiver.config import ArchiverConfig
from repo_archiver.constants import EVENT_COMPLETED, EVENT_FAILED, EVENT_STARTED
from repo_archiver.models import ArchiveEvent

logger = logging.getLogger(__name__)


class ArchiveExecutor:
	"""Archives repositories one at a time and reports through an event queue.

	The executor never touches session state; the queue is its only output.
	Items run strictly in captured order with a fixed pause after each one,
	and a failed item never stops the rest of the batch.

	The worker is a daemon thread: quitting the UI neither waits for it nor
	cancels it, so a `gh` call already in flight finishes on its own.
	"""

	def __init__(self, config: ArchiverConfig, events: queue.Queue[ArchiveEvent]) -> None:
		self.config = config
		self.events = events
		self._thread: threading.Thread | None = None

	def start(self, batch: list[tuple[int, str]]) -> threading.Thread:
		"""Run `batch` on the worker thread. Only one batch per executor."""
		if self._thread is not None:
			raise RuntimeError("Archive executor already started")
		self._thread = threading.Thread(
			target=self.run, args=(list(batch),), daemon=True, name="ArchiveExecutor",
		)
		self._thread.start()
		return self._thread

	def run(self, batch: list[tuple[int, str]]) -> None:
		for index, name in batch:
			self.events.put(ArchiveEvent(EVENT_STARTED, index, name))
			self.events.put(self._archive_one(index, name))
			time.sleep(self.config.inter_item_delay)

	def _archive_one(self, index: int, name: str) -> ArchiveEvent:
		if self.config.dry_run:
			time.sleep(self.config.dry_run_delay)
			logger.debug("Dry run: would archive %s", name)
			return ArchiveEvent(EVENT_COMPLETED, index, name)

		try:
			result = github.archive_repository(name, self.config)
		except subprocess.TimeoutExpired:
			message = f"gh repo archive timed out after {self.config.gh_timeout}s"
			logger.info("Archive of %s failed: %s", name, message)
			return ArchiveEvent(EVENT_FAILED, index, name, message)
		except OSError as exc:
			logger.info("Archive of %s failed: %s", name, exc)
			return ArchiveEvent(EVENT_FAILED, index, name, str(exc))

		if result.returncode == 0:
			logger.debug("Archived %s", name)
			return ArchiveEvent(EVENT_COMPLETED, index, name)

		message = result.stderr.decode("utf-8", errors="replace").strip()
		if not message:
			message = f"gh exited with status {result.returncode}"
		logger.info("Archive of %s failed: %s", name, message)
		return ArchiveEvent(EVENT_FAILED, index, name, message)
