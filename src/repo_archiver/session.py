"""Selection and navigation state machine for one interactive session.

The session owns the catalog, the mode and the confirmation choice. All
mutation goes through `handle_key` (one key per input cycle) and
`apply_event` / `drain` (executor events), both called only from the render
loop.
"""

from __future__ import annotations

import logging
import queue
from enum import Enum

from repo_archiver.catalog import Catalog
from repo_archiver.constants import (
	KEY_CTRL_C,
	KEY_DOWN,
	KEY_ENTER,
	KEY_ESC,
	KEY_LEFT,
	KEY_RIGHT,
	KEY_SPACE,
	KEY_TAB,
	KEY_UP,
)
from repo_archiver.models import ArchiveEvent, ConfirmChoice, Mode

logger = logging.getLogger(__name__)


class Action(str, Enum):
	"""What the render loop must do after a key was handled."""

	NONE = "none"
	QUIT = "quit"
	START = "start"


class Session:
	def __init__(self, catalog: Catalog, dry_run: bool = False) -> None:
		self.catalog = catalog
		self.dry_run = dry_run
		self.mode = Mode.BROWSING
		self.choice = ConfirmChoice.PROCEED
		self.batch: list[tuple[int, str]] = []

	def handle_key(self, key: str) -> Action:
		if key == KEY_CTRL_C:
			return Action.QUIT
		if self.mode is Mode.BROWSING:
			return self._handle_browsing(key)
		if self.mode is Mode.CONFIRMING:
			return self._handle_confirming(key)
		if self.mode is Mode.EXECUTING:
			return self._handle_executing(key)
		return self._handle_finished(key)

	def _handle_browsing(self, key: str) -> Action:
		if key in ("q", KEY_ESC):
			return Action.QUIT
		if key in (KEY_DOWN, "j"):
			self.catalog.move_down()
		elif key in (KEY_UP, "k"):
			self.catalog.move_up()
		elif key in (KEY_SPACE, KEY_TAB):
			self.catalog.toggle_at_cursor()
		elif key == KEY_ENTER:
			self.request_confirmation()
		return Action.NONE

	def _handle_confirming(self, key: str) -> Action:
		if key in (KEY_LEFT, "h"):
			self.choice = ConfirmChoice.CANCEL
		elif key in (KEY_RIGHT, "l"):
			self.choice = ConfirmChoice.PROCEED
		elif key == KEY_TAB:
			self.choice = (
				ConfirmChoice.CANCEL if self.choice is ConfirmChoice.PROCEED else ConfirmChoice.PROCEED
			)
		elif key == KEY_ENTER:
			if self.choice is ConfirmChoice.PROCEED:
				return self.proceed()
			self.mode = Mode.BROWSING
		elif key == "y":
			return self.proceed()
		elif key in ("n", KEY_ESC):
			self.mode = Mode.BROWSING
		return Action.NONE

	def _handle_executing(self, key: str) -> Action:
		if key == "q":
			return Action.QUIT
		if key in (KEY_DOWN, "j"):
			self.catalog.move_down()
		elif key in (KEY_UP, "k"):
			self.catalog.move_up()
		return Action.NONE

	def _handle_finished(self, key: str) -> Action:
		if key in ("q", KEY_ESC, KEY_ENTER):
			return Action.QUIT
		return Action.NONE

	def request_confirmation(self) -> bool:
		"""Open the confirmation modal; refused while nothing is selected."""
		if self.mode is not Mode.BROWSING or self.catalog.selected_count == 0:
			return False
		self.choice = ConfirmChoice.PROCEED
		self.mode = Mode.CONFIRMING
		return True

	def proceed(self) -> Action:
		"""Capture the selection, mark it pending and enter EXECUTING."""
		self.batch = self.catalog.capture_selection()
		self.catalog.mark_pending(self.batch)
		self.mode = Mode.EXECUTING
		logger.info("Archiving %d repositories (dry_run=%s)", len(self.batch), self.dry_run)
		return Action.START

	def apply_event(self, event: ArchiveEvent) -> None:
		self.catalog.apply(event)
		if self.mode is Mode.EXECUTING and self.catalog.batch_done(self.batch):
			counts = self.catalog.counts()
			logger.info("Batch finished: %d succeeded, %d failed", counts["succeeded"], counts["failed"])
			self.mode = Mode.FINISHED

	def drain(self, events: queue.Queue[ArchiveEvent]) -> int:
		"""Apply every currently buffered event in arrival order."""
		applied = 0
		while True:
			try:
				event = events.get_nowait()
			except queue.Empty:
				break
			self.apply_event(event)
			applied += 1
		return applied

	@property
	def done_count(self) -> int:
		return sum(1 for index, _ in self.batch if self.catalog.items[index].status.is_terminal)
