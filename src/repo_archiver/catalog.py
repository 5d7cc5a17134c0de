"""Repository catalog -- age filtering plus per-item selection and status."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date

from repo_archiver.constants import EVENT_COMPLETED, EVENT_FAILED, EVENT_STARTED
from repo_archiver.models import ArchiveEvent, Repository, RepoStatus, StatusKind

logger = logging.getLogger(__name__)


def filter_repositories(repos: Iterable[Repository], cutoff: date) -> list[Repository]:
	"""Keep repositories created strictly before `cutoff`, oldest first.

	A repository whose creation date cannot be parsed does not qualify.
	"""
	kept: list[Repository] = []
	for repo in repos:
		created = repo.created_date
		if created is None:
			logger.debug("Skipping %s: unparseable creation date %r", repo.name, repo.created_at)
			continue
		if created < cutoff:
			kept.append(repo)
	kept.sort(key=lambda r: r.created_at)
	return kept


def _status_for(event: ArchiveEvent) -> RepoStatus:
	if event.kind == EVENT_STARTED:
		return RepoStatus.in_progress()
	if event.kind == EVENT_COMPLETED:
		return RepoStatus.succeeded()
	if event.kind == EVENT_FAILED:
		return RepoStatus.failed(event.message)
	raise ValueError(f"Unknown archive event kind: {event.kind}")


@dataclass
class CatalogItem:
	repo: Repository
	selected: bool = False
	status: RepoStatus = field(default_factory=RepoStatus.idle)


class Catalog:
	"""Ordered repositories with a wrapping cursor and per-item UI state."""

	def __init__(self, repos: Iterable[Repository]) -> None:
		self.items = [CatalogItem(repo) for repo in repos]
		self.cursor: int | None = 0 if self.items else None

	def __len__(self) -> int:
		return len(self.items)

	@property
	def current(self) -> CatalogItem | None:
		if self.cursor is None:
			return None
		return self.items[self.cursor]

	def move_down(self) -> None:
		if not self.items:
			return
		self.cursor = 0 if self.cursor is None else (self.cursor + 1) % len(self.items)

	def move_up(self) -> None:
		if not self.items:
			return
		self.cursor = 0 if self.cursor is None else (self.cursor - 1) % len(self.items)

	def toggle_at_cursor(self) -> None:
		item = self.current
		if item is None or item.status.kind is not StatusKind.IDLE:
			return
		item.selected = not item.selected

	@property
	def selected_count(self) -> int:
		return sum(1 for item in self.items if item.selected)

	def capture_selection(self) -> list[tuple[int, str]]:
		"""Snapshot of the selected (index, name) pairs in catalog order."""
		return [(i, item.repo.name) for i, item in enumerate(self.items) if item.selected]

	def mark_pending(self, batch: Iterable[tuple[int, str]]) -> None:
		for index, _ in batch:
			item = self.items[index]
			if item.status.can_advance_to(RepoStatus.pending()):
				item.status = RepoStatus.pending()

	def apply(self, event: ArchiveEvent) -> bool:
		"""Apply an executor event as a forward status transition.

		Returns False (and leaves the item untouched) for an out-of-range index
		or a transition that would move the status backwards.
		"""
		if not 0 <= event.index < len(self.items):
			logger.warning("Archive event for unknown index %d (%s)", event.index, event.name)
			return False
		item = self.items[event.index]
		new_status = _status_for(event)
		if not item.status.can_advance_to(new_status):
			logger.warning(
				"Ignoring %s event for %s: already %s",
				event.kind, item.repo.name, item.status.kind.value,
			)
			return False
		item.status = new_status
		return True

	def batch_done(self, batch: Iterable[tuple[int, str]]) -> bool:
		return all(self.items[index].status.is_terminal for index, _ in batch)

	def counts(self) -> dict[str, int]:
		"""Succeeded / failed / in-flight totals across the catalog."""
		succeeded = failed = in_flight = 0
		for item in self.items:
			kind = item.status.kind
			if kind is StatusKind.SUCCEEDED:
				succeeded += 1
			elif kind is StatusKind.FAILED:
				failed += 1
			elif kind in (StatusKind.PENDING, StatusKind.IN_PROGRESS):
				in_flight += 1
		return {"succeeded": succeeded, "failed": failed, "in_flight": in_flight}

	def failures(self) -> list[CatalogItem]:
		return [item for item in self.items if item.status.kind is StatusKind.FAILED]
