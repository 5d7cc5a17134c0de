"""Data models for the archive session."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Repository(BaseModel):
	"""A repository as reported by `gh repo list --json`."""

	model_config = ConfigDict(frozen=True, populate_by_name=True)

	name: str
	created_at: str = Field(alias="createdAt")
	pushed_at: str = Field(alias="pushedAt")
	description: str | None = None

	@property
	def created_day(self) -> str:
		return self.created_at[:10]

	@property
	def pushed_day(self) -> str:
		return self.pushed_at[:10]

	@property
	def created_date(self) -> date | None:
		"""Creation date from the first 10 characters, None if unparseable."""
		try:
			return datetime.strptime(self.created_day, "%Y-%m-%d").date()
		except ValueError:
			return None


class StatusKind(str, Enum):
	IDLE = "idle"
	PENDING = "pending"
	IN_PROGRESS = "in_progress"
	SUCCEEDED = "succeeded"
	FAILED = "failed"


# Position in the forward-only lifecycle; both terminal kinds share a rank.
_STATUS_RANK: dict[StatusKind, int] = {
	StatusKind.IDLE: 0,
	StatusKind.PENDING: 1,
	StatusKind.IN_PROGRESS: 2,
	StatusKind.SUCCEEDED: 3,
	StatusKind.FAILED: 3,
}


@dataclass(frozen=True)
class RepoStatus:
	"""Execution lifecycle of one repository.

	Tagged by `kind`; `message` carries the diagnostic text of a failure and
	is empty for every other kind. Equality compares tag plus payload.
	"""

	kind: StatusKind = StatusKind.IDLE
	message: str = ""

	@classmethod
	def idle(cls) -> RepoStatus:
		return cls(StatusKind.IDLE)

	@classmethod
	def pending(cls) -> RepoStatus:
		return cls(StatusKind.PENDING)

	@classmethod
	def in_progress(cls) -> RepoStatus:
		return cls(StatusKind.IN_PROGRESS)

	@classmethod
	def succeeded(cls) -> RepoStatus:
		return cls(StatusKind.SUCCEEDED)

	@classmethod
	def failed(cls, message: str) -> RepoStatus:
		return cls(StatusKind.FAILED, message)

	@property
	def is_terminal(self) -> bool:
		return self.kind in (StatusKind.SUCCEEDED, StatusKind.FAILED)

	def can_advance_to(self, other: RepoStatus) -> bool:
		if self.is_terminal:
			return False
		return _STATUS_RANK[other.kind] > _STATUS_RANK[self.kind]


@dataclass(frozen=True)
class ArchiveEvent:
	"""Lifecycle event sent from the executor to the render loop."""

	kind: str  # started/completed/failed
	index: int
	name: str = ""
	message: str = ""


class Mode(str, Enum):
	BROWSING = "browsing"
	CONFIRMING = "confirming"
	EXECUTING = "executing"
	FINISHED = "finished"


class ConfirmChoice(str, Enum):
	CANCEL = "cancel"
	PROCEED = "proceed"
