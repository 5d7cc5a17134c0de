"""Minimum repository age -- token parsing, cutoff dates and the stepper."""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum

logger = logging.getLogger(__name__)


class AgeParseError(ValueError):
	"""Raised for an age token that is not `<integer><y|m>`."""


class AgeUnit(str, Enum):
	MONTHS = "m"
	YEARS = "y"

	@property
	def noun(self) -> str:
		return "month" if self is AgeUnit.MONTHS else "year"

	@property
	def minimum(self) -> int:
		return 1

	@property
	def maximum(self) -> int:
		return 11 if self is AgeUnit.MONTHS else 10

	def clamp(self, magnitude: int) -> int:
		return max(self.minimum, min(magnitude, self.maximum))


def _today() -> date:
	return datetime.now(timezone.utc).date()


def _subtract_months(day: date, months: int) -> date:
	"""Step back whole calendar months, clamping to the target month's last day."""
	total = day.year * 12 + (day.month - 1) - months
	year, month = divmod(total, 12)
	month += 1
	last_day = calendar.monthrange(year, month)[1]
	return day.replace(year=year, month=month, day=min(day.day, last_day))


@dataclass(frozen=True)
class Age:
	magnitude: int
	unit: AgeUnit

	def display(self) -> str:
		suffix = "" if self.magnitude == 1 else "s"
		return f"{self.magnitude} {self.unit.noun}{suffix}"

	def cutoff_date(self, today: date | None = None) -> date:
		"""Absolute date `magnitude` units before `today` (UTC today by default)."""
		today = today or _today()
		if self.unit is AgeUnit.YEARS:
			year = today.year - self.magnitude
			if (today.month, today.day) == (2, 29) and not calendar.isleap(year):
				logger.debug("No Feb 29 in year %d, keeping %s", year, today)
				return today
			return today.replace(year=year)
		return _subtract_months(today, self.magnitude)


def _max_magnitude(unit: AgeUnit, today: date) -> int:
	"""Largest magnitude whose cutoff is still on or after Jan 1 of year 1."""
	if unit is AgeUnit.YEARS:
		return today.year - 1
	return (today.year - 1) * 12 + today.month - 1


def parse_age(token: str, today: date | None = None) -> Age:
	"""Parse a compact age token such as `8y` or `6m`.

	`today` anchors the range check and defaults to the UTC date.

	Raises:
		AgeParseError: On empty input, a non-numeric or zero magnitude, a
			magnitude reaching back before year 1, or an unknown unit suffix.
	"""
	text = token.strip().lower()
	if not text:
		raise AgeParseError("Age cannot be empty")

	number, suffix = text[:-1], text[-1]
	try:
		unit = AgeUnit(suffix)
	except ValueError:
		raise AgeParseError(
			f"Invalid age unit '{suffix}'. Use 'y' for years or 'm' for months (e.g. '8y', '6m')"
		) from None

	if not number.isascii() or not number.isdigit():
		raise AgeParseError(f"Invalid number in age: '{number}'")
	magnitude = int(number)
	if magnitude == 0:
		raise AgeParseError("Age must be at least 1")
	limit = _max_magnitude(unit, today or _today())
	if magnitude > limit:
		raise AgeParseError(f"Age too large: at most {limit} {unit.noun}s")
	return Age(magnitude, unit)


class AgeStepper:
	"""Interactive magnitude/unit picker state."""

	def __init__(self, magnitude: int = 2, unit: AgeUnit = AgeUnit.YEARS) -> None:
		self.unit = unit
		self.magnitude = unit.clamp(magnitude)

	@property
	def value(self) -> Age:
		return Age(self.magnitude, self.unit)

	def increment(self) -> None:
		self.magnitude = self.unit.clamp(self.magnitude + 1)

	def decrement(self) -> None:
		self.magnitude = self.unit.clamp(self.magnitude - 1)

	def set_unit(self, unit: AgeUnit) -> None:
		self.unit = unit
		self.magnitude = min(self.magnitude, unit.maximum)

	def toggle_unit(self) -> None:
		self.set_unit(AgeUnit.YEARS if self.unit is AgeUnit.MONTHS else AgeUnit.MONTHS)
