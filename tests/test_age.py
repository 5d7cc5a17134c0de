"""Tests for age token parsing, cutoff dates and the stepper."""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from repo_archiver.age import Age, AgeParseError, AgeStepper, AgeUnit, parse_age


class TestParseAge:
	@pytest.mark.parametrize(("token", "expected"), [
		("8y", Age(8, AgeUnit.YEARS)),
		("6m", Age(6, AgeUnit.MONTHS)),
		(" 3Y ", Age(3, AgeUnit.YEARS)),
		("24m", Age(24, AgeUnit.MONTHS)),
		("1y", Age(1, AgeUnit.YEARS)),
	])
	def test_valid_tokens(self, token: str, expected: Age) -> None:
		assert parse_age(token) == expected

	@pytest.mark.parametrize("token", ["", "   ", "y", "m", "abcy", "8d", "8", "-3y", "+3y", "1.5y", "0y", "０y", "8 y x"])
	def test_invalid_tokens_raise_parse_error(self, token: str) -> None:
		with pytest.raises(AgeParseError):
			parse_age(token)

	def test_parse_error_is_value_error(self) -> None:
		with pytest.raises(ValueError):
			parse_age("nope")

	def test_unit_error_mentions_suffix(self) -> None:
		with pytest.raises(AgeParseError, match="'d'"):
			parse_age("8d")

	@pytest.mark.parametrize("token", ["1m", "6m", "11m", "1y", "2y", "10y", "30y"])
	def test_cutoff_strictly_before_today(self, token: str) -> None:
		today = datetime.now(timezone.utc).date()
		assert parse_age(token).cutoff_date() < today

	@pytest.mark.parametrize("token", ["2026y", "99999999m", "24310m"])
	def test_magnitude_beyond_year_one_rejected(self, token: str) -> None:
		with pytest.raises(AgeParseError, match="too large"):
			parse_age(token, today=date(2026, 10, 19))

	@pytest.mark.parametrize("token", ["2025y", "24309m"])
	def test_largest_magnitudes_reach_year_one(self, token: str) -> None:
		today = date(2026, 10, 19)
		cutoff = parse_age(token, today=today).cutoff_date(today)
		assert cutoff.year == 1
		assert cutoff < today

	@pytest.mark.parametrize(("token", "noun"), [
		("1y", "1 year"),
		("2y", "2 years"),
		("1m", "1 month"),
		("6m", "6 months"),
	])
	def test_display_keeps_magnitude_and_plural(self, token: str, noun: str) -> None:
		assert parse_age(token).display() == noun


class TestCutoffDate:
	def test_years(self) -> None:
		assert Age(2, AgeUnit.YEARS).cutoff_date(date(2024, 1, 1)) == date(2022, 1, 1)

	def test_years_from_leap_day_falls_back(self) -> None:
		leap = date(2024, 2, 29)
		assert Age(1, AgeUnit.YEARS).cutoff_date(leap) == leap

	def test_years_from_ordinary_day_never_falls_back(self) -> None:
		assert Age(5, AgeUnit.YEARS).cutoff_date(date(2024, 2, 28)) == date(2019, 2, 28)

	def test_years_from_leap_day_to_leap_year(self) -> None:
		assert Age(4, AgeUnit.YEARS).cutoff_date(date(2024, 2, 29)) == date(2020, 2, 29)

	def test_months_across_year_boundary(self) -> None:
		assert Age(2, AgeUnit.MONTHS).cutoff_date(date(2024, 1, 15)) == date(2023, 11, 15)

	def test_months_clamps_day(self) -> None:
		assert Age(1, AgeUnit.MONTHS).cutoff_date(date(2024, 3, 31)) == date(2024, 2, 29)
		assert Age(1, AgeUnit.MONTHS).cutoff_date(date(2023, 3, 31)) == date(2023, 2, 28)

	def test_many_months(self) -> None:
		assert Age(24, AgeUnit.MONTHS).cutoff_date(date(2024, 6, 10)) == date(2022, 6, 10)


class TestAgeStepper:
	def test_defaults(self) -> None:
		stepper = AgeStepper()
		assert stepper.value == Age(2, AgeUnit.YEARS)

	def test_increment_clamps_years(self) -> None:
		stepper = AgeStepper()
		for _ in range(20):
			stepper.increment()
		assert stepper.magnitude == 10

	def test_increment_clamps_months(self) -> None:
		stepper = AgeStepper(unit=AgeUnit.MONTHS)
		for _ in range(20):
			stepper.increment()
		assert stepper.magnitude == 11

	def test_decrement_clamps_to_one(self) -> None:
		stepper = AgeStepper()
		for _ in range(20):
			stepper.decrement()
		assert stepper.magnitude == 1

	def test_months_to_years_clamps_down(self) -> None:
		stepper = AgeStepper(11, AgeUnit.MONTHS)
		stepper.toggle_unit()
		assert stepper.value == Age(10, AgeUnit.YEARS)

	def test_years_to_months_keeps_value(self) -> None:
		stepper = AgeStepper(10, AgeUnit.YEARS)
		stepper.set_unit(AgeUnit.MONTHS)
		assert stepper.value == Age(10, AgeUnit.MONTHS)

	def test_initial_magnitude_clamped(self) -> None:
		assert AgeStepper(50, AgeUnit.YEARS).magnitude == 10

	@pytest.mark.parametrize("unit", list(AgeUnit))
	def test_unit_switch_never_raises_value(self, unit: AgeUnit) -> None:
		for magnitude in range(unit.minimum, unit.maximum + 1):
			for target in AgeUnit:
				stepper = AgeStepper(magnitude, unit)
				stepper.set_unit(target)
				assert stepper.magnitude <= magnitude
				assert target.minimum <= stepper.magnitude <= target.maximum

	def test_mixed_steps_stay_in_range(self) -> None:
		stepper = AgeStepper()
		moves = [stepper.increment] * 12 + [stepper.toggle_unit] + [stepper.increment] * 3 + [stepper.toggle_unit]
		moves += [stepper.decrement] * 15
		for move in moves:
			move()
			unit = stepper.unit
			assert unit.minimum <= stepper.magnitude <= unit.maximum
