"""Catalog of the shift patterns employees can be assigned to follow."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from dispatch_scheduler.services.errors import InvalidPatternError
from dispatch_scheduler.services.rules import RuleSet, load_default_rules

FOUR_TEN = "4x10"
THREE_TWELVE_PLUS_FOUR = "3x12+4"

PATTERN_ALIASES: dict[str, str] = {
    "4x10": FOUR_TEN,
    "pattern_a": FOUR_TEN,
    "four_ten": FOUR_TEN,
    "3x12+4": THREE_TWELVE_PLUS_FOUR,
    "pattern_b": THREE_TWELVE_PLUS_FOUR,
    "3_12_plus_4": THREE_TWELVE_PLUS_FOUR,
    "three_twelve_plus_four": THREE_TWELVE_PLUS_FOUR,
}


@dataclass(frozen=True)
class ShiftPattern:
    """A weekly sequence of shift lengths, e.g. four 10-hour shifts."""

    code: str
    name: str
    shift_durations: tuple[float, ...]
    max_consecutive_shifts: int

    @property
    def total_hours(self) -> float:
        return float(sum(self.shift_durations))

    @property
    def shifts_per_week(self) -> int:
        return len(self.shift_durations)

    def expected_duration(self, shifts_worked_this_week: int) -> Optional[float]:
        """Return the length of the next shift in the sequence, or ``None`` once complete."""

        if shifts_worked_this_week < 0 or shifts_worked_this_week >= len(self.shift_durations):
            return None
        return self.shift_durations[shifts_worked_this_week]

    def allows_duration(self, duration_hours: float) -> bool:
        return any(abs(duration_hours - step) < 1e-6 for step in self.shift_durations)


def normalize_pattern_code(code: str) -> str:
    """Map legacy and alternative spellings to a catalog code."""

    normalized = PATTERN_ALIASES.get(code.strip().lower()) if code else None
    if normalized is None:
        raise InvalidPatternError(f"Invalid shift pattern: {code!r}")
    return normalized


class PatternCatalog:
    def __init__(self, patterns: Sequence[ShiftPattern]):
        self._patterns = {pattern.code: pattern for pattern in patterns}

    @classmethod
    def from_rules(cls, rule_set: RuleSet) -> "PatternCatalog":
        return cls(
            [
                ShiftPattern(
                    code=normalize_pattern_code(code),
                    name=data.name,
                    shift_durations=tuple(float(step) for step in data.shift_durations),
                    max_consecutive_shifts=data.max_consecutive_shifts,
                )
                for code, data in rule_set.rules.patterns.items()
            ]
        )

    def __iter__(self):
        return iter(self._patterns.values())

    def get(self, code: str) -> ShiftPattern:
        normalized = normalize_pattern_code(code)
        try:
            return self._patterns[normalized]
        except KeyError:
            raise InvalidPatternError(f"Shift pattern {normalized!r} is not configured") from None

    def max_consecutive_shifts(self, code: str) -> int:
        return self.get(code).max_consecutive_shifts

    def matching_patterns(self, duration_hours: float, shifts_worked_this_week: int) -> list[ShiftPattern]:
        """Return the patterns whose next expected step has *duration_hours*."""

        matches = []
        for pattern in self:
            expected = pattern.expected_duration(shifts_worked_this_week)
            if expected is not None and abs(expected - duration_hours) < 1e-6:
                matches.append(pattern)
        return matches


def default_catalog() -> PatternCatalog:
    return PatternCatalog.from_rules(load_default_rules())


__all__ = [
    "FOUR_TEN",
    "THREE_TWELVE_PLUS_FOUR",
    "ShiftPattern",
    "PatternCatalog",
    "default_catalog",
    "normalize_pattern_code",
]
