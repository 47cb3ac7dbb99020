"""Exceptions raised by the scheduling services."""

from __future__ import annotations


class SchedulingError(Exception):
    """Base class for scheduling failures that abort a generation run."""


class InvalidPeriodError(SchedulingError, ValueError):
    """The requested schedule period is inverted or too long."""


class MissingReferenceDataError(SchedulingError):
    """Employees, shift options or staffing requirements are missing."""


class InvalidPatternError(SchedulingError, ValueError):
    """An employee carries a shift pattern code the catalog does not know."""


class PersistenceError(SchedulingError):
    """The final batch write of a generation run failed and was rolled back."""


__all__ = [
    "SchedulingError",
    "InvalidPeriodError",
    "MissingReferenceDataError",
    "InvalidPatternError",
    "PersistenceError",
]
