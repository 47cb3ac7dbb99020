"""Runs a generation end to end against a scheduling store."""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Protocol, Sequence

from dispatch_scheduler.services.context import (
    GenerationParams,
    ReferenceData,
    build_generation_context,
    validate_period,
)
from dispatch_scheduler.services.domain import ScheduledShift
from dispatch_scheduler.services.rules import RuleSet, load_default_rules
from dispatch_scheduler.services.scheduler import SchedulingResult, UnfilledRequirementAlert, generate_schedule

logger = logging.getLogger(__name__)


class SchedulingStore(Protocol):
    async def load_reference_data(self, start_date: date, end_date: date) -> ReferenceData:
        ...

    async def save_generation(
        self, shifts: Sequence[ScheduledShift], alerts: Sequence[UnfilledRequirementAlert]
    ) -> None:
        ...


async def run_schedule_generation(
    store: SchedulingStore,
    params: GenerationParams,
    rule_set: Optional[RuleSet] = None,
) -> SchedulingResult:
    """Load reference data, generate the schedule and persist it in one batch."""

    rule_set = rule_set or load_default_rules()
    validate_period(params.start_date, params.end_date, rule_set)

    reference = await store.load_reference_data(params.start_date, params.end_date)
    context = build_generation_context(params, reference, rule_set)
    result = generate_schedule(context)

    await store.save_generation(result.shifts, result.alerts)
    logger.info(
        "Stored %d shifts and %d staffing alerts for %s..%s",
        len(result.shifts),
        len(result.alerts),
        params.start_date,
        params.end_date,
    )
    return result
