"""Domain representations for scheduling rules and loaders."""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources

from pydantic import BaseModel, Field, model_validator


class WorkingTimeRules(BaseModel):
    max_weekly_hours: float = 40
    min_rest_hours: float = 8
    consecutive_gap_hours: float = 24
    max_period_days: int = 180


class ScoreWeights(BaseModel):
    hours_balance: float = Field(default=0.3, ge=0)
    preference_match: float = Field(default=0.3, ge=0)
    rest_quality: float = Field(default=0.2, ge=0)
    pattern_adherence: float = Field(default=0.1, ge=0)
    historical_fairness: float = Field(default=0.1, ge=0)

    @model_validator(mode="after")
    def validate_total(self) -> "ScoreWeights":
        if self.total() <= 0:
            raise ValueError("at least one scoring weight must be positive")
        return self

    def total(self) -> float:
        return (
            self.hours_balance
            + self.preference_match
            + self.rest_quality
            + self.pattern_adherence
            + self.historical_fairness
        )


class ScoringRules(BaseModel):
    weights: ScoreWeights = Field(default_factory=ScoreWeights)
    ideal_weekly_hours_min: float = 32
    ideal_weekly_hours_max: float = 40
    overtime_penalty_span_hours: float = 8
    over_cap_factor: float = 0.25
    preference_mismatch_score: float = 0.6
    ideal_rest_hours_min: float = 12
    ideal_rest_hours_max: float = 14
    long_rest_decay_hours: float = 240
    long_rest_floor: float = 0.7
    pattern_switch_score: float = 0.5
    pattern_mismatch_score: float = 0.25
    fairness_window_days: int = 30
    undesirable_step_penalty: float = 0.1
    undesirable_floor: float = 0.5
    undesirable_categories: list[str] = Field(default_factory=lambda: ["graveyard"])

    @model_validator(mode="after")
    def validate_bands(self) -> "ScoringRules":
        if self.ideal_weekly_hours_min > self.ideal_weekly_hours_max:
            raise ValueError("ideal weekly hours band is inverted")
        if self.ideal_rest_hours_min > self.ideal_rest_hours_max:
            raise ValueError("ideal rest band is inverted")
        return self


class PatternRules(BaseModel):
    name: str
    shift_durations: list[float]
    max_consecutive_shifts: int = Field(gt=0)


class SchedulingRules(BaseModel):
    working_time: WorkingTimeRules = Field(default_factory=WorkingTimeRules)
    scoring: ScoringRules = Field(default_factory=ScoringRules)
    patterns: dict[str, PatternRules] = Field(default_factory=dict)


@dataclass(frozen=True)
class RuleSet:
    """Wrapper used by the scheduler to access typed rules."""

    rules: SchedulingRules
    name: str = "default"
    version: str = "v1"


def _load_rules_from_json() -> tuple[SchedulingRules, str, str]:
    with resources.files("dispatch_scheduler.services.data").joinpath("default_rules.json").open(
        "r", encoding="utf-8"
    ) as handle:
        payload = json.load(handle)
    return SchedulingRules.model_validate(payload["rules"]), payload["name"], payload["version"]


@lru_cache(maxsize=1)
def load_default_rules() -> RuleSet:
    """Return the default rule set bundled with the application."""

    rules, name, version = _load_rules_from_json()
    return RuleSet(rules=rules, name=name, version=version)
