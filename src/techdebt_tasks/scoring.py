from __future__ import annotations
import math
from dataclasses import fields
from datetime import datetime, timezone
from typing import Optional

from .signals import (
    AnalysisResult, Category, CRITICAL_CATEGORIES, PriorityFactors, PriorityWeights, RepositoryContext,
)

# Every factor is normalized into 0..10 before weighting (custom_priority excepted).
FACTOR_CAP = 10.0
DAYS_PER_UNIT = 30.0
ISSUES_PER_UNIT = 10.0
COMPLEXITY_PER_UNIT = 20.0
CRITICAL_BONUS_THRESHOLD = 3


def days_since(moment: Optional[datetime], now: Optional[datetime] = None) -> int:
    if moment is None:
        return 0
    now = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return (now - moment).days


def calculate_priority_factors(
    category: str,
    analysis: AnalysisResult,
    repository: RepositoryContext,
    bonus: int = 0,
    now: Optional[datetime] = None,
) -> PriorityFactors:
    """Compute the normalized factor vector for one finding.

    ``bonus`` feeds both the critical bump (when above the threshold) and the
    custom_priority term, so security and incomplete-code findings count it twice.
    """
    critical = 1 if Category.parse(category) in CRITICAL_CATEGORIES else 0
    if bonus > CRITICAL_BONUS_THRESHOLD:
        critical += 1

    return PriorityFactors(
        critical_comments=critical,
        days_since_commit=min(days_since(repository.last_commit_at, now) / DAYS_PER_UNIT, FACTOR_CAP),
        open_issues=min((repository.open_issues or 0) / ISSUES_PER_UNIT, FACTOR_CAP),
        code_complexity=min((analysis.complexity or 0) / COMPLEXITY_PER_UNIT, FACTOR_CAP),
        security_vulnerability=1 if Category.parse(category) is Category.SECURITY else 0,
        custom_priority=bonus,
    )


def round_half_up(value: float, ndigits: int = 1) -> float:
    scale = 10 ** ndigits
    return math.floor(value * scale + 0.5) / scale


def calculate_priority_score(factors: PriorityFactors, weights: PriorityWeights) -> float:
    wsum = 0.0
    for f in fields(PriorityFactors):
        w = getattr(weights, f.name)
        if f.name == "custom_priority" and w is None:
            w = 1
        wsum += getattr(factors, f.name) * w
    return round_half_up(wsum, 1)


def bucket(score: float) -> str:
    if score >= 20.0:
        return "P1"
    if score >= 10.0:
        return "P2"
    return "P3"
