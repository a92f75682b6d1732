"""Difficulty-weighted scoring for finished sessions."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from assessment_app.constants.assessment_constants import DIFFICULTY_WEIGHTS
from assessment_app.core.models import (
    AnsweredRecord,
    Difficulty,
    Question,
    ScoreSummary,
    TerminationReason,
)


def weight(difficulty: Difficulty) -> int:
    return DIFFICULTY_WEIGHTS[difficulty.value]


def raw_score(answered: Sequence[AnsweredRecord]) -> int:
    return sum(weight(record.question.difficulty) for record in answered if record.is_correct)


def max_possible_score(presented: Sequence[Question]) -> int:
    """Weight of every question actually presented, answered or not."""
    return sum(weight(question.difficulty) for question in presented)


def percentage_score(raw: int, max_possible: int) -> int:
    if max_possible <= 0:
        return 0
    # Half-up rounding; the builtin round() would send 12.5 to 12.
    value = Decimal(100 * raw) / Decimal(max_possible)
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def accuracy(answered: Sequence[AnsweredRecord]) -> float:
    if not answered:
        return 0.0
    correct = sum(1 for record in answered if record.is_correct)
    return (correct / len(answered)) * 100


def difficulty_distribution(answered: Sequence[AnsweredRecord]) -> dict[str, int]:
    """Count answered questions per difficulty tier."""
    counts = {difficulty.value: 0 for difficulty in Difficulty}
    for record in answered:
        counts[record.question.difficulty.value] += 1
    return counts


def summarize(
    answered: Sequence[AnsweredRecord],
    presented: Sequence[Question],
    elapsed_seconds: int,
    termination_reason: TerminationReason,
) -> ScoreSummary:
    raw = raw_score(answered)
    max_possible = max_possible_score(presented)
    return ScoreSummary(
        raw_score=raw,
        max_possible=max_possible,
        percentage_score=percentage_score(raw, max_possible),
        accuracy=accuracy(answered),
        correct_count=sum(1 for record in answered if record.is_correct),
        answered_count=len(answered),
        difficulty_distribution=difficulty_distribution(answered),
        elapsed_seconds=elapsed_seconds,
        termination_reason=termination_reason,
    )
