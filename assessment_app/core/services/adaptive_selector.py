"""Difficulty-banked question selection that adapts to answer correctness."""

from __future__ import annotations

from collections import deque
import logging
import random
from typing import Iterable

from assessment_app.core.models import Difficulty, Question

logger = logging.getLogger(__name__)


class EmptyBankError(Exception):
    """Raised when a question bank holds no usable questions."""


class _Exhausted:
    """Sentinel returned when every difficulty pool is empty."""

    _instance: "_Exhausted | None" = None

    def __new__(cls) -> "_Exhausted":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "EXHAUSTED"

    def __bool__(self) -> bool:
        return False


EXHAUSTED = _Exhausted()

_FALLBACK_ORDER: dict[Difficulty, tuple[Difficulty, ...]] = {
    Difficulty.EASY: (Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD),
    Difficulty.MEDIUM: (Difficulty.MEDIUM, Difficulty.EASY, Difficulty.HARD),
    Difficulty.HARD: (Difficulty.HARD, Difficulty.MEDIUM, Difficulty.EASY),
}
_FIRST_QUESTION_ORDER = (Difficulty.MEDIUM, Difficulty.EASY, Difficulty.HARD)


def preferred_difficulty(current: Difficulty, was_correct: bool) -> Difficulty:
    """Step one tier up after a correct answer, one tier down after a miss."""
    if was_correct:
        return Difficulty.MEDIUM if current is Difficulty.EASY else Difficulty.HARD
    return Difficulty.MEDIUM if current is Difficulty.HARD else Difficulty.EASY


def fallback_order(preferred: Difficulty) -> tuple[Difficulty, ...]:
    """Pools to try, in order, when drawing a question of the preferred tier."""
    return _FALLBACK_ORDER[preferred]


class AdaptiveSelector:
    """Owns the three difficulty pools of one session and draws from them.

    Every draw removes the question from its pool and appends it to the
    active sequence, so a question can be presented at most once per session.
    The selector is the only writer of that sequence.
    """

    def __init__(self, question_count: int, rng: random.Random | None = None) -> None:
        if question_count <= 0:
            raise ValueError("Question count must be a positive integer.")
        self._question_count = question_count
        self._rng = rng or random.Random()
        self._pools: dict[Difficulty, deque[Question]] = {
            difficulty: deque() for difficulty in Difficulty
        }
        self._sequence: list[Question] = []

    @classmethod
    def initialize(
        cls,
        all_questions: Iterable[Question],
        question_count: int,
        rng: random.Random | None = None,
    ) -> "AdaptiveSelector":
        """Partition and shuffle the bank, then draw the first question."""
        selector = cls(question_count, rng=rng)
        selector._fill_pools(all_questions)
        first = selector._draw(_FIRST_QUESTION_ORDER)
        if first is None:
            raise EmptyBankError("Question bank does not contain any questions.")
        return selector

    @property
    def question_count(self) -> int:
        return self._question_count

    @property
    def active_question_sequence(self) -> list[Question]:
        """Questions drawn so far, in presentation order."""
        return list(self._sequence)

    def remaining_counts(self) -> dict[Difficulty, int]:
        return {difficulty: len(pool) for difficulty, pool in self._pools.items()}

    def has_reached_limit(self) -> bool:
        """True once ``question_count`` questions have been drawn."""
        return len(self._sequence) >= self._question_count

    def next(self, previous_question: Question, was_correct: bool) -> Question | _Exhausted:
        """Draw the next question based on the correctness of the previous answer."""
        if self.has_reached_limit():
            raise RuntimeError(f"All {self._question_count} question(s) have already been drawn.")
        preferred = preferred_difficulty(previous_question.difficulty, was_correct)
        question = self._draw(fallback_order(preferred))
        if question is None:
            logger.info("All difficulty pools exhausted after %d question(s)", len(self._sequence))
            return EXHAUSTED
        if question.difficulty is not preferred:
            logger.info(
                "Pool '%s' empty; fell back to '%s'",
                preferred.value,
                question.difficulty.value,
            )
        return question

    def _fill_pools(self, all_questions: Iterable[Question]) -> None:
        buckets: dict[Difficulty, list[Question]] = {difficulty: [] for difficulty in Difficulty}
        seen_ids: set[int] = set()
        for question in all_questions:
            if question.id in seen_ids:
                logger.warning("Skipping duplicate question id %s", question.id)
                continue
            seen_ids.add(question.id)
            buckets[question.difficulty].append(question)

        for difficulty, bucket in buckets.items():
            # random.shuffle is Fisher-Yates, so every permutation is equally likely.
            self._rng.shuffle(bucket)
            self._pools[difficulty] = deque(bucket)

    def _draw(self, order: Iterable[Difficulty]) -> Question | None:
        for difficulty in order:
            pool = self._pools[difficulty]
            if pool:
                question = pool.popleft()
                self._sequence.append(question)
                logger.debug("Drew question %s (%s)", question.id, difficulty.value)
                return question
        return None
