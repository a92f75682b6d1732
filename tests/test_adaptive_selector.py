import random

import pytest

from assessment_app.core.models import Difficulty
from assessment_app.core.services.adaptive_selector import (
    EXHAUSTED,
    AdaptiveSelector,
    EmptyBankError,
    fallback_order,
    preferred_difficulty,
)

from conftest import make_bank, make_question


@pytest.mark.parametrize(
    ("current", "was_correct", "expected"),
    [
        (Difficulty.EASY, True, Difficulty.MEDIUM),
        (Difficulty.MEDIUM, True, Difficulty.HARD),
        (Difficulty.HARD, True, Difficulty.HARD),
        (Difficulty.EASY, False, Difficulty.EASY),
        (Difficulty.MEDIUM, False, Difficulty.EASY),
        (Difficulty.HARD, False, Difficulty.MEDIUM),
    ],
)
def test_preferred_difficulty(current, was_correct, expected):
    assert preferred_difficulty(current, was_correct) is expected


def test_fallback_order_starts_with_preferred_tier():
    assert fallback_order(Difficulty.EASY) == (Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD)
    assert fallback_order(Difficulty.MEDIUM) == (Difficulty.MEDIUM, Difficulty.EASY, Difficulty.HARD)
    assert fallback_order(Difficulty.HARD) == (Difficulty.HARD, Difficulty.MEDIUM, Difficulty.EASY)


def test_first_question_prefers_medium():
    selector = AdaptiveSelector.initialize(make_bank(), 5, rng=random.Random(1))
    assert selector.active_question_sequence[0].difficulty is Difficulty.MEDIUM


def test_first_question_falls_back_to_easy_then_hard():
    selector = AdaptiveSelector.initialize(make_bank(easy=2, medium=0, hard=2), 5, rng=random.Random(1))
    assert selector.active_question_sequence[0].difficulty is Difficulty.EASY

    selector = AdaptiveSelector.initialize(make_bank(easy=0, medium=0, hard=1), 5, rng=random.Random(1))
    assert selector.active_question_sequence[0].difficulty is Difficulty.HARD


def test_empty_bank_raises():
    with pytest.raises(EmptyBankError):
        AdaptiveSelector.initialize([], 5)


def test_non_positive_question_count_rejected():
    with pytest.raises(ValueError):
        AdaptiveSelector(0)


def test_correct_answers_climb_to_hard():
    selector = AdaptiveSelector.initialize(make_bank(), 5, rng=random.Random(7))
    current = selector.active_question_sequence[0]
    difficulties = [current.difficulty]
    for _ in range(3):
        current = selector.next(current, was_correct=True)
        difficulties.append(current.difficulty)
    assert difficulties == [Difficulty.MEDIUM, Difficulty.HARD, Difficulty.HARD, Difficulty.HARD]


def test_wrong_answer_steps_down():
    selector = AdaptiveSelector.initialize(make_bank(), 5, rng=random.Random(3))
    first = selector.active_question_sequence[0]
    assert selector.next(first, was_correct=False).difficulty is Difficulty.EASY


def test_falls_back_when_preferred_pool_is_empty():
    selector = AdaptiveSelector.initialize(make_bank(easy=1, medium=1, hard=0), 5)
    first = selector.active_question_sequence[0]
    # Hard is empty, so a correct answer on medium falls back to easy.
    assert selector.next(first, was_correct=True).difficulty is Difficulty.EASY


def test_never_repeats_and_reports_exhaustion():
    bank = make_bank(easy=2, medium=2, hard=2)
    selector = AdaptiveSelector.initialize(bank, 10, rng=random.Random(11))
    current = selector.active_question_sequence[0]
    for index in range(5):
        current = selector.next(current, was_correct=index % 2 == 0)
        assert current is not EXHAUSTED

    assert selector.next(current, was_correct=True) is EXHAUSTED
    ids = [question.id for question in selector.active_question_sequence]
    assert sorted(ids) == sorted(question.id for question in bank)
    assert selector.remaining_counts() == {
        Difficulty.EASY: 0,
        Difficulty.MEDIUM: 0,
        Difficulty.HARD: 0,
    }


def test_duplicate_ids_are_skipped():
    bank = [make_question(1, Difficulty.MEDIUM), make_question(1, Difficulty.EASY)]
    selector = AdaptiveSelector.initialize(bank, 5)
    assert selector.remaining_counts()[Difficulty.EASY] == 0


def test_exhausted_sentinel_is_falsy():
    assert not EXHAUSTED
    assert repr(EXHAUSTED) == "EXHAUSTED"


def test_active_sequence_is_a_copy():
    selector = AdaptiveSelector.initialize(make_bank(), 5)
    selector.active_question_sequence.clear()
    assert len(selector.active_question_sequence) == 1


_RANK = {Difficulty.EASY: 0, Difficulty.MEDIUM: 1, Difficulty.HARD: 2}


@pytest.mark.parametrize("seed", range(8))
def test_no_repeats_and_correct_answers_never_step_down(seed):
    rng = random.Random(seed)
    bank = make_bank(easy=4, medium=3, hard=2)
    selector = AdaptiveSelector.initialize(bank, 9, rng=rng)
    current = selector.active_question_sequence[0]

    while not selector.has_reached_limit():
        was_correct = rng.random() < 0.6
        preferred = preferred_difficulty(current.difficulty, was_correct)
        fell_back = selector.remaining_counts()[preferred] == 0
        following = selector.next(current, was_correct)
        if following is EXHAUSTED:
            break
        if was_correct and not fell_back:
            assert _RANK[following.difficulty] >= _RANK[current.difficulty]
        if not fell_back:
            assert following.difficulty is preferred
        current = following

    ids = [question.id for question in selector.active_question_sequence]
    assert len(ids) == len(set(ids))


def test_selector_stops_at_question_count():
    selector = AdaptiveSelector.initialize(make_bank(), 2)
    first = selector.active_question_sequence[0]
    assert not selector.has_reached_limit()
    selector.next(first, was_correct=True)

    assert selector.has_reached_limit()
    with pytest.raises(RuntimeError):
        selector.next(first, was_correct=True)
    assert len(selector.active_question_sequence) == 2
