from assessment_app.core.models import AnsweredRecord, Difficulty, TerminationReason
from assessment_app.core.services import scoring

from conftest import make_question


def _record(question_id, difficulty, correct):
    question = make_question(question_id, difficulty)
    return AnsweredRecord(question=question, selected_option_index=0 if correct else 1, is_correct=correct)


def test_weighted_raw_and_max_scores():
    answered = [
        _record(1, Difficulty.EASY, True),
        _record(2, Difficulty.MEDIUM, False),
        _record(3, Difficulty.HARD, True),
    ]
    presented = [record.question for record in answered]
    assert scoring.raw_score(answered) == 4
    assert scoring.max_possible_score(presented) == 6


def test_percentage_rounds_half_up():
    assert scoring.percentage_score(1, 8) == 13
    assert scoring.percentage_score(2, 3) == 67
    assert scoring.percentage_score(0, 0) == 0


def test_accuracy_handles_empty_answers():
    assert scoring.accuracy([]) == 0.0
    answered = [_record(1, Difficulty.EASY, True), _record(2, Difficulty.EASY, False)]
    assert scoring.accuracy(answered) == 50.0


def test_summary_counts_unanswered_presented_question():
    answered = [_record(1, Difficulty.MEDIUM, True)]
    presented = [answered[0].question, make_question(2, Difficulty.HARD)]

    summary = scoring.summarize(answered, presented, elapsed_seconds=42, termination_reason=TerminationReason.TIMEOUT)

    assert summary.raw_score == 2
    assert summary.max_possible == 5
    assert summary.percentage_score == 40
    assert summary.answered_count == 1
    assert summary.correct_count == 1
    assert summary.difficulty_distribution == {"easy": 0, "medium": 1, "hard": 0}
    assert summary.elapsed_seconds == 42
    assert summary.termination_reason is TerminationReason.TIMEOUT
    assert 0 <= summary.percentage_score <= 100
