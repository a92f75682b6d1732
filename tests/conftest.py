"""Shared fixtures and test doubles for the assessment tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

import pytest

from assessment_app.core.models import Difficulty, Question


class ManualTickHandle:
    def __init__(self, interval_seconds: float, callback: Callable[[], None]) -> None:
        self.interval_seconds = interval_seconds
        self.callback = callback
        self.cancelled = False
        self.cancel_calls = 0

    def cancel(self) -> None:
        self.cancel_calls += 1
        self.cancelled = True


class ManualTickScheduler:
    """Tick scheduler driven explicitly by the test."""

    def __init__(self) -> None:
        self.handles: list[ManualTickHandle] = []

    def schedule(self, interval_seconds: float, callback: Callable[[], None]) -> ManualTickHandle:
        handle = ManualTickHandle(interval_seconds, callback)
        self.handles.append(handle)
        return handle

    def active_handles(self) -> list[ManualTickHandle]:
        return [handle for handle in self.handles if not handle.cancelled]

    def advance(self, ticks: int = 1) -> None:
        for _ in range(ticks):
            for handle in self.active_handles():
                handle.callback()


class RecordingPresentation:
    def __init__(self, fail_enter: Exception | None = None) -> None:
        self.fail_enter = fail_enter
        self.calls: list[str] = []

    def enter_fullscreen(self) -> None:
        self.calls.append("enter")
        if self.fail_enter is not None:
            raise self.fail_enter

    def exit_fullscreen(self) -> None:
        self.calls.append("exit")


def make_question(question_id: int, difficulty: Difficulty, correct: int = 0) -> Question:
    return Question(
        id=question_id,
        text=f"Question {question_id}",
        options=("A", "B", "C", "D"),
        correct_option_index=correct,
        difficulty=difficulty,
    )


def make_bank(easy: int = 3, medium: int = 3, hard: int = 3) -> list[Question]:
    questions: list[Question] = []
    next_id = 1
    for difficulty, count in (
        (Difficulty.EASY, easy),
        (Difficulty.MEDIUM, medium),
        (Difficulty.HARD, hard),
    ):
        for _ in range(count):
            questions.append(make_question(next_id, difficulty))
            next_id += 1
    return questions


def bank_record(difficulty: str, answer_index: int = 0, **overrides: object) -> dict[str, object]:
    record: dict[str, object] = {
        "question": f"A {difficulty} question?",
        "options": ["one", "two", "three", "four"],
        "answerIndex": answer_index,
        "difficulty": difficulty,
    }
    record.update(overrides)
    return record


@pytest.fixture
def scheduler() -> ManualTickScheduler:
    return ManualTickScheduler()


@pytest.fixture
def bank_dir(tmp_path: Path) -> Path:
    """A bank directory holding a small software engineering bank."""
    records = [bank_record(level) for level in ("easy", "medium", "hard") for _ in range(3)]
    (tmp_path / "software-engineer-questions.json").write_text(json.dumps(records), encoding="utf-8")
    return tmp_path
