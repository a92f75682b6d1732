"""Domain models for the assessment engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Difficulty(str, Enum):
    """Difficulty tier used both to bucket questions and to weight scoring."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class SessionPhase(str, Enum):
    """Lifecycle of an assessment session."""

    IDLE = "idle"
    RUNNING = "running"
    FINISHED = "finished"


class IntegrityEvent(str, Enum):
    """Signals correlated with cheating that count as infractions."""

    TAB_SWITCH = "tab_switch"
    FORBIDDEN_SHORTCUT = "forbidden_shortcut"
    CLIPBOARD_COPY = "clipboard_copy"
    CLIPBOARD_PASTE = "clipboard_paste"
    FULLSCREEN_EXIT = "fullscreen_exit"

    @property
    def reason(self) -> str:
        return _INTEGRITY_REASONS[self]


_INTEGRITY_REASONS = {
    IntegrityEvent.TAB_SWITCH: "Tab switched",
    IntegrityEvent.FORBIDDEN_SHORTCUT: "Shortcut used",
    IntegrityEvent.CLIPBOARD_COPY: "Copy attempted",
    IntegrityEvent.CLIPBOARD_PASTE: "Paste attempted",
    IntegrityEvent.FULLSCREEN_EXIT: "Exited full-screen",
}


class TerminationReason(str, Enum):
    """Why a session reached the finished phase."""

    COMPLETED = "completed"
    EXHAUSTED = "exhausted"
    TIMEOUT = "timeout"
    INTEGRITY = "integrity"


@dataclass(frozen=True, slots=True)
class Question:
    """Multiple-choice question with exactly four options."""

    id: int
    text: str
    options: tuple[str, ...]
    correct_option_index: int
    difficulty: Difficulty


@dataclass(frozen=True, slots=True)
class AnsweredRecord:
    """One submitted answer, in chronological order."""

    question: Question
    selected_option_index: int
    is_correct: bool


@dataclass(frozen=True, slots=True)
class ScoreSummary:
    """Final result of a finished session."""

    raw_score: int
    max_possible: int
    percentage_score: int
    accuracy: float
    correct_count: int
    answered_count: int
    difficulty_distribution: dict[str, int]
    elapsed_seconds: int
    termination_reason: TerminationReason


@dataclass(slots=True)
class SessionState:
    """Mutable state of a single assessment session.

    Only the session orchestrator mutates this object; hosts read it through
    ``AssessmentSession.snapshot()``.
    """

    remaining_seconds: int
    phase: SessionPhase = SessionPhase.IDLE
    current_question_index: int = 0
    infraction_count: int = 0
    latest_infraction_reason: str | None = None
    answered: list[AnsweredRecord] = field(default_factory=list)
    active_question_sequence: list[Question] = field(default_factory=list)
    termination_reason: TerminationReason | None = None
    presentation_warning: str | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @property
    def current_question(self) -> Question | None:
        if not 0 <= self.current_question_index < len(self.active_question_sequence):
            return None
        return self.active_question_sequence[self.current_question_index]


@dataclass(frozen=True, slots=True)
class SessionSnapshot:
    """Read-only display projection of a session for host UIs."""

    phase: SessionPhase
    remaining_seconds: int
    remaining_display: str
    current_question_index: int
    question_number: int
    question_count: int
    infraction_count: int
    max_attempts: int
    latest_infraction_reason: str | None
    difficulty_of_current_question: Difficulty | None
    presentation_warning: str | None
    termination_reason: TerminationReason | None
    started_at: datetime | None
    finished_at: datetime | None
