"""Service tying the clock, adaptive selector and integrity monitor into one session."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
import random
from typing import Callable, Iterable

from assessment_app.constants.assessment_constants import (
    CLOCK_TICK_INTERVAL_SECONDS,
    MAX_CHEAT_ATTEMPTS,
    NUMBER_OF_QUESTIONS,
    TEST_DURATION_MINUTES,
)
from assessment_app.core.models import (
    AnsweredRecord,
    IntegrityEvent,
    Question,
    ScoreSummary,
    SessionPhase,
    SessionSnapshot,
    SessionState,
    TerminationReason,
)
from assessment_app.core.services import scoring
from assessment_app.core.services.adaptive_selector import EXHAUSTED, AdaptiveSelector
from assessment_app.core.services.countdown_clock import CountdownClock, TickScheduler, format_clock
from assessment_app.core.services.integrity_monitor import (
    IntegrityMonitor,
    NullPresentationController,
    PresentationController,
    PresentationError,
    SignalSource,
)

logger = logging.getLogger(__name__)

_DEFAULT_PRESENTATION_WARNING = "Full-screen mode could not be enabled."


@dataclass(frozen=True, slots=True)
class AssessmentConfig:
    """Tunable limits of a session."""

    duration_seconds: int = TEST_DURATION_MINUTES * 60
    question_count: int = NUMBER_OF_QUESTIONS
    max_attempts: int = MAX_CHEAT_ATTEMPTS
    tick_interval_seconds: float = CLOCK_TICK_INTERVAL_SECONDS


class AssessmentSession:
    """One timed adaptive assessment, from ``idle`` to ``finished``.

    The session is not thread-safe. Hosts must deliver ticks, answers and
    integrity signals as non-overlapping calls (the Qt event loop, or the
    lock held by ``AssessmentManager``).
    """

    def __init__(
        self,
        questions: Iterable[Question],
        scheduler: TickScheduler,
        signal_source: SignalSource,
        presentation: PresentationController | None = None,
        on_complete: Callable[[int], None] | None = None,
        config: AssessmentConfig | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._config = config or AssessmentConfig()
        self._selector = AdaptiveSelector.initialize(
            questions, self._config.question_count, rng=rng
        )
        self._signal_source = signal_source
        self._presentation = presentation or NullPresentationController()
        self._on_complete = on_complete
        self._state = SessionState(
            remaining_seconds=self._config.duration_seconds,
            active_question_sequence=self._selector.active_question_sequence,
        )
        self._clock = CountdownClock(
            self._config.duration_seconds,
            scheduler,
            on_expired=self._handle_timeout,
            interval_seconds=self._config.tick_interval_seconds,
            on_tick=self._record_remaining,
        )
        self._monitor = IntegrityMonitor(
            self._config.max_attempts,
            is_running=self.is_running,
            on_cap_reached=self._handle_integrity_cap,
            on_infraction=self._record_infraction,
        )
        self._summary: ScoreSummary | None = None
        self._completion_notified = False

    # --- Lifecycle ---

    @property
    def config(self) -> AssessmentConfig:
        return self._config

    @property
    def phase(self) -> SessionPhase:
        return self._state.phase

    def is_running(self) -> bool:
        return self._state.phase is SessionPhase.RUNNING

    def is_finished(self) -> bool:
        return self._state.phase is SessionPhase.FINISHED

    def start(self) -> None:
        """Enter ``running``: request full-screen, arm the monitor, start the clock."""
        if self._state.phase is not SessionPhase.IDLE:
            raise RuntimeError(f"Cannot start a session in phase '{self._state.phase.value}'.")
        self._state.phase = SessionPhase.RUNNING
        self._state.started_at = datetime.now(timezone.utc)
        try:
            self._presentation.enter_fullscreen()
        except PresentationError as exc:
            self.report_presentation_failure(str(exc))
        self._monitor.arm(self._signal_source)
        self._clock.start()
        logger.info(
            "Assessment started: %d question(s), %d second(s), %d infraction(s) allowed",
            self._config.question_count,
            self._config.duration_seconds,
            self._config.max_attempts,
        )

    def finish(self, reason: TerminationReason) -> bool:
        """Move to ``finished`` and notify the completion callback.

        Returns False when the session was not running, so racing termination
        paths (a timeout and a last answer, say) only complete once.
        """
        if self._state.phase is not SessionPhase.RUNNING:
            return False
        self._state.phase = SessionPhase.FINISHED
        self._state.termination_reason = reason
        self._state.finished_at = datetime.now(timezone.utc)
        self._release_resources()
        self._summary = scoring.summarize(
            self._state.answered,
            self._state.active_question_sequence,
            elapsed_seconds=self._clock.elapsed_seconds,
            termination_reason=reason,
        )
        logger.info(
            "Assessment finished (%s): %d/%d points, %d%%",
            reason.value,
            self._summary.raw_score,
            self._summary.max_possible,
            self._summary.percentage_score,
        )
        self._notify_completion(self._summary.percentage_score)
        return True

    def abandon(self) -> None:
        """Discard the session without scoring, e.g. when the host navigates away."""
        if self._state.phase is SessionPhase.FINISHED:
            return
        was_running = self._state.phase is SessionPhase.RUNNING
        self._state.phase = SessionPhase.FINISHED
        self._state.finished_at = datetime.now(timezone.utc)
        if was_running:
            self._release_resources()
        logger.info("Assessment abandoned after %d answer(s)", len(self._state.answered))

    # --- Operations ---

    def submit(self, selected_option_index: int | None) -> AnsweredRecord | None:
        """Record an answer for the current question and advance the session."""
        if selected_option_index is None or not self.is_running():
            return None
        question = self._state.current_question
        if question is None:
            return None
        if not 0 <= selected_option_index < len(question.options):
            raise ValueError(
                f"Selected option must be between 0 and {len(question.options) - 1}."
            )

        record = AnsweredRecord(
            question=question,
            selected_option_index=selected_option_index,
            is_correct=selected_option_index == question.correct_option_index,
        )
        self._state.answered.append(record)

        if self._selector.has_reached_limit():
            self.finish(TerminationReason.COMPLETED)
            return record

        next_question = self._selector.next(question, record.is_correct)
        if next_question is EXHAUSTED:
            self.finish(TerminationReason.EXHAUSTED)
            return record

        self._state.active_question_sequence = self._selector.active_question_sequence
        self._state.current_question_index += 1
        return record

    def on_signal(self, kind: IntegrityEvent) -> None:
        self._monitor.on_signal(kind)

    def tick(self) -> None:
        """Advance the countdown by one second (normally driven by the scheduler)."""
        self._clock.tick()

    def report_presentation_failure(self, detail: str | None = None) -> None:
        """Surface a full-screen failure without stopping the session.

        A failure reported while still idle is kept and shown once the session
        runs; hosts may learn about it before the start request lands.
        """
        if self.is_finished():
            return
        message = detail or _DEFAULT_PRESENTATION_WARNING
        logger.warning("Full-screen presentation unavailable: %s", message)
        self._state.presentation_warning = message

    # --- Read-only projections ---

    @property
    def remaining_seconds(self) -> int:
        return self._state.remaining_seconds

    @property
    def infraction_count(self) -> int:
        return self._state.infraction_count

    @property
    def summary(self) -> ScoreSummary | None:
        return self._summary

    def get_current_question(self) -> Question | None:
        if not self.is_running():
            return None
        return self._state.current_question

    def get_answered(self) -> list[AnsweredRecord]:
        return list(self._state.answered)

    def get_active_question_sequence(self) -> list[Question]:
        return list(self._state.active_question_sequence)

    def snapshot(self) -> SessionSnapshot:
        current = self._state.current_question
        return SessionSnapshot(
            phase=self._state.phase,
            remaining_seconds=self._state.remaining_seconds,
            remaining_display=format_clock(self._state.remaining_seconds),
            current_question_index=self._state.current_question_index,
            question_number=self._state.current_question_index + 1,
            question_count=self._config.question_count,
            infraction_count=self._state.infraction_count,
            max_attempts=self._config.max_attempts,
            latest_infraction_reason=self._state.latest_infraction_reason,
            difficulty_of_current_question=current.difficulty if current else None,
            presentation_warning=self._state.presentation_warning,
            termination_reason=self._state.termination_reason,
            started_at=self._state.started_at,
            finished_at=self._state.finished_at,
        )

    # --- Internals ---

    def _record_remaining(self, remaining_seconds: int) -> None:
        self._state.remaining_seconds = remaining_seconds

    def _handle_timeout(self) -> None:
        self.finish(TerminationReason.TIMEOUT)

    def _handle_integrity_cap(self) -> None:
        self.finish(TerminationReason.INTEGRITY)

    def _record_infraction(self, kind: IntegrityEvent, count: int) -> None:
        self._state.infraction_count = count
        self._state.latest_infraction_reason = kind.reason

    def _release_resources(self) -> None:
        self._clock.stop()
        self._monitor.disarm()
        try:
            self._presentation.exit_fullscreen()
        except PresentationError as exc:
            logger.warning("Unable to leave full-screen presentation: %s", exc)

    def _notify_completion(self, percentage: int) -> None:
        if self._completion_notified or self._on_complete is None:
            return
        self._completion_notified = True
        self._on_complete(percentage)
