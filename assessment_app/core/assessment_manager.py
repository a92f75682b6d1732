"""Business logic for managing assessment state shared between hosts and the API."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
import random
from threading import RLock
from typing import Callable

from assessment_app.core.models import (
    AnsweredRecord,
    IntegrityEvent,
    Question,
    ScoreSummary,
    SessionSnapshot,
)
from assessment_app.core.question_bank_loader import (
    DEFAULT_BANK_DIR,
    LoadedBank,
    load_bank_for_career,
)
from assessment_app.core.services.assessment_session import AssessmentConfig, AssessmentSession
from assessment_app.core.services.countdown_clock import TickHandle, TickScheduler
from assessment_app.core.services.integrity_monitor import (
    NullPresentationController,
    PresentationController,
)
from assessment_app.core.services.signal_bus import SignalBus
from assessment_app.core.services.training_progress import (
    ModuleStatus,
    TrainingModule,
    TrainingProgressTracker,
)

logger = logging.getLogger(__name__)

CAREER_MODULE_ID = "career_path"
SKILL_TEST_MODULE_ID = "skill_test"


@dataclass(frozen=True, slots=True)
class ProgressReport:
    """Snapshot of the training path for hosts."""

    modules: list[TrainingModule]
    overall_completion: int
    average_score: int


class _LockedTickScheduler:
    """Runs every scheduled callback while holding the manager lock."""

    def __init__(self, scheduler: TickScheduler, lock: RLock) -> None:
        self._scheduler = scheduler
        self._lock = lock

    def schedule(self, interval_seconds: float, callback: Callable[[], None]) -> TickHandle:
        def locked_callback() -> None:
            with self._lock:
                callback()

        return self._scheduler.schedule(interval_seconds, locked_callback)


class AssessmentManager:
    """Facade for assessment services: bank loading, the session, and progress.

    Every public method takes the manager lock, so ticks, answers and
    integrity signals never overlap even when they arrive on different
    threads.
    """

    def __init__(
        self,
        scheduler: TickScheduler,
        presentation: PresentationController | None = None,
        bank_dir: Path = DEFAULT_BANK_DIR,
        config: AssessmentConfig | None = None,
        progress: TrainingProgressTracker | None = None,
        rng: random.Random | None = None,
    ) -> None:
        # Reentrant: leaving full-screen can synchronously report a signal back in.
        self._lock = RLock()

        # Services
        self._scheduler = _LockedTickScheduler(scheduler, self._lock)
        self._signal_bus = SignalBus()
        self._presentation = presentation or NullPresentationController()
        self._progress = progress or TrainingProgressTracker()
        self._bank_dir = bank_dir
        self._config = config or AssessmentConfig()
        self._rng = rng

        self._bank: LoadedBank | None = None
        self._session: AssessmentSession | None = None

    # --- Question bank ---

    def load_bank(self, career_title: str | None) -> LoadedBank:
        """Load the bank for a career and prepare a fresh idle session."""
        bank = load_bank_for_career(career_title, self._bank_dir)
        with self._lock:
            self._discard_session()
            self._bank = bank
            self._session = self._create_session(bank)
            if self._is_module_active(CAREER_MODULE_ID):
                self._progress.complete_module(CAREER_MODULE_ID)
            return bank

    def get_config(self) -> AssessmentConfig:
        return self._config

    def has_loaded_bank(self) -> bool:
        with self._lock:
            return self._bank is not None

    def get_career_slug(self) -> str | None:
        with self._lock:
            return self._bank.career_slug if self._bank else None

    # --- Session lifecycle ---

    def start_session(self) -> SessionSnapshot:
        with self._lock:
            session = self._require_session()
            session.start()
            return session.snapshot()

    def reset_session(self) -> SessionSnapshot:
        """Discard the current session and reshuffle a new one from the same bank."""
        with self._lock:
            if self._bank is None:
                raise RuntimeError("No question bank loaded.")
            self._discard_session()
            self._session = self._create_session(self._bank)
            return self._session.snapshot()

    def abandon_session(self) -> None:
        with self._lock:
            self._discard_session()

    # --- Session operations ---

    def submit_answer(self, selected_option_index: int | None) -> AnsweredRecord | None:
        with self._lock:
            return self._require_session().submit(selected_option_index)

    def report_signal(self, kind: IntegrityEvent) -> int:
        """Forward an integrity event; returns how many subscribers received it."""
        with self._lock:
            return self._signal_bus.emit(kind)

    def report_presentation_failure(self, detail: str | None = None) -> None:
        with self._lock:
            self._require_session().report_presentation_failure(detail)

    # --- Read-only projections ---

    def get_state(self) -> SessionSnapshot | None:
        with self._lock:
            return self._session.snapshot() if self._session else None

    def get_current_question(self) -> Question | None:
        with self._lock:
            return self._session.get_current_question() if self._session else None

    def get_summary(self) -> ScoreSummary | None:
        with self._lock:
            return self._session.summary if self._session else None

    def get_progress(self) -> ProgressReport:
        with self._lock:
            return ProgressReport(
                modules=self._progress.get_modules(),
                overall_completion=self._progress.overall_completion(),
                average_score=self._progress.average_score(),
            )

    # --- Internals (lock held) ---

    def _create_session(self, bank: LoadedBank) -> AssessmentSession:
        return AssessmentSession(
            bank.questions,
            scheduler=self._scheduler,
            signal_source=self._signal_bus,
            presentation=self._presentation,
            on_complete=self._handle_session_complete,
            config=self._config,
            rng=self._rng,
        )

    def _discard_session(self) -> None:
        if self._session is not None:
            self._session.abandon()
        self._session = None

    def _require_session(self) -> AssessmentSession:
        if self._session is None:
            raise RuntimeError("No assessment session prepared; load a question bank first.")
        return self._session

    def _is_module_active(self, module_id: str) -> bool:
        try:
            return self._progress.get_module(module_id).status is ModuleStatus.ACTIVE
        except KeyError:
            return False

    def _handle_session_complete(self, percentage_score: int) -> None:
        if not self._is_module_active(SKILL_TEST_MODULE_ID):
            logger.info("Skill test retaken; progression already recorded")
            return
        self._progress.complete_module(SKILL_TEST_MODULE_ID, percentage_score)
