"""Qt main window running one assessment on the desktop."""

from __future__ import annotations

import logging

from PySide6.QtCore import Qt, QTimer
from PySide6.QtWidgets import (
    QButtonGroup,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from assessment_app.constants.about import RULES_TEXT
from assessment_app.constants.ui_constants import (
    ASSESSMENT_COMPLETE_TEMPLATE,
    INFRACTION_WARNING_TEMPLATE,
    RESET_BUTTON_TEXT,
    START_BUTTON_TEXT,
    STATE_REFRESH_INTERVAL_MS,
    SUBMIT_BUTTON_TEXT,
    WINDOW_TITLE,
)
from assessment_app.core.assessment_manager import AssessmentManager
from assessment_app.core.markdown_renderer import renderer
from assessment_app.core.models import SessionPhase
from assessment_app.core.services.countdown_clock import format_clock

logger = logging.getLogger(__name__)


class AssessmentWindow(QMainWindow):
    """Start screen, question view and result screen stacked in one window."""

    def __init__(self, manager: AssessmentManager) -> None:
        super().__init__()
        self.setWindowTitle(WINDOW_TITLE)
        self.manager = manager
        self._rendered_question_id: int | None = None

        self._build_ui()
        self.refresh_timer = QTimer(self)
        self.refresh_timer.setInterval(STATE_REFRESH_INTERVAL_MS)
        self.refresh_timer.timeout.connect(self.refresh)
        self.refresh_timer.start()
        self.refresh()

    def _build_ui(self) -> None:
        self.stack = QStackedWidget(self)
        self.setCentralWidget(self.stack)

        # Start page
        start_page = QWidget(self)
        start_layout = QVBoxLayout(start_page)
        config = self.manager.get_config()
        self.rules_label = QLabel(
            RULES_TEXT.format(
                minutes=config.duration_seconds // 60,
                count=config.question_count,
                max_attempts=config.max_attempts,
            ),
            start_page,
        )
        self.rules_label.setWordWrap(True)
        start_layout.addWidget(self.rules_label)
        self.start_button = QPushButton(START_BUTTON_TEXT, start_page)
        self.start_button.clicked.connect(self._handle_start)
        start_layout.addWidget(self.start_button)
        self.stack.addWidget(start_page)

        # Question page
        question_page = QWidget(self)
        question_layout = QVBoxLayout(question_page)
        status_row = QHBoxLayout()
        self.timer_label = QLabel("", question_page)
        self.progress_label = QLabel("", question_page)
        self.difficulty_label = QLabel("", question_page)
        for label in (self.timer_label, self.progress_label, self.difficulty_label):
            status_row.addWidget(label)
        status_row.addStretch()
        question_layout.addLayout(status_row)

        self.warning_label = QLabel("", question_page)
        self.warning_label.setStyleSheet("color: #dc2626;")
        question_layout.addWidget(self.warning_label)

        self.question_label = QLabel("", question_page)
        self.question_label.setTextFormat(Qt.RichText)
        self.question_label.setWordWrap(True)
        self.question_label.setTextInteractionFlags(Qt.NoTextInteraction)
        question_layout.addWidget(self.question_label, stretch=1)

        self.option_group = QButtonGroup(self)
        self.option_group.setExclusive(True)
        self.option_buttons: list[QPushButton] = []
        self.option_labels: list[QLabel] = []
        for idx in range(4):
            button = QPushButton("", question_page)
            button.setCheckable(True)
            button.setMinimumHeight(48)
            # QPushButton cannot show rich text; a pass-through label carries the HTML.
            option_label = QLabel("", button)
            option_label.setTextFormat(Qt.RichText)
            option_label.setWordWrap(True)
            option_label.setAttribute(Qt.WA_TransparentForMouseEvents)
            option_layout = QHBoxLayout(button)
            option_layout.addWidget(option_label)
            self.option_labels.append(option_label)
            self.option_group.addButton(button, idx)
            self.option_buttons.append(button)
            question_layout.addWidget(button)
        self.option_group.idToggled.connect(self._handle_option_toggled)

        self.submit_button = QPushButton(SUBMIT_BUTTON_TEXT, question_page)
        self.submit_button.setEnabled(False)
        self.submit_button.clicked.connect(self._handle_submit)
        question_layout.addWidget(self.submit_button)
        self.stack.addWidget(question_page)

        # Result page
        result_page = QWidget(self)
        result_layout = QVBoxLayout(result_page)
        self.result_label = QLabel("", result_page)
        self.result_label.setWordWrap(True)
        result_layout.addWidget(self.result_label)
        self.reset_button = QPushButton(RESET_BUTTON_TEXT, result_page)
        self.reset_button.clicked.connect(self._handle_reset)
        result_layout.addWidget(self.reset_button)
        self.stack.addWidget(result_page)

    def refresh(self) -> None:
        snapshot = self.manager.get_state()
        if snapshot is None:
            return
        page = {SessionPhase.IDLE: 0, SessionPhase.RUNNING: 1, SessionPhase.FINISHED: 2}
        self.stack.setCurrentIndex(page[snapshot.phase])

        if snapshot.phase is SessionPhase.RUNNING:
            self.timer_label.setText(snapshot.remaining_display)
            self.progress_label.setText(f"Question {snapshot.question_number} / {snapshot.question_count}")
            difficulty = snapshot.difficulty_of_current_question
            self.difficulty_label.setText(difficulty.value.title() if difficulty else "")
            if snapshot.latest_infraction_reason:
                self.warning_label.setText(
                    INFRACTION_WARNING_TEMPLATE.format(
                        reason=snapshot.latest_infraction_reason,
                        count=snapshot.infraction_count,
                        max_attempts=snapshot.max_attempts,
                    )
                )
            else:
                self.warning_label.setText(snapshot.presentation_warning or "")
            self._render_current_question()
        elif snapshot.phase is SessionPhase.FINISHED:
            self._render_result()

    def _render_current_question(self) -> None:
        question = self.manager.get_current_question()
        if question is None or question.id == self._rendered_question_id:
            return
        self._rendered_question_id = question.id
        rendered = renderer.render_question(question)
        self.question_label.setText(rendered["question_html"])
        self.option_group.setExclusive(False)
        for button, label, option_html in zip(
            self.option_buttons, self.option_labels, rendered["options_html"]
        ):
            button.setChecked(False)
            label.setText(option_html)
        self.option_group.setExclusive(True)
        self.submit_button.setEnabled(False)

    def _render_result(self) -> None:
        summary = self.manager.get_summary()
        if summary is None:
            self.result_label.setText("Session ended.")
            return
        self.result_label.setText(
            ASSESSMENT_COMPLETE_TEMPLATE.format(
                raw_score=summary.raw_score,
                max_possible=summary.max_possible,
                percentage_score=summary.percentage_score,
                accuracy=summary.accuracy,
                elapsed=format_clock(summary.elapsed_seconds),
            )
        )

    def _handle_option_toggled(self, option_id: int, checked: bool) -> None:
        if checked:
            self.submit_button.setEnabled(True)

    def _handle_start(self) -> None:
        self.manager.start_session()
        self.refresh()

    def _handle_submit(self) -> None:
        selected = self.option_group.checkedId()
        self.manager.submit_answer(selected if selected >= 0 else None)
        self.refresh()

    def _handle_reset(self) -> None:
        self._rendered_question_id = None
        self.manager.reset_session()
        self.refresh()

    def closeEvent(self, event) -> None:  # noqa: N802 - Qt override
        self.refresh_timer.stop()
        self.manager.abandon_session()
        super().closeEvent(event)
