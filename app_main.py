"""Application entry point for the SkillTest assessment host."""

from __future__ import annotations

import argparse
import sys

from assessment_app.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from assessment_app.core.assessment_manager import AssessmentManager
from assessment_app.core.question_bank_loader import QuestionBankError
from assessment_app.core.services.adaptive_selector import EmptyBankError
from assessment_app.utils.logging_config import configure_logging


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a timed adaptive skill assessment.")
    parser.add_argument("--desktop", action="store_true", help="run in a Qt window instead of the browser")
    parser.add_argument("--career", default=None, help="career title used to pick the question bank")
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    return parser.parse_args(argv)


def run_web(host: str, port: int) -> None:
    """Serve the candidate page; the browser selects the career bank."""
    from assessment_app.server.api_server import run_api_server
    from assessment_app.server.tick_scheduler import ThreadTickScheduler

    manager = AssessmentManager(scheduler=ThreadTickScheduler())
    run_api_server(manager, host=host, port=port)


def run_desktop(career_title: str | None) -> int:
    """Run one assessment in a full-screen Qt window."""
    from PySide6.QtWidgets import QApplication

    from assessment_app.ui import (
        AssessmentWindow,
        IntegrityEventFilter,
        QtTickScheduler,
        WidgetPresentationController,
    )
    from assessment_app.ui.dialog_helpers import confirm_retry_bank_load

    app = QApplication(sys.argv)
    presentation = WidgetPresentationController()
    manager = AssessmentManager(scheduler=QtTickScheduler(app), presentation=presentation)

    while True:
        try:
            manager.load_bank(career_title)
            break
        except (EmptyBankError, QuestionBankError) as exc:
            if not confirm_retry_bank_load(None, str(exc)):
                return 1

    window = AssessmentWindow(manager)
    presentation.attach(window)
    event_filter = IntegrityEventFilter(manager.report_signal, watched_window=window)
    event_filter.install(app)
    window.show()
    exit_code = app.exec()
    event_filter.uninstall(app)
    return exit_code


def main(argv: list[str] | None = None) -> None:
    """Initialize logging and launch the requested host."""
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    logger = configure_logging()
    if args.desktop:
        logger.info("Starting SkillTest desktop host…")
        sys.exit(run_desktop(args.career))
    logger.info("Starting SkillTest web host on http://%s:%d/", args.host, args.port)
    run_web(args.host, args.port)


if __name__ == "__main__":
    main()
