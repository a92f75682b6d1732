"""Helper functions for common dialog patterns in the desktop host."""

from __future__ import annotations

from PySide6.QtWidgets import QMessageBox, QWidget

from assessment_app.constants.ui_constants import BANK_LOAD_FAILED_MESSAGE


def confirm_retry_bank_load(parent: QWidget | None, detail: str) -> bool:
    """Ask whether to retry loading a question bank that failed to load.

    Returns:
        True if the user chose to retry, False otherwise
    """
    reply = QMessageBox.critical(
        parent,
        "Question Bank",
        f"{BANK_LOAD_FAILED_MESSAGE}\n\n{detail}",
        QMessageBox.Retry | QMessageBox.Cancel,
        QMessageBox.Retry,
    )
    return reply == QMessageBox.Retry
