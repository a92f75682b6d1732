"""Qt desktop host for running assessments."""

from .assessment_window import AssessmentWindow
from .qt_adapters import (
    IntegrityEventFilter,
    QtTickHandle,
    QtTickScheduler,
    WidgetPresentationController,
)

__all__ = [
    "AssessmentWindow",
    "IntegrityEventFilter",
    "QtTickHandle",
    "QtTickScheduler",
    "WidgetPresentationController",
]
