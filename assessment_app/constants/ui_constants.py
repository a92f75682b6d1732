"""Qt UI constants used by the desktop host."""

WINDOW_TITLE: str = "SkillTest Assessment"
START_BUTTON_TEXT: str = "Start Assessment"
SUBMIT_BUTTON_TEXT: str = "Next Question"
RESET_BUTTON_TEXT: str = "Retake Assessment"
STATE_REFRESH_INTERVAL_MS: int = 500

INFRACTION_WARNING_TEMPLATE: str = "Warning: {reason} ({count}/{max_attempts})"
BANK_LOAD_FAILED_MESSAGE: str = "Unable to load the question bank. Please try again."
ASSESSMENT_COMPLETE_TEMPLATE: str = (
    "Score: {raw_score} / {max_possible} ({percentage_score}%)\n"
    "Accuracy: {accuracy:.0f}%\n"
    "Time taken: {elapsed}"
)
