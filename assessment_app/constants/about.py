"""Static metadata describing SkillTest."""

APP_NAME = "SkillTest"
APP_VERSION = "0.1"
APP_LICENSE = "MIT License"
APP_ABOUT_TEXT = (
    "SkillTest runs timed, adaptive-difficulty skill assessments for a career training path. "
    "Questions get harder after correct answers and easier after mistakes, and the session "
    "ends early when the candidate leaves the test window too often."
)

RULES_TEXT = (
    "You have {minutes} minutes to answer up to {count} questions.\n"
    "The test runs in full-screen. Switching tabs, leaving full-screen, copying or pasting "
    "counts as an infraction. After {max_attempts} infractions the test ends immediately."
)
