"""Assessment-related constants shared across hosts and core layers."""

TEST_DURATION_MINUTES: int = 15
NUMBER_OF_QUESTIONS: int = 20
MAX_CHEAT_ATTEMPTS: int = 3
CLOCK_TICK_INTERVAL_SECONDS: float = 1.0

DIFFICULTY_WEIGHTS: dict[str, int] = {"easy": 1, "medium": 2, "hard": 3}

DEFAULT_CAREER_SLUG: str = "software-engineer"
CAREER_MAP: dict[str, str] = {
    "Software Engineer": "software-engineer",
    "Data Analyst / Scientist": "data-analyst",
    "Cybersecurity Analyst": "cybersecurity",
    "Cloud / DevOps Engineer": "cloud-devops",
    "AI / Machine Learning Engineer": "ai-ml",
}
QUESTION_BANK_FILE_TEMPLATE: str = "{slug}-questions.json"
