"""Network configuration constants for the assessment host."""

DEFAULT_HOST: str = "0.0.0.0"
DEFAULT_PORT: int = 8000
