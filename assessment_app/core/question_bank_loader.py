"""Utilities for loading per-career question banks from JSON files.

File format: a JSON array of records, one per question.

    [
      {
        "question": "Which data structure gives O(1) average lookup by key?",
        "options": ["Linked list", "Hash map", "Binary heap", "Stack"],
        "answerIndex": 1,
        "difficulty": "easy"
      }
    ]

An optional integer ``id`` may be given; otherwise ids are assigned in file
order starting at 1. Malformed records (wrong option count, out-of-range
``answerIndex``, unknown difficulty, blank text) are dropped individually
with a warning instead of failing the whole bank.
"""

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from assessment_app.constants.assessment_constants import (
    CAREER_MAP,
    DEFAULT_CAREER_SLUG,
    QUESTION_BANK_FILE_TEMPLATE,
)
from assessment_app.core.models import Difficulty, Question
from assessment_app.core.services.adaptive_selector import EmptyBankError

logger = logging.getLogger(__name__)

DEFAULT_BANK_DIR = Path(__file__).resolve().parent.parent / "data" / "banks"


class QuestionBankError(Exception):
    """Raised when a question bank cannot be read."""


class QuestionRecord(BaseModel):
    """Schema of one raw question record."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int | None = None
    question: str = Field(min_length=1)
    options: list[str] = Field(min_length=4, max_length=4)
    answer_index: int = Field(alias="answerIndex", ge=0, le=3)
    difficulty: Difficulty

    @field_validator("question")
    @classmethod
    def _strip_question(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Question text cannot be empty.")
        return cleaned

    @field_validator("options")
    @classmethod
    def _strip_options(cls, value: list[str]) -> list[str]:
        cleaned = [option.strip() for option in value]
        if any(not option for option in cleaned):
            raise ValueError("Option text cannot be empty.")
        return cleaned


@dataclass(slots=True)
class LoadedBank:
    """Container for a loaded bank and what was dropped from it."""

    source_path: Path
    career_slug: str
    questions: list[Question]
    dropped_count: int = 0


def resolve_career_slug(career_title: str | None) -> str:
    """Map a career title to its bank slug, defaulting to software engineering."""
    if not career_title:
        return DEFAULT_CAREER_SLUG
    return CAREER_MAP.get(career_title.strip(), DEFAULT_CAREER_SLUG)


def bank_path_for(career_title: str | None, bank_dir: Path = DEFAULT_BANK_DIR) -> Path:
    slug = resolve_career_slug(career_title)
    return bank_dir / QUESTION_BANK_FILE_TEMPLATE.format(slug=slug)


def load_bank_for_career(career_title: str | None, bank_dir: Path = DEFAULT_BANK_DIR) -> LoadedBank:
    return load_bank_from_file(bank_path_for(career_title, bank_dir))


def load_bank_from_file(file_path: Path) -> LoadedBank:
    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise QuestionBankError(f"Unable to read question bank {file_path.name}.") from exc
    try:
        raw_records = json.loads(text)
    except json.JSONDecodeError as exc:
        raise QuestionBankError(f"Question bank {file_path.name} is not valid JSON.") from exc

    questions, dropped = parse_question_records(raw_records)
    if not questions:
        raise EmptyBankError(f"Question bank {file_path.name} did not contain any usable questions.")
    logger.info(
        "Loaded %d question(s) from %s (%d dropped)", len(questions), file_path.name, dropped
    )
    return LoadedBank(
        source_path=file_path,
        career_slug=file_path.name.removesuffix("-questions.json"),
        questions=questions,
        dropped_count=dropped,
    )


def parse_question_records(raw_records: Any) -> tuple[list[Question], int]:
    """Validate raw records, returning usable questions and the number dropped."""
    if not isinstance(raw_records, list):
        raise QuestionBankError("Question bank must be a JSON array of question records.")

    questions: list[Question] = []
    used_ids: set[int] = set()
    dropped = 0
    for position, raw in enumerate(raw_records, start=1):
        try:
            record = QuestionRecord.model_validate(raw)
        except ValidationError as exc:
            dropped += 1
            logger.warning(
                "Dropping malformed question record #%d: %s",
                position,
                "; ".join(error["msg"] for error in exc.errors()),
            )
            continue

        question_id = record.id if record.id is not None else position
        if question_id in used_ids:
            dropped += 1
            logger.warning("Dropping question record #%d: duplicate id %d", position, question_id)
            continue
        used_ids.add(question_id)
        questions.append(
            Question(
                id=question_id,
                text=record.question,
                options=tuple(record.options),
                correct_option_index=record.answer_index,
                difficulty=record.difficulty,
            )
        )
    return questions, dropped
