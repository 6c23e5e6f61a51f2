"""Practice question banks, one ordered list per interview type."""
from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Tuple

import yaml
from pydantic import Field

from config.settings import settings

from .models import PracticeType, _WireModel

logger = logging.getLogger(__name__)

DEFAULT_PATH = Path(__file__).resolve().parents[1] / "config" / "question_bank.yaml"
PRACTICE_TYPES: Tuple[str, ...] = ("technical", "behavioral", "case", "subjective")


class PracticeQuestion(_WireModel):
    id: int = Field(ge=1)
    question: str
    sample_answer: str


class QuestionBankError(ValueError):  # Raised when the bank file is malformed
    pass


@lru_cache(maxsize=4)
def _load(path: str) -> Dict[str, Tuple[PracticeQuestion, ...]]:
    with open(path, "r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise QuestionBankError(f"{path}: expected a mapping of interview type to questions")

    bank: Dict[str, Tuple[PracticeQuestion, ...]] = {}
    for practice_type, items in data.items():
        if practice_type not in PRACTICE_TYPES:
            logger.warning("Ignoring unknown practice type %r in %s", practice_type, path)
            continue
        bank[practice_type] = tuple(PracticeQuestion.model_validate(item) for item in items or [])
    return bank


def load_question_bank(path: str | Path | None = None) -> Dict[str, Tuple[PracticeQuestion, ...]]:
    target = Path(path or settings.QUESTION_BANK_PATH)
    if not target.exists() and target != DEFAULT_PATH:
        logger.warning("Question bank %s not found; using %s", target, DEFAULT_PATH)
        target = DEFAULT_PATH
    return _load(str(target))


def practice_questions(practice_type: PracticeType, path: str | Path | None = None) -> List[PracticeQuestion]:
    """Questions for ``practice_type`` in asking order; empty for a type with no bank."""

    return list(load_question_bank(path).get(practice_type, ()))


__all__ = ["PRACTICE_TYPES", "PracticeQuestion", "QuestionBankError", "load_question_bank", "practice_questions"]
