from __future__ import annotations  # Re-export prompt_builder public API

from .prompt_builder import (
    EXAMINER,
    INTERVIEWER,
    PRACTICE_ROLES,
    Persona,
    build_system_instruction,
    fallback_opening,
    persona_for,
    question_total,
    user_name,
)

__all__ = [
    "EXAMINER",
    "INTERVIEWER",
    "PRACTICE_ROLES",
    "Persona",
    "build_system_instruction",
    "fallback_opening",
    "persona_for",
    "question_total",
    "user_name",
]
