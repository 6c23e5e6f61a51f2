"""Performance report returned after a finished session."""
from __future__ import annotations

from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

MAX_POINTS = 5


class FeedbackReport(BaseModel):
    overall_score: int = Field(ge=0, le=100)
    strengths: List[str] = Field(min_length=3, max_length=MAX_POINTS)
    improvements: List[str] = Field(min_length=3, max_length=MAX_POINTS)
    detailed_feedback: str

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    @field_validator("overall_score", mode="before")
    @classmethod
    def _round_score(cls, value: Any) -> Any:
        if isinstance(value, float):
            return int(round(value))
        if isinstance(value, str) and value.strip().endswith("%"):
            return value.strip()[:-1]
        return value

    @field_validator("strengths", "improvements", mode="before")
    @classmethod
    def _trim_points(cls, value: Any) -> Any:
        if isinstance(value, list):
            cleaned = [str(item).strip() for item in value if str(item).strip()]
            return cleaned[:MAX_POINTS]
        return value

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)
