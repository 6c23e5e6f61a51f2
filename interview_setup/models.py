"""Session configuration variants handed to the interview core."""
from __future__ import annotations

from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

SessionKind = Literal["job", "subjective", "practice"]
PracticeType = Literal["technical", "behavioral", "case", "subjective"]


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class UserProfile(_WireModel):
    name: str = ""
    gender: str = ""


class FileDetails(_WireModel):
    name: str
    type: str = ""
    size: int = Field(default=0, ge=0)


class JobInterviewConfig(_WireModel):
    kind: Literal["job"] = "job"
    job_title: str
    company: Optional[str] = None
    job_description: str = ""
    required_skills: str = ""
    experience_level: str = "mid-level"
    interview_type: str = "technical"
    additional_notes: Optional[str] = None
    user_profile: Optional[UserProfile] = None


class SubjectiveVivaConfig(_WireModel):
    kind: Literal["subjective"] = "subjective"
    subject: str
    topic: str
    subject_level: str = "undergraduate"
    additional_notes: Optional[str] = None
    has_project_document: bool = False
    file_details: Optional[FileDetails] = None
    user_profile: Optional[UserProfile] = None
    interview_type: Literal["subjective"] = "subjective"


class PracticeConfig(_WireModel):
    """Fixed question-bank practice round for one interview type."""

    kind: Literal["practice"] = "practice"
    practice_type: PracticeType
    user_profile: Optional[UserProfile] = None


SessionConfig = Annotated[Union[JobInterviewConfig, SubjectiveVivaConfig, PracticeConfig], Field(discriminator="kind")]

_CONFIG_ADAPTER: TypeAdapter[SessionConfig] = TypeAdapter(SessionConfig)


def infer_kind(payload: Dict[str, Any]) -> SessionKind:
    """Tag an untagged payload.

    Practice rounds carry ``practiceType``; the viva screens send
    ``interviewType="subjective"``.
    """

    kind = payload.get("kind")
    if kind in ("job", "subjective", "practice"):
        return kind
    if payload.get("practiceType") or payload.get("practice_type"):
        return "practice"
    if payload.get("interviewType") == "subjective" or payload.get("interview_type") == "subjective":
        return "subjective"
    return "job"


def parse_session_config(payload: Dict[str, Any]) -> SessionConfig:
    """Validate a wire payload into a tagged ``SessionConfig``.

    This is the only place the variant is decided; everything downstream
    dispatches on ``config.kind``.
    """

    data = dict(payload)
    data["kind"] = infer_kind(data)
    return _CONFIG_ADAPTER.validate_python(data)


def config_to_wire(config: SessionConfig) -> Dict[str, Any]:
    return config.model_dump(by_alias=True, exclude_none=True)


__all__ = [
    "FileDetails",
    "JobInterviewConfig",
    "PracticeConfig",
    "PracticeType",
    "SessionConfig",
    "SessionKind",
    "SubjectiveVivaConfig",
    "UserProfile",
    "config_to_wire",
    "infer_kind",
    "parse_session_config",
]
