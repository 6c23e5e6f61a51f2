from __future__ import annotations  # Session controller state models

from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from response_gateway import GatewayError
from transcript import Message


class SessionPhase(str, Enum):
    INITIALIZING = "initializing"
    AWAITING_USER_INPUT = "awaiting_user_input"
    AWAITING_AI_RESPONSE = "awaiting_ai_response"
    COMPLETE = "complete"


class SessionState(BaseModel):  # Mutable snapshot owned by one controller
    transcript: List[Message] = Field(default_factory=list)
    question_count: int = Field(default=0, ge=0)
    is_complete: bool = False
    last_error: Optional[GatewayError] = None
    phase: SessionPhase = SessionPhase.INITIALIZING
    events: List[Dict[str, Any]] = Field(default_factory=list)

    model_config = ConfigDict(arbitrary_types_allowed=True)


class Notice(BaseModel):  # Dismissible user-visible notification
    title: str
    description: str
    variant: Literal["default", "warning", "destructive"] = "default"

    model_config = ConfigDict(frozen=True)
