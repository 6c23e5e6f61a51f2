"""Pydantic schemas for the chat and analysis endpoints."""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from transcript import Message


class ChatReq(BaseModel):
    messages: List[Message] = Field(default_factory=list)
    systemMessage: Optional[str] = None


class ChatResp(BaseModel):
    id: str
    role: Literal["assistant"] = "assistant"
    content: str


class AnalyzeReq(BaseModel):
    messages: List[Message] = Field(default_factory=list)
    jobDetails: Dict[str, Any]


class ErrorEnvelope(BaseModel):
    error: str
    details: str
