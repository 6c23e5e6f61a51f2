"""Conversation messages shared by the session core, gateway and backend."""
from __future__ import annotations

import itertools
import threading
import time
from typing import Iterable, List, Literal

from pydantic import BaseModel, ConfigDict

Role = Literal["system", "user", "assistant"]

_COUNTER = itertools.count()
_COUNTER_GUARD = threading.Lock()


def new_message_id() -> str:
    """Return a time-ordered id: epoch milliseconds plus a process-wide counter."""

    with _COUNTER_GUARD:
        seq = next(_COUNTER)
    return f"{int(time.time() * 1000)}-{seq}"


class Message(BaseModel):
    id: str
    role: Role
    content: str

    model_config = ConfigDict(frozen=True)

    @classmethod
    def create(cls, role: Role, content: str) -> "Message":
        return cls(id=new_message_id(), role=role, content=content)


def visible_messages(messages: Iterable[Message]) -> List[Message]:
    """Messages shown to the user or submitted upstream: everything but system."""

    return [message for message in messages if message.role != "system"]


def user_answers(messages: Iterable[Message]) -> List[str]:
    return [message.content for message in messages if message.role == "user"]
