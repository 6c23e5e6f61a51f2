"""Transcript message model and view helpers."""
from .message import Message, Role, new_message_id, user_answers, visible_messages

__all__ = ["Message", "Role", "new_message_id", "user_answers", "visible_messages"]
