"""Session event logging and timing spans."""
from .logger import log_event, summarize
from .tracing import span

__all__ = ["log_event", "span", "summarize"]
