"""Configuration package for the mock interview services."""
from .registry import ANALYSIS_KEY, CHAT_KEY, bind_model, get_model, is_bound, unbind_model
from .routes import AppConfig, LlmRoute, load_config, resolve_registry, resolve_route
from .settings import Settings, settings

__all__ = [
    "AppConfig",
    "LlmRoute",
    "load_config",
    "resolve_registry",
    "resolve_route",
    "ANALYSIS_KEY",
    "CHAT_KEY",
    "bind_model",
    "get_model",
    "is_bound",
    "unbind_model",
    "Settings",
    "settings",
]
