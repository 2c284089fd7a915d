"""Configuration package for the Yogashna service."""

from yogashna.config.app_config import (
    AppConfig,
    AssetsConfig,
    AuthConfig,
    clear_config_cache,
    load_app_config,
)
from yogashna.config.wellness_tags import (
    get_wellness_focus_code,
    get_wellness_focus_label,
    get_wellness_goal_code,
    get_wellness_goal_label,
)

__all__ = [
    "AppConfig",
    "AssetsConfig",
    "AuthConfig",
    "clear_config_cache",
    "load_app_config",
    "get_wellness_focus_code",
    "get_wellness_focus_label",
    "get_wellness_goal_code",
    "get_wellness_goal_label",
]
