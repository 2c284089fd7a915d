"""Application configuration loader.

Loads centralized configuration from data/config/app_config_v1.yaml,
then applies environment variable overrides (deployment secrets such as
Firebase credentials never live in the YAML file).

Usage:
    from yogashna.config.app_config import load_app_config

    config = load_app_config()
    if config.auth.disabled:
        ...
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("data/config/app_config_v1.yaml")

DEV_USER_UID = "DEV_USER"


@dataclass
class ServerConfig:
    """HTTP server settings."""

    host: str = "0.0.0.0"
    port: int = 3000
    api_prefix: str = "/api/v1"


@dataclass
class AuthConfig:
    """Bearer-token authentication settings."""

    disabled: bool = False
    dev_user_uid: str = DEV_USER_UID
    firebase_project_id: str | None = None
    firebase_client_email: str | None = None
    firebase_private_key: str | None = None

    @property
    def has_firebase_credentials(self) -> bool:
        """True when all three service-account fields are present."""
        return bool(
            self.firebase_project_id
            and self.firebase_client_email
            and self.firebase_private_key
        )


@dataclass
class AssetsConfig:
    """Media hosting settings (R2 object storage and Stream playback)."""

    r2_public_base_url: str = ""
    stream_customer_subdomain: str = ""


@dataclass
class DatabaseConfig:
    """SQLite database location."""

    path: str = "db/yogashna.db"


@dataclass
class AppConfig:
    """Application-wide configuration."""

    server: ServerConfig = field(default_factory=ServerConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    assets: AssetsConfig = field(default_factory=AssetsConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    paths: dict[str, str] = field(default_factory=dict)


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "server": {"host": "0.0.0.0", "port": 3000, "api_prefix": "/api/v1"},
        "auth": {"disabled": False, "dev_user_uid": DEV_USER_UID},
        "assets": {
            "r2_public_base_url": "",
            "stream_customer_subdomain": "",
        },
        "database": {"path": "db/yogashna.db"},
        "paths": {
            "config_dir": "data/config",
            "import_dir": "data/imports",
        },
    }


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() == "true"


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object."""
    server_data = data.get("server") or {}
    server = ServerConfig(
        host=server_data.get("host", "0.0.0.0"),
        port=int(server_data.get("port", 3000)),
        api_prefix=server_data.get("api_prefix", "/api/v1"),
    )

    auth_data = data.get("auth") or {}
    auth = AuthConfig(
        disabled=_parse_bool(auth_data.get("disabled", False)),
        dev_user_uid=auth_data.get("dev_user_uid", DEV_USER_UID),
        firebase_project_id=auth_data.get("firebase_project_id"),
        firebase_client_email=auth_data.get("firebase_client_email"),
        firebase_private_key=auth_data.get("firebase_private_key"),
    )

    assets_data = data.get("assets") or {}
    assets = AssetsConfig(
        r2_public_base_url=assets_data.get("r2_public_base_url", ""),
        stream_customer_subdomain=assets_data.get("stream_customer_subdomain", ""),
    )

    database = DatabaseConfig(
        path=(data.get("database") or {}).get("path", "db/yogashna.db"),
    )

    return AppConfig(
        server=server,
        auth=auth,
        assets=assets,
        database=database,
        paths=data.get("paths") or {},
    )


def _apply_env_overrides(config: AppConfig) -> AppConfig:
    """Apply environment variable overrides on top of file config."""
    env = os.environ

    if "AUTH_DISABLED" in env:
        config.auth.disabled = _parse_bool(env["AUTH_DISABLED"])
    if env.get("FIREBASE_PROJECT_ID"):
        config.auth.firebase_project_id = env["FIREBASE_PROJECT_ID"]
    if env.get("FIREBASE_CLIENT_EMAIL"):
        config.auth.firebase_client_email = env["FIREBASE_CLIENT_EMAIL"]
    if env.get("FIREBASE_PRIVATE_KEY"):
        # Keys pasted into .env files carry escaped newlines
        config.auth.firebase_private_key = env["FIREBASE_PRIVATE_KEY"].replace("\\n", "\n")
    if env.get("CLOUDFLARE_R2_PUBLIC_BASE_URL"):
        config.assets.r2_public_base_url = env["CLOUDFLARE_R2_PUBLIC_BASE_URL"]
    if env.get("CLOUDFLARE_STREAM_CUSTOMER_SUBDOMAIN"):
        config.assets.stream_customer_subdomain = env["CLOUDFLARE_STREAM_CUSTOMER_SUBDOMAIN"]
    if env.get("DATABASE_PATH"):
        config.database.path = env["DATABASE_PATH"]
    if env.get("PORT"):
        config.server.port = int(env["PORT"])

    return config


def load_app_config(force_reload: bool = False) -> AppConfig:
    """Load application config from YAML (or defaults) plus environment.

    Args:
        force_reload: If True, ignore cached config and reload from file.

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    data: dict[str, Any]

    if CONFIG_FILE.exists():
        logger.debug("loading_app_config", source=str(CONFIG_FILE))
        data = yaml.safe_load(CONFIG_FILE.read_text(encoding="utf-8")) or {}
    else:
        logger.info("using_default_config")
        data = _get_defaults()

    _cached_config = _apply_env_overrides(_parse_config(data))
    return _cached_config


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
