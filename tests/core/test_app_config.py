"""Tests for configuration loading and media URL builders."""

import pytest

from yogashna.config.app_config import (
    CONFIG_FILE,
    AppConfig,
    AssetsConfig,
    clear_config_cache,
    load_app_config,
)
from yogashna.core.assets import get_playback_url, get_thumbnail_url

YAML = """
server:
  port: 8080
  api_prefix: /api/v2
auth:
  disabled: true
assets:
  r2_public_base_url: https://cdn.example.org/
  stream_customer_subdomain: customer-yaml
database:
  path: db/from-yaml.db
"""


@pytest.fixture
def bare_env(tmp_path, monkeypatch):
    """Working directory without config file or overriding variables."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "AUTH_DISABLED",
        "DATABASE_PATH",
        "PORT",
        "CLOUDFLARE_R2_PUBLIC_BASE_URL",
        "CLOUDFLARE_STREAM_CUSTOMER_SUBDOMAIN",
        "FIREBASE_PROJECT_ID",
        "FIREBASE_CLIENT_EMAIL",
        "FIREBASE_PRIVATE_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
    clear_config_cache()
    yield tmp_path
    clear_config_cache()


def _write_yaml(root, text=YAML):
    path = root / CONFIG_FILE
    path.parent.mkdir(parents=True)
    path.write_text(text, encoding="utf-8")


class TestLoadAppConfig:
    """Tests for load_app_config."""

    def test_defaults_without_file(self, bare_env):
        config = load_app_config()
        assert isinstance(config, AppConfig)
        assert config.server.port == 3000
        assert config.server.api_prefix == "/api/v1"
        assert config.auth.disabled is False
        assert config.auth.dev_user_uid == "DEV_USER"
        assert config.assets.r2_public_base_url == ""
        assert config.database.path == "db/yogashna.db"
        assert config.paths["import_dir"] == "data/imports"

    def test_loads_yaml_file(self, bare_env):
        _write_yaml(bare_env)
        config = load_app_config()
        assert config.server.port == 8080
        assert config.server.api_prefix == "/api/v2"
        assert config.auth.disabled is True
        assert config.assets.stream_customer_subdomain == "customer-yaml"
        assert config.database.path == "db/from-yaml.db"

    def test_missing_sections_use_defaults(self, bare_env):
        _write_yaml(bare_env, "server:\n  port: 9000\n")
        config = load_app_config()
        assert config.server.port == 9000
        assert config.server.host == "0.0.0.0"
        assert config.database.path == "db/yogashna.db"

    def test_env_overrides_file(self, bare_env, monkeypatch):
        _write_yaml(bare_env)
        monkeypatch.setenv("AUTH_DISABLED", "false")
        monkeypatch.setenv("PORT", "4000")
        monkeypatch.setenv("DATABASE_PATH", "/tmp/other.db")
        monkeypatch.setenv("CLOUDFLARE_STREAM_CUSTOMER_SUBDOMAIN", "customer-env")
        config = load_app_config()
        assert config.auth.disabled is False
        assert config.server.port == 4000
        assert config.database.path == "/tmp/other.db"
        assert config.assets.stream_customer_subdomain == "customer-env"

    def test_auth_disabled_only_for_true(self, bare_env, monkeypatch):
        monkeypatch.setenv("AUTH_DISABLED", "yes")
        assert load_app_config().auth.disabled is False

    def test_firebase_credentials_from_env(self, bare_env, monkeypatch):
        """Escaped newlines in the private key are restored."""
        monkeypatch.setenv("FIREBASE_PROJECT_ID", "yogashna-test")
        monkeypatch.setenv("FIREBASE_CLIENT_EMAIL", "svc@yogashna-test.iam.gserviceaccount.com")
        monkeypatch.setenv("FIREBASE_PRIVATE_KEY", "-----BEGIN-----\\nabc\\n-----END-----")
        auth = load_app_config().auth
        assert auth.has_firebase_credentials
        assert auth.firebase_private_key == "-----BEGIN-----\nabc\n-----END-----"

    def test_partial_firebase_credentials(self, bare_env, monkeypatch):
        monkeypatch.setenv("FIREBASE_PROJECT_ID", "yogashna-test")
        assert not load_app_config().auth.has_firebase_credentials

    def test_cached_until_cleared(self, bare_env, monkeypatch):
        first = load_app_config()
        monkeypatch.setenv("PORT", "5000")
        assert load_app_config() is first
        assert load_app_config(force_reload=True).server.port == 5000


class TestMediaUrls:
    """Tests for thumbnail and playback URLs."""

    def test_thumbnail_url(self):
        config = AssetsConfig(r2_public_base_url="https://cdn.example.org/")
        assert get_thumbnail_url("/thumbs/a.jpg", config) == "https://cdn.example.org/thumbs/a.jpg"

    def test_thumbnail_without_key(self):
        assert get_thumbnail_url(None, AssetsConfig()) is None
        assert get_thumbnail_url("", AssetsConfig()) is None

    def test_playback_url(self):
        config = AssetsConfig(stream_customer_subdomain="customer-abc")
        assert get_playback_url("uid123", config) == (
            "https://customer-abc.cloudflarestream.com/uid123/manifest/video.m3u8"
        )

    def test_playback_without_uid(self):
        assert get_playback_url(None, AssetsConfig()) is None

    def test_uses_loaded_config(self, app_env):
        assert get_thumbnail_url("k.jpg") == "https://media.example.com/k.jpg"
