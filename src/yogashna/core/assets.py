"""Media URL builders for R2 thumbnails and Stream playback."""

from __future__ import annotations

from yogashna.config.app_config import AssetsConfig, load_app_config


def _assets_config(config: AssetsConfig | None) -> AssetsConfig:
    return config or load_app_config().assets


def get_thumbnail_url(key: str | None, config: AssetsConfig | None = None) -> str | None:
    """Public URL of an object key in the R2 bucket.

    Args:
        key: Object key (leading slashes ignored)
        config: Assets settings (defaults to the loaded app config)

    Returns:
        URL, or None when there is no key
    """
    if not key:
        return None
    base = _assets_config(config).r2_public_base_url.rstrip("/")
    return f"{base}/{key.lstrip('/')}"


def get_playback_url(stream_uid: str | None, config: AssetsConfig | None = None) -> str | None:
    """HLS manifest URL of a Stream video, or None without a uid."""
    if not stream_uid:
        return None
    subdomain = _assets_config(config).stream_customer_subdomain
    return f"https://{subdomain}.cloudflarestream.com/{stream_uid}/manifest/video.m3u8"
