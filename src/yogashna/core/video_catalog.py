"""Catalog read models: videos, video assets and program templates.

Builds the API representations from repository records, applying
translations for the requested language and resolving media URLs.
"""

from __future__ import annotations

from typing import Any

import structlog

from yogashna.core.assets import get_playback_url, get_thumbnail_url
from yogashna.core.errors import NotFoundError
from yogashna.db.catalog_repository import (
    ProgramTemplateRecord,
    TagRecord,
    VideoAssetRecord,
    VideoRecord,
    get_program_template,
    get_program_template_tags,
    get_translations,
    get_video,
    get_video_tags,
    get_videos_by_ids,
    list_program_days,
    list_program_sections,
    list_program_templates,
    list_video_assets,
    list_videos,
)

logger = structlog.get_logger(__name__)

DEFAULT_LANGUAGE = "en"


# =============================================================================
# SERIALIZATION
# =============================================================================


def _tags_to_dicts(tags: list[TagRecord], tag_translations: dict[str, dict[str, str]]) -> list[dict]:
    return [
        {
            "id": tag.id,
            "code": tag.code,
            "label": tag_translations.get(tag.id, {}).get("label") or tag.label,
            "tagType": {"code": tag.tag_type_code},
        }
        for tag in tags
    ]


def _video_to_dict(
    video: VideoRecord,
    tags: list[TagRecord],
    translations: dict[str, str],
    tag_translations: dict[str, dict[str, str]],
) -> dict[str, Any]:
    return {
        "id": video.id,
        "name": translations.get("name") or video.name,
        "descriptionShort": translations.get("descriptionShort") or video.description_short,
        "primaryCategory": video.primary_category,
        "durationSec": video.duration_sec,
        "level": video.level,
        "intensity": video.intensity,
        "strengthDemand": video.strength_demand,
        "accessLevel": video.access_level,
        "requiredEntitlementKey": video.required_entitlement_key,
        "cloudflareStreamUid": video.cloudflare_stream_uid,
        "thumbnailR2Key": video.thumbnail_r2_key,
        "status": video.status,
        "version": video.version,
        "tags": _tags_to_dicts(tags, tag_translations),
        "playbackUrl": get_playback_url(video.cloudflare_stream_uid),
        "thumbnailUrl": get_thumbnail_url(video.thumbnail_r2_key),
    }


def _videos_to_dicts(videos: list[VideoRecord], lang: str) -> list[dict[str, Any]]:
    """Serialize videos with their tags, fetching translations in batches."""
    video_ids = [v.id for v in videos]
    tags_by_video = get_video_tags(video_ids)
    tag_ids = list({tag.id for tags in tags_by_video.values() for tag in tags})

    video_translations = get_translations("video", video_ids, lang)
    tag_translations = get_translations("tag", tag_ids, lang)

    return [
        _video_to_dict(
            video,
            tags_by_video.get(video.id, []),
            video_translations.get(video.id, {}),
            tag_translations,
        )
        for video in videos
    ]


def _template_to_dict(
    template: ProgramTemplateRecord,
    tags: list[TagRecord],
    translations: dict[str, str],
    tag_translations: dict[str, dict[str, str]],
) -> dict[str, Any]:
    return {
        "id": template.id,
        "title": translations.get("title") or template.title,
        "sanskritTitle": template.sanskrit_title,
        "subtitle": translations.get("subtitle") or template.subtitle,
        "descriptionShort": translations.get("descriptionShort") or template.description_short,
        "heroImageKey": template.hero_image_key,
        "defaultDays": template.default_days,
        "defaultMinutesPerDay": template.default_minutes_per_day,
        "levelLabel": template.level_label,
        "accessLevel": template.access_level,
        "requiredEntitlementKey": template.required_entitlement_key,
        "status": template.status,
        "version": template.version,
        "tags": _tags_to_dicts(tags, tag_translations),
    }


def video_asset_to_dict(asset: VideoAssetRecord) -> dict[str, Any]:
    return {
        "id": asset.id,
        "name": asset.name,
        "shortDescription": asset.short_description,
        "streamUid": asset.stream_uid,
        "thumbnailKey": asset.thumbnail_key,
        "primaryCategory": asset.primary_category,
        "yogaSubCategory": asset.yoga_sub_category,
        "breathingSubCategory": asset.breathing_sub_category,
        "meditationSubCategory": asset.meditation_sub_category,
        "level": asset.level,
        "intensity": asset.intensity,
        "strengthDemand": asset.strength_demand,
        "sequenceRole": asset.sequence_role,
        "durationSec": asset.duration_sec,
        "goals": asset.goals,
        "focusAreas": asset.focus_areas,
        "contraIndications": asset.contra_indications,
        "status": asset.status,
        "version": asset.version,
        "createdAt": asset.created_at,
        "thumbnailUrl": get_thumbnail_url(asset.thumbnail_key),
        "playbackUrl": get_playback_url(asset.stream_uid),
    }


# =============================================================================
# VIDEOS
# =============================================================================


def find_videos(
    limit: int = 20,
    offset: int = 0,
    primary_category: str | None = None,
    access_level: str | None = None,
    tag_ids: list[str] | None = None,
    status: str = "ACTIVE",
    lang: str = DEFAULT_LANGUAGE,
) -> dict[str, Any]:
    """Page of catalog videos with pagination info."""
    videos, total = list_videos(
        limit=limit,
        offset=offset,
        primary_category=primary_category,
        access_level=access_level,
        tag_ids=tag_ids,
        status=status,
    )
    return {
        "data": _videos_to_dicts(videos, lang),
        "pagination": {"limit": limit, "offset": offset, "total": total},
    }


def find_video(video_id: str, status: str = "ACTIVE", lang: str = DEFAULT_LANGUAGE) -> dict[str, Any]:
    """One catalog video.

    Raises:
        NotFoundError: If the video does not exist with that status
    """
    video = get_video(video_id, status=status)
    if video is None:
        raise NotFoundError(f"Video with id {video_id} not found or not {status}")
    return {"data": _videos_to_dicts([video], lang)[0]}


# =============================================================================
# VIDEO ASSETS
# =============================================================================


def find_video_assets(
    primary_category: str | None = None,
    goal: str | None = None,
    level: str | None = None,
    intensity: str | None = None,
    min_duration_sec: int | None = None,
    max_duration_sec: int | None = None,
    status: str = "ACTIVE",
    take: int = 50,
    skip: int = 0,
) -> dict[str, Any]:
    assets, total = list_video_assets(
        primary_category=primary_category,
        goal=goal,
        level=level,
        intensity=intensity,
        min_duration_sec=min_duration_sec,
        max_duration_sec=max_duration_sec,
        status=status,
        take=take,
        skip=skip,
    )
    return {
        "data": [video_asset_to_dict(asset) for asset in assets],
        "total": total,
        "take": take,
        "skip": skip,
    }


# =============================================================================
# PROGRAM TEMPLATES
# =============================================================================


def find_program_templates(
    limit: int = 20,
    offset: int = 0,
    access_level: str | None = None,
    tag_ids: list[str] | None = None,
    status: str = "ACTIVE",
    lang: str = DEFAULT_LANGUAGE,
) -> dict[str, Any]:
    """Page of program templates with pagination info."""
    templates, total = list_program_templates(
        limit=limit,
        offset=offset,
        access_level=access_level,
        tag_ids=tag_ids,
        status=status,
    )

    template_ids = [t.id for t in templates]
    tags_by_template = get_program_template_tags(template_ids)
    tag_ids_all = list({tag.id for tags in tags_by_template.values() for tag in tags})
    translations = get_translations("program_template", template_ids, lang)
    tag_translations = get_translations("tag", tag_ids_all, lang)

    return {
        "data": [
            _template_to_dict(
                template,
                tags_by_template.get(template.id, []),
                translations.get(template.id, {}),
                tag_translations,
            )
            for template in templates
        ],
        "pagination": {"limit": limit, "offset": offset, "total": total},
    }


def find_program_template(
    template_id: str,
    status: str = "ACTIVE",
    lang: str = DEFAULT_LANGUAGE,
) -> dict[str, Any]:
    """Program template with sections and days of videos.

    Raises:
        NotFoundError: If the template does not exist with that status
    """
    template = get_program_template(template_id, status=status)
    if template is None:
        raise NotFoundError(f"Program template with id {template_id} not found or not {status}")

    days = list_program_days(template_id)
    video_ids = list(dict.fromkeys(item.video_id for day in days for item in day.items))
    videos_by_id = get_videos_by_ids(video_ids)
    video_dicts = {
        video["id"]: video
        for video in _videos_to_dicts([videos_by_id[v] for v in video_ids if v in videos_by_id], lang)
    }

    tags = get_program_template_tags([template_id]).get(template_id, [])
    translations = get_translations("program_template", [template_id], lang)
    tag_translations = get_translations("tag", [tag.id for tag in tags], lang)

    result = _template_to_dict(template, tags, translations.get(template_id, {}), tag_translations)
    result["sections"] = [
        {"type": section.type, "sortOrder": section.sort_order, "text": section.text}
        for section in list_program_sections(template_id)
    ]
    result["days"] = [
        {
            "dayNumber": day.day_number,
            "title": day.title,
            "intent": day.intent,
            "items": [
                {
                    "orderIndex": item.order_index,
                    "sequenceRole": item.sequence_role,
                    "video": video_dicts.get(item.video_id),
                }
                for item in day.items
            ],
        }
        for day in days
    ]

    logger.debug("catalog.program_template_loaded", template_id=template_id, days=len(days))
    return {"data": result}
