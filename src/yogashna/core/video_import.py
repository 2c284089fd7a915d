"""Video metadata import.

Responsibilities:
- Read metadata rows from the import template workbook (Video_Metadata
  sheet) or a CSV export of it
- Validate required fields per row
- Map difficulty, intensity, visibility and styles onto asset fields
- Upsert video assets by Stream uid (or report planned actions in dry-run)
- Roll back and verify imports by their import-date tag
"""

from __future__ import annotations

import csv
import sqlite3
import uuid
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Literal

import structlog
from openpyxl import load_workbook

from yogashna.db.catalog_repository import (
    VideoAssetRecord,
    delete_assets_with_import_tag,
    get_video_asset_by_stream_uid,
    insert_video_asset,
    list_assets_with_import_tag,
    update_video_asset,
)

logger = structlog.get_logger(__name__)

IMPORT_TAG = "excel_import"
NOTE_MAX_CHARS = 50
SHEET_NAME = "Video_Metadata"
WORKBOOK_SUFFIXES = (".xlsx", ".xlsm")

REQUIRED_TEXT_FIELDS = {
    "title": "Title is required",
    "description": "Description is required",
    "cloudflareStreamUid": "Cloudflare Stream UID is required",
    "r2ThumbnailKey": "R2 Thumbnail Key is required",
}
REQUIRED_CLASSIFICATION_FIELDS = {
    "difficulty": "Difficulty is required",
    "intensity": "Intensity is required",
    "styles": "Styles is required",
    "sequencingRole": "Sequencing Role is required",
}

DIFFICULTY_MAP = {
    "BEGINNER": "BEGINNER",
    "INTERMEDIATE": "INTERMEDIATE",
    "ALL_LEVELS": "ALL_LEVELS",
    "ALL LEVELS": "ALL_LEVELS",
}
INTENSITY_MAP = {"LOW": "LOW", "MEDIUM": "MEDIUM", "HIGH": "HIGH"}
STRENGTH_DEMAND_MAP = {"LOW": "VERY_LIGHT", "MEDIUM": "LIGHT", "HIGH": "MODERATE"}
VISIBILITY_MAP = {
    "DRAFT": "INACTIVE",
    "PUBLISHED": "ACTIVE",
    "ACTIVE": "ACTIVE",
    "INACTIVE": "INACTIVE",
}

# Checked in order; first keyword group found in the sequencing role wins
YOGA_SUB_CATEGORY_RULES: list[tuple[tuple[str, ...], str]] = [
    (("WARMUP", "WARM_UP"), "WARM_UP"),
    (("COOLDOWN", "COOL_DOWN"), "COOL_DOWN"),
    (("MAIN", "FLOW"), "MAIN_PRACTICE"),
    (("RESTORE", "RESTORATIVE"), "RESTORATIVE"),
    (("MOBILITY",), "MOBILITY"),
    (("STRENGTH", "STABILITY"), "STRENGTH_STABILITY"),
]

ImportAction = Literal["insert", "update", "skip"]


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class ValidationIssue:
    """A missing or invalid field in a row (rows are 1-based)."""

    row: int
    field: str
    message: str


@dataclass
class CategoryMapping:
    primary_category: str
    yoga_sub_category: str | None
    breathing_sub_category: str | None
    meditation_sub_category: str | None
    sequence_role: str


@dataclass
class RowResult:
    """Outcome of importing one row."""

    success: bool
    action: ImportAction
    stream_uid: str
    title: str
    error: str | None = None


@dataclass
class ImportSummary:
    """Outcome of an import run."""

    dry_run: bool
    import_date: str
    results: list[RowResult] = field(default_factory=list)
    validation_errors: list[ValidationIssue] = field(default_factory=list)

    @property
    def inserted(self) -> int:
        return sum(1 for r in self.results if r.success and r.action == "insert")

    @property
    def updated(self) -> int:
        return sum(1 for r in self.results if r.success and r.action == "update")

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success)


@dataclass
class VerifyReport:
    """Imported assets and their counts by category, status and role."""

    assets: list[VideoAssetRecord]
    by_category: dict[str, int]
    by_status: dict[str, int]
    by_role: dict[str, int]


# =============================================================================
# MAPPING
# =============================================================================


def map_difficulty(value: str) -> str:
    return DIFFICULTY_MAP.get(value.strip().upper(), "ALL_LEVELS")


def map_intensity(value: str) -> str:
    return INTENSITY_MAP.get(value.strip().upper(), "LOW")


def map_strength_demand(intensity: str) -> str:
    """Strength demand from a mapped intensity."""
    return STRENGTH_DEMAND_MAP.get(intensity, "VERY_LIGHT")


def map_visibility_to_status(value: str) -> str:
    return VISIBILITY_MAP.get(value.strip().upper(), "INACTIVE")


def determine_category(styles: str, sequencing_role: str) -> CategoryMapping:
    """Primary category, sub-category and sequence role of a row.

    Breathing styles take precedence over meditation styles; anything
    else is yoga, sub-categorized by the sequencing role.
    """
    styles_upper = styles.upper()
    role_upper = sequencing_role.upper()

    if "PRANAYAMA" in styles_upper or "BREATHING" in styles_upper:
        return CategoryMapping("BREATHING", None, "BALANCING", None, "ADJUSTABLE")

    if "MEDITATION" in styles_upper or "NIDRA" in styles_upper:
        sub_category = "YOGA_NIDRA_SHORT" if "NIDRA" in styles_upper else "GUIDED_RELAXATION"
        return CategoryMapping("MEDITATION", None, None, sub_category, "OPTIONAL")

    yoga_sub_category = "MAIN_PRACTICE"
    for keywords, sub_category in YOGA_SUB_CATEGORY_RULES:
        if any(keyword in role_upper for keyword in keywords):
            yoga_sub_category = sub_category
            break

    role = "MANDATORY" if yoga_sub_category == "WARM_UP" else "ADJUSTABLE"
    return CategoryMapping("YOGA", yoga_sub_category, None, None, role)


def parse_list(value: str | None) -> list[str]:
    """Comma-separated cell to a list of trimmed, non-empty values."""
    if not value or not value.strip():
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def format_import_date(day: date | None = None) -> str:
    """Import date tag suffix, YYYY_MM_DD."""
    current = day or datetime.now(timezone.utc).date()
    return current.strftime("%Y_%m_%d")


def import_date_tag(import_date: str) -> str:
    return f"import_date_{import_date}"


# =============================================================================
# READING AND VALIDATION
# =============================================================================


class MissingSheetError(Exception):
    """Raised when the workbook has no Video_Metadata sheet."""

    def __init__(self, path: Path, sheet_names: list[str]):
        self.path = path
        self.sheet_names = sheet_names
        super().__init__(f'Sheet "{SHEET_NAME}" not found in {path.name}')


def _cell_text(value: Any) -> str:
    """Cell value as text; empty cells become ""."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def read_csv_rows(csv_path: Path) -> list[dict[str, str]]:
    """Read metadata rows from a CSV file with a header row."""
    with open(csv_path, newline="", encoding="utf-8-sig") as f:
        reader = csv.DictReader(f)
        return [{k.strip(): (v or "").strip() for k, v in row.items() if k} for row in reader]


def read_workbook_rows(xlsx_path: Path) -> list[dict[str, str]]:
    """Read metadata rows from the Video_Metadata sheet of a workbook.

    The first row holds the column names. Fully empty rows are skipped.

    Raises:
        MissingSheetError: If the workbook has no Video_Metadata sheet
    """
    workbook = load_workbook(xlsx_path, read_only=True, data_only=True)
    try:
        if SHEET_NAME not in workbook.sheetnames:
            raise MissingSheetError(xlsx_path, list(workbook.sheetnames))

        rows = workbook[SHEET_NAME].iter_rows(values_only=True)
        header = next(rows, None)
        if header is None:
            return []
        columns = [_cell_text(name) for name in header]

        result = []
        for values in rows:
            cells = [_cell_text(v) for v in values]
            if not any(cells):
                continue
            cells += [""] * (len(columns) - len(cells))
            result.append({name: cell for name, cell in zip(columns, cells) if name})
        return result
    finally:
        workbook.close()


def read_rows(path: Path) -> list[dict[str, str]]:
    """Read metadata rows from a .xlsx workbook or a CSV file."""
    if path.suffix.lower() in WORKBOOK_SUFFIXES:
        return read_workbook_rows(path)
    return read_csv_rows(path)


def _duration(row: dict[str, str]) -> int:
    try:
        return int(float(row.get("durationSec") or 0))
    except ValueError:
        return 0


def validate_row(row: dict[str, str], row_number: int) -> list[ValidationIssue]:
    issues = [
        ValidationIssue(row_number, name, message)
        for name, message in REQUIRED_TEXT_FIELDS.items()
        if not row.get(name, "").strip()
    ]
    if _duration(row) <= 0:
        issues.append(
            ValidationIssue(row_number, "durationSec", "Duration must be greater than 0")
        )
    issues.extend(
        ValidationIssue(row_number, name, message)
        for name, message in REQUIRED_CLASSIFICATION_FIELDS.items()
        if not row.get(name, "").strip()
    )
    return issues


def build_asset_fields(row: dict[str, str], import_date: str) -> dict[str, Any]:
    """Video asset column values for a validated row."""
    category = determine_category(row["styles"], row["sequencingRole"])
    intensity = map_intensity(row["intensity"])

    tags = [IMPORT_TAG, import_date_tag(import_date)]
    notes = row.get("notes", "")
    if notes:
        tags.append(f"note:{notes[:NOTE_MAX_CHARS]}")

    return {
        "name": row["title"].strip(),
        "short_description": row["description"].strip(),
        "thumbnail_key": row["r2ThumbnailKey"].strip(),
        "stream_uid": row["cloudflareStreamUid"].strip(),
        "primary_category": category.primary_category,
        "yoga_sub_category": category.yoga_sub_category,
        "breathing_sub_category": category.breathing_sub_category,
        "meditation_sub_category": category.meditation_sub_category,
        "level": map_difficulty(row["difficulty"]),
        "intensity": intensity,
        "strength_demand": map_strength_demand(intensity),
        "focus_areas": parse_list(row.get("focusAreas")),
        "goals": parse_list(row.get("goals")),
        "sequence_role": category.sequence_role,
        "duration_sec": _duration(row),
        "contra_indications": parse_list(row.get("contraindications")),
        "status": map_visibility_to_status(row.get("visibilityStatus", "")),
        "version": "1.0",
        "import_tags": tags,
    }


# =============================================================================
# IMPORT, ROLLBACK, VERIFY
# =============================================================================


def import_rows(
    rows: list[dict[str, str]],
    dry_run: bool = True,
    import_date: str | None = None,
) -> ImportSummary:
    """Validate and import metadata rows.

    Nothing is written when any row fails validation or in dry-run mode.

    Args:
        rows: Rows keyed by template column name
        dry_run: Only report the planned insert/update actions
        import_date: Tag suffix (defaults to today, YYYY_MM_DD)

    Returns:
        ImportSummary with per-row results or validation errors
    """
    summary = ImportSummary(dry_run=dry_run, import_date=import_date or format_import_date())

    for index, row in enumerate(rows, start=1):
        summary.validation_errors.extend(validate_row(row, index))
    if summary.validation_errors:
        logger.warning("video_import.validation_failed", errors=len(summary.validation_errors))
        return summary

    for row in rows:
        fields = build_asset_fields(row, summary.import_date)
        stream_uid = fields["stream_uid"]
        existing = get_video_asset_by_stream_uid(stream_uid)
        action: ImportAction = "update" if existing else "insert"

        if not dry_run:
            try:
                if existing is not None:
                    update_video_asset(existing.id, **fields)
                else:
                    insert_video_asset(
                        str(uuid.uuid4()),
                        datetime.now(timezone.utc).isoformat(),
                        **fields,
                    )
            except sqlite3.Error as exc:
                logger.error("video_import.row_failed", stream_uid=stream_uid, error=str(exc))
                summary.results.append(
                    RowResult(
                        success=False,
                        action="skip",
                        stream_uid=stream_uid,
                        title=row["title"],
                        error=str(exc),
                    )
                )
                continue

        summary.results.append(
            RowResult(success=True, action=action, stream_uid=stream_uid, title=row["title"])
        )

    logger.info(
        "video_import.completed",
        dry_run=dry_run,
        import_date=summary.import_date,
        inserted=summary.inserted,
        updated=summary.updated,
    )
    return summary


def _tag_for(import_date: str | None) -> str:
    return import_date_tag(import_date) if import_date else IMPORT_TAG


def find_imported_assets(import_date: str | None = None) -> list[VideoAssetRecord]:
    """Assets of one import date, or of every import when no date is given."""
    return list_assets_with_import_tag(_tag_for(import_date))


def rollback_import(import_date: str | None = None) -> int:
    """Delete the assets of one import date (or of every import).

    Returns:
        Number of assets deleted
    """
    deleted = delete_assets_with_import_tag(_tag_for(import_date))
    logger.info("video_import.rolled_back", import_date=import_date, deleted=deleted)
    return deleted


def verify_import(import_date: str | None = None) -> VerifyReport:
    assets = find_imported_assets(import_date)
    return VerifyReport(
        assets=assets,
        by_category=dict(Counter(a.primary_category for a in assets)),
        by_status=dict(Counter(a.status for a in assets)),
        by_role=dict(Counter(a.sequence_role for a in assets)),
    )
