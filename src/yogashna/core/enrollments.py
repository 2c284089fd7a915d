"""Capabilities and program enrollments of a user."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog

from yogashna.core.errors import ConflictError, NotFoundError
from yogashna.core.subscription_policy import count_active_enrollments, get_policy
from yogashna.db.catalog_repository import get_program_template
from yogashna.db.users_repository import (
    EnrollmentRecord,
    get_or_create_user,
    get_user_by_firebase_uid,
    list_enrollments,
    upsert_enrollment,
)

logger = structlog.get_logger(__name__)

SLOT_LIMIT_CODE = "ABHYASA_SLOT_LIMIT_REACHED"
PROGRAM_LIMIT_REASON = "PROGRAM_LIMIT_REACHED"


@dataclass
class Capabilities:
    """What the user's plan allows right now."""

    tier: str
    is_paid_active: bool
    entitlement: str | None
    program_enrollment_limit: int
    enrolled_programs_count: int
    can_enroll_new_program: bool
    reasons: list[str] = field(default_factory=list)
    subscription_source: str = "NONE"
    free_unlock_days: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "tier": self.tier,
            "isPaidActive": self.is_paid_active,
            "entitlement": self.entitlement,
            "programEnrollmentLimit": self.program_enrollment_limit,
            "enrolledProgramsCount": self.enrolled_programs_count,
            "canEnrollNewProgram": self.can_enroll_new_program,
            "reasons": list(self.reasons),
            "subscription": {
                "isActive": self.is_paid_active,
                "plan": self.tier,
                "source": self.subscription_source,
            },
            "abhyasa": {
                "maxActivePrograms": self.program_enrollment_limit,
                "freeUnlockDays": self.free_unlock_days,
            },
            "usage": {
                "activeAbhyasaCount": self.enrolled_programs_count,
                "remainingAbhyasaSlots": max(
                    0, self.program_enrollment_limit - self.enrolled_programs_count
                ),
            },
        }


def get_capabilities(firebase_uid: str) -> Capabilities:
    """Capabilities of a user, creating the user on first access."""
    user = get_or_create_user(firebase_uid)
    policy = get_policy(user.id)
    active_count = count_active_enrollments(user.id)
    can_enroll = active_count < policy.max_active_programs

    return Capabilities(
        tier=policy.tier,
        is_paid_active=policy.is_paid_active,
        entitlement=policy.entitlement,
        program_enrollment_limit=policy.max_active_programs,
        enrolled_programs_count=active_count,
        can_enroll_new_program=can_enroll,
        reasons=[] if can_enroll else [PROGRAM_LIMIT_REASON],
        subscription_source=policy.subscription_source,
        free_unlock_days=policy.free_unlock_days,
    )


def enrollment_to_dict(enrollment: EnrollmentRecord) -> dict[str, Any]:
    return {
        "id": enrollment.id,
        "programTemplateId": enrollment.program_template_id,
        "status": enrollment.status,
        "createdAt": enrollment.created_at,
        "updatedAt": enrollment.updated_at,
    }


def get_enrollments(firebase_uid: str) -> list[EnrollmentRecord]:
    """Enrollments of a user, newest first; empty for unknown users."""
    user = get_user_by_firebase_uid(firebase_uid)
    if user is None:
        return []
    return list_enrollments(user.id)


def create_enrollment(firebase_uid: str, program_template_id: str) -> EnrollmentRecord:
    """Enroll a user in a program, respecting the active program limit.

    Args:
        firebase_uid: Identity of the caller
        program_template_id: Program template to enroll in

    Returns:
        The ACTIVE EnrollmentRecord

    Raises:
        NotFoundError: If the user or the template does not exist
        ConflictError: If the active enrollment limit is reached
    """
    user = get_user_by_firebase_uid(firebase_uid)
    if user is None:
        raise NotFoundError("User not found")

    if get_program_template(program_template_id) is None:
        raise NotFoundError("Program template not found")

    policy = get_policy(user.id)
    active_count = count_active_enrollments(user.id)
    if active_count >= policy.max_active_programs:
        logger.info(
            "enrollments.limit_reached",
            user_id=user.id,
            active_count=active_count,
            limit=policy.max_active_programs,
        )
        raise ConflictError(
            "Upgrade to unlock more Abhyasa slots",
            code=SLOT_LIMIT_CODE,
            maxActivePrograms=policy.max_active_programs,
            activeCount=active_count,
        )

    return upsert_enrollment(user.id, program_template_id, status="ACTIVE")
