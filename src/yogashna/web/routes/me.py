"""Capabilities and program enrollment endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, status

from yogashna.core.enrollments import (
    create_enrollment,
    enrollment_to_dict,
    get_capabilities,
    get_enrollments,
)
from yogashna.web.auth import AuthenticatedUser, get_current_user
from yogashna.web.schemas import (
    EnrollmentCreateRequest,
    EnrollmentListResponse,
    EnrollmentResponse,
)

router = APIRouter(prefix="/me", tags=["me"])


@router.get("/capabilities")
async def read_capabilities(
    user: AuthenticatedUser = Depends(get_current_user),
) -> dict[str, Any]:
    """What the caller's plan allows right now."""
    return get_capabilities(user.uid).to_dict()


@router.post(
    "/program-enrollments",
    response_model=EnrollmentResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
)
async def enroll_in_program(
    request: EnrollmentCreateRequest,
    user: AuthenticatedUser = Depends(get_current_user),
) -> EnrollmentResponse:
    """Enroll the caller in a program template."""
    enrollment = create_enrollment(user.uid, request.program_template_id)
    return EnrollmentResponse.model_validate(enrollment_to_dict(enrollment))


@router.get(
    "/program-enrollments",
    response_model=EnrollmentListResponse,
    response_model_by_alias=True,
)
async def list_program_enrollments(
    user: AuthenticatedUser = Depends(get_current_user),
) -> EnrollmentListResponse:
    """The caller's enrollments, newest first."""
    enrollments = [
        EnrollmentResponse.model_validate(enrollment_to_dict(enrollment))
        for enrollment in get_enrollments(user.uid)
    ]
    return EnrollmentListResponse(data=enrollments, total=len(enrollments))
