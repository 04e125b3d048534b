from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.auth.dependencies import CurrentUser, get_current_user, require_admin, require_student
from app.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from app.core.schemas import PaginatedResponse, paginated_response
from app.courses.models import Enrollment
from app.courses.repositories import EnrollmentRepository
from app.courses.schemas.enrollment import (
    AccessResponse,
    EnrollmentCreateRequest,
    EnrollmentExtendRequest,
    EnrollmentResponse,
    PaymentVerifiedRequest,
)
from app.courses.services.enrollment_service import EnrollmentService
from app.db.session import get_db

router = APIRouter()


def enrollment_to_response(enrollment: Enrollment) -> EnrollmentResponse:
    student = enrollment.student
    course = enrollment.course
    return EnrollmentResponse(
        id=enrollment.id,
        user_id=enrollment.user_id,
        course_id=enrollment.course_id,
        enrolled_at=enrollment.enrolled_at,
        expires_at=enrollment.expires_at,
        payment_verified=enrollment.payment_verified,
        active=enrollment.active,
        notes=enrollment.notes,
        created_by=enrollment.created_by,
        is_expired=enrollment.is_expired,
        days_remaining=enrollment.days_remaining,
        student_name=student.full_name if student else None,
        student_email=student.email if student else None,
        course_name=course.name if course else None,
        course_code=course.code if course else None,
    )


@router.get("", response_model=PaginatedResponse[EnrollmentResponse])
async def list_enrollments(
    student_id: UUID | None = Query(None),
    course_id: UUID | None = Query(None),
    active: bool | None = Query(None),
    expired: bool | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
) -> PaginatedResponse[EnrollmentResponse]:
    rows, total = EnrollmentRepository(db).search(
        user_id=student_id,
        course_id=course_id,
        active=active,
        expired=expired,
        skip=(page - 1) * limit,
        limit=limit,
    )
    return paginated_response(
        [enrollment_to_response(row) for row in rows], total=total, page=page, limit=limit
    )


@router.post("", response_model=EnrollmentResponse, status_code=status.HTTP_201_CREATED)
async def create_enrollment(
    request: EnrollmentCreateRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
) -> EnrollmentResponse:
    enrollment = EnrollmentService.create_enrollment(
        db,
        student_id=request.student_id,
        course_id=request.course_id,
        duration_weeks=request.duration_weeks,
        notes=request.notes,
        created_by=current_user.id,
    )
    return enrollment_to_response(enrollment)


@router.get("/me", response_model=list[EnrollmentResponse])
async def my_enrollments(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_student),
) -> list[EnrollmentResponse]:
    """The caller's active enrollments, newest first."""
    return [
        enrollment_to_response(e)
        for e in EnrollmentService.list_for_student(db, current_user.id)
    ]


@router.get("/access/{course_id}", response_model=AccessResponse)
async def check_access(
    course_id: UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> AccessResponse:
    return AccessResponse(
        course_id=course_id,
        has_access=EnrollmentService.has_access(db, current_user.id, course_id),
    )


@router.post("/{enrollment_id}/toggle", response_model=EnrollmentResponse)
async def toggle_enrollment(
    enrollment_id: UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
) -> EnrollmentResponse:
    return enrollment_to_response(EnrollmentService.toggle_active(db, enrollment_id))


@router.patch("/{enrollment_id}/payment", response_model=EnrollmentResponse)
async def set_payment_verified(
    enrollment_id: UUID,
    request: PaymentVerifiedRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
) -> EnrollmentResponse:
    enrollment = EnrollmentService.set_payment_verified(
        db, enrollment_id, request.payment_verified
    )
    return enrollment_to_response(enrollment)


@router.post("/{enrollment_id}/extend", response_model=EnrollmentResponse)
async def extend_enrollment(
    enrollment_id: UUID,
    request: EnrollmentExtendRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
) -> EnrollmentResponse:
    return enrollment_to_response(EnrollmentService.extend(db, enrollment_id, request.weeks))


@router.delete("/{enrollment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_enrollment(
    enrollment_id: UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
) -> None:
    EnrollmentService.delete_enrollment(db, enrollment_id)
