from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.auth.dependencies import CurrentUser, require_admin, require_staff
from app.core.storage import StorageBackend, get_storage
from app.courses.dependencies import RequireCourseAccess
from app.courses.repositories import TeacherAssignmentRepository
from app.courses.schemas.course import (
    CourseCreate,
    CourseResponse,
    CourseUpdate,
    TeacherAssignmentRequest,
    TeacherAssignmentResponse,
)
from app.courses.services.course_service import CourseService
from app.db.session import get_db

router = APIRouter()


@router.get("", response_model=list[CourseResponse])
async def list_courses(
    active: bool | None = Query(None, description="Filter by active status"),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff),
) -> list[CourseResponse]:
    """All courses for admins; assigned courses for instructors."""
    courses = CourseService.list_courses(db, current_user, active=active)
    return [CourseResponse.model_validate(c) for c in courses]


@router.post("", response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
async def create_course(
    data: CourseCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
) -> CourseResponse:
    course = CourseService.create_course(db, data, created_by=current_user.id)
    return CourseResponse.model_validate(course)


@router.get("/{course_id}", response_model=CourseResponse)
async def get_course(
    course_id: UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(RequireCourseAccess()),
) -> CourseResponse:
    return CourseResponse.model_validate(CourseService.get_course(db, course_id))


@router.patch("/{course_id}", response_model=CourseResponse)
async def update_course(
    course_id: UUID,
    data: CourseUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
) -> CourseResponse:
    return CourseResponse.model_validate(CourseService.update_course(db, course_id, data))


@router.post("/{course_id}/toggle", response_model=CourseResponse)
async def toggle_course(
    course_id: UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
) -> CourseResponse:
    return CourseResponse.model_validate(CourseService.toggle_active(db, course_id))


@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_course(
    course_id: UUID,
    db: Session = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
    current_user: CurrentUser = Depends(require_admin),
) -> None:
    """Delete a course together with its videos and enrollments."""
    CourseService.delete_course(db, course_id, storage)


@router.get("/{course_id}/teachers", response_model=list[TeacherAssignmentResponse])
async def list_teachers(
    course_id: UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
) -> list[TeacherAssignmentResponse]:
    CourseService.get_course(db, course_id)
    rows = TeacherAssignmentRepository(db).find_all(course_id=course_id, active=True)
    return [TeacherAssignmentResponse.model_validate(row) for row in rows]


@router.post(
    "/{course_id}/teachers",
    response_model=TeacherAssignmentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def assign_teacher(
    course_id: UUID,
    request: TeacherAssignmentRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
) -> TeacherAssignmentResponse:
    assignment = CourseService.assign_teacher(db, course_id, request.teacher_id)
    return TeacherAssignmentResponse.model_validate(assignment)


@router.delete("/{course_id}/teachers/{teacher_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unassign_teacher(
    course_id: UUID,
    teacher_id: UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
) -> None:
    CourseService.unassign_teacher(db, course_id, teacher_id)
