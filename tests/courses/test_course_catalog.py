"""
Tests for course CRUD and instructor assignments.
"""

from unittest.mock import MagicMock

import pytest
from httpx import AsyncClient

from app.core.constants import COURSE_COLORS
from app.core.exceptions import DuplicateCourseCodeError, StorageError, ValidationError
from app.courses.models import Course, Enrollment, Video
from app.courses.schemas.course import CourseCreate, CourseUpdate
from app.courses.services.course_service import CourseService
from tests.utils.factories import (
    assign_teacher_factory,
    create_course_factory,
    create_enrollment_factory,
    create_video_factory,
)
from tests.utils.helpers import assert_error_code, create_auth_headers


class TestCourseService:
    def test_create_normalizes_code_and_picks_color(self, db_session, test_admin):
        course = CourseService.create_course(
            db_session,
            CourseCreate(name="Physics I", code=" fis101 ", cycle=2, credits=4),
            created_by=test_admin.id,
        )

        assert course.code == "FIS101"
        assert course.color in COURSE_COLORS
        assert course.active is True
        assert course.created_by == test_admin.id

    def test_duplicate_code_on_create(self, db_session, test_admin, test_course):
        with pytest.raises(DuplicateCourseCodeError):
            CourseService.create_course(
                db_session,
                CourseCreate(name="Another", code="mat101", cycle=1),
                created_by=test_admin.id,
            )

    def test_duplicate_code_on_update_is_translated(self, db_session, test_course):
        other = create_course_factory(db_session, code="FIS101")

        with pytest.raises(DuplicateCourseCodeError):
            CourseService.update_course(db_session, other.id, CourseUpdate(code="MAT101"))

        db_session.refresh(other)
        assert other.code == "FIS101"

    def test_toggle_active(self, db_session, test_course):
        assert CourseService.toggle_active(db_session, test_course.id).active is False
        assert CourseService.toggle_active(db_session, test_course.id).active is True

    def test_delete_cascades_and_removes_binaries(
        self, db_session, test_course, test_student, test_enrollment
    ):
        video = create_video_factory(db_session, test_course)
        pointer = video.video_url
        storage = MagicMock()
        storage.delete.side_effect = StorageError("bucket unavailable")

        CourseService.delete_course(db_session, test_course.id, storage)

        storage.delete.assert_called_once_with(pointer)
        assert db_session.query(Course).count() == 0
        assert db_session.query(Video).count() == 0
        assert db_session.query(Enrollment).count() == 0

    def test_only_instructors_can_be_assigned(self, db_session, test_course, test_student):
        with pytest.raises(ValidationError):
            CourseService.assign_teacher(db_session, test_course.id, test_student.id)

    def test_reassigning_reactivates(self, db_session, test_course, test_instructor):
        CourseService.assign_teacher(db_session, test_course.id, test_instructor.id)
        CourseService.unassign_teacher(db_session, test_course.id, test_instructor.id)

        assignment = CourseService.assign_teacher(db_session, test_course.id, test_instructor.id)

        assert assignment.active is True


@pytest.mark.asyncio
async def test_create_course_endpoint(test_client: AsyncClient, test_admin_token):
    response = await test_client.post(
        "/api/courses",
        json={"name": "Chemistry", "code": "QUI101", "cycle": 1, "credits": 3, "color": "#10B981"},
        headers=create_auth_headers(test_admin_token),
    )

    assert response.status_code == 201
    data = response.json()
    assert data["code"] == "QUI101"
    assert data["color"] == "#10B981"


@pytest.mark.asyncio
async def test_create_course_duplicate_code(
    test_client: AsyncClient, test_admin_token, test_course
):
    response = await test_client.post(
        "/api/courses",
        json={"name": "Mathematics bis", "code": "MAT101", "cycle": 1},
        headers=create_auth_headers(test_admin_token),
    )

    assert_error_code(response, 409, "DUPLICATE_COURSE_CODE")


@pytest.mark.asyncio
async def test_create_course_rejects_invalid_cycle(test_client: AsyncClient, test_admin_token):
    response = await test_client.post(
        "/api/courses",
        json={"name": "Bad", "code": "BAD1", "cycle": 3},
        headers=create_auth_headers(test_admin_token),
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_instructor_lists_only_assigned_courses(
    test_client: AsyncClient, db_session, test_instructor, test_instructor_token, test_course
):
    assigned = create_course_factory(db_session, code="ASG101")
    assign_teacher_factory(db_session, test_instructor, assigned)

    response = await test_client.get(
        "/api/courses", headers=create_auth_headers(test_instructor_token)
    )

    assert response.status_code == 200
    assert [c["code"] for c in response.json()] == ["ASG101"]


@pytest.mark.asyncio
async def test_student_course_access(
    test_client: AsyncClient, db_session, test_student, test_student_token, test_course
):
    headers = create_auth_headers(test_student_token)

    denied = await test_client.get(f"/api/courses/{test_course.id}", headers=headers)
    create_enrollment_factory(db_session, test_student, test_course)
    allowed = await test_client.get(f"/api/courses/{test_course.id}", headers=headers)

    assert denied.status_code == 403
    assert allowed.status_code == 200
    assert allowed.json()["code"] == "MAT101"


@pytest.mark.asyncio
async def test_students_cannot_list_catalog(test_client: AsyncClient, test_student_token):
    response = await test_client.get("/api/courses", headers=create_auth_headers(test_student_token))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_assign_teacher_endpoint(
    test_client: AsyncClient, test_admin_token, test_instructor, test_course
):
    headers = create_auth_headers(test_admin_token)

    created = await test_client.post(
        f"/api/courses/{test_course.id}/teachers",
        json={"teacher_id": str(test_instructor.id)},
        headers=headers,
    )
    listed = await test_client.get(f"/api/courses/{test_course.id}/teachers", headers=headers)
    removed = await test_client.delete(
        f"/api/courses/{test_course.id}/teachers/{test_instructor.id}", headers=headers
    )

    assert created.status_code == 201
    assert [a["teacher_id"] for a in listed.json()] == [str(test_instructor.id)]
    assert removed.status_code == 204
