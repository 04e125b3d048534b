"""
Tests for enrollment creation, toggling, deletion and the access predicate.
"""

import uuid
from datetime import timedelta
from unittest.mock import patch

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import IntegrityError

from app.core.datetime_utils import ensure_utc, utcnow
from app.core.exceptions import DuplicateActiveEnrollmentError, NotFoundError, ValidationError
from app.courses.models import Enrollment, Progress
from app.courses.repositories import EnrollmentRepository
from app.courses.services.enrollment_service import EnrollmentService
from tests.utils.factories import (
    create_course_factory,
    create_enrollment_factory,
    create_progress_factory,
)
from tests.utils.helpers import assert_error_code, create_auth_headers


class TestCreateEnrollment:
    def test_sets_window_and_defaults(self, db_session, test_student, test_course, test_admin):
        now = utcnow()

        enrollment = EnrollmentService.create_enrollment(
            db_session,
            student_id=test_student.id,
            course_id=test_course.id,
            duration_weeks=14,
            notes="Paid in cash",
            created_by=test_admin.id,
            now=now,
        )

        assert enrollment.active is True
        assert enrollment.payment_verified is False
        assert enrollment.notes == "Paid in cash"
        assert ensure_utc(enrollment.expires_at) == now + timedelta(days=98)

    def test_default_duration_is_fourteen_weeks(self, db_session, test_student, test_course):
        now = utcnow()
        enrollment = EnrollmentService.create_enrollment(
            db_session, test_student.id, test_course.id, now=now
        )
        assert ensure_utc(enrollment.expires_at) == now + timedelta(weeks=14)

    def test_duplicate_active_enrollment_is_rejected(
        self, db_session, test_student, test_course, test_enrollment
    ):
        with pytest.raises(DuplicateActiveEnrollmentError):
            EnrollmentService.create_enrollment(
                db_session, test_student.id, test_course.id, duration_weeks=14
            )

        assert db_session.query(Enrollment).count() == 1

    def test_inactive_enrollment_does_not_block_new_one(
        self, db_session, test_student, test_course
    ):
        create_enrollment_factory(db_session, test_student, test_course, active=False)

        EnrollmentService.create_enrollment(db_session, test_student.id, test_course.id)

        assert db_session.query(Enrollment).count() == 2

    def test_concurrent_insert_is_translated(self, db_session, test_student, test_course):
        # Simulate losing the race: the existence check passes, the index rejects the insert
        create_enrollment_factory(db_session, test_student, test_course)

        with patch.object(EnrollmentRepository, "find_active", return_value=None):
            with pytest.raises(DuplicateActiveEnrollmentError):
                EnrollmentService.create_enrollment(db_session, test_student.id, test_course.id)

        assert db_session.query(Enrollment).count() == 1

    def test_partial_index_enforced_by_database(self, db_session, test_student, test_course):
        create_enrollment_factory(db_session, test_student, test_course)

        with pytest.raises(IntegrityError):
            create_enrollment_factory(db_session, test_student, test_course)
        db_session.rollback()

    def test_only_students_can_be_enrolled(self, db_session, test_instructor, test_course):
        with pytest.raises(ValidationError):
            EnrollmentService.create_enrollment(db_session, test_instructor.id, test_course.id)

    def test_unknown_course(self, db_session, test_student):
        with pytest.raises(NotFoundError):
            EnrollmentService.create_enrollment(db_session, test_student.id, uuid.uuid4())


class TestEnrollmentLifecycle:
    def test_toggle_keeps_expiry(self, db_session, test_enrollment):
        expires_at = test_enrollment.expires_at

        toggled = EnrollmentService.toggle_active(db_session, test_enrollment.id)
        assert toggled.active is False
        assert toggled.expires_at == expires_at

        toggled = EnrollmentService.toggle_active(db_session, test_enrollment.id)
        assert toggled.active is True
        assert toggled.expires_at == expires_at

    def test_reactivated_expired_enrollment_stays_expired(
        self, db_session, test_student, test_course
    ):
        enrollment = create_enrollment_factory(
            db_session,
            test_student,
            test_course,
            expires_at=utcnow() - timedelta(days=1),
            active=False,
        )

        EnrollmentService.toggle_active(db_session, enrollment.id)

        assert enrollment.active is True
        assert enrollment.is_expired is True
        assert not EnrollmentService.has_access(db_session, test_student.id, test_course.id)

    def test_reactivation_blocked_by_other_active_enrollment(
        self, db_session, test_student, test_course
    ):
        old = create_enrollment_factory(db_session, test_student, test_course, active=False)
        create_enrollment_factory(db_session, test_student, test_course)

        with pytest.raises(DuplicateActiveEnrollmentError):
            EnrollmentService.toggle_active(db_session, old.id)

    def test_delete_flips_access_and_keeps_progress(
        self, db_session, test_student, test_course, test_video, test_enrollment
    ):
        create_progress_factory(db_session, test_student, test_video, last_position=120)
        assert EnrollmentService.has_access(db_session, test_student.id, test_course.id)

        EnrollmentService.delete_enrollment(db_session, test_enrollment.id)

        assert not EnrollmentService.has_access(db_session, test_student.id, test_course.id)
        assert db_session.query(Progress).count() == 1
        assert test_course.active is True

    def test_extend_from_current_expiry(self, db_session, test_enrollment):
        expires_at = ensure_utc(test_enrollment.expires_at)

        extended = EnrollmentService.extend(db_session, test_enrollment.id, weeks=2)

        assert ensure_utc(extended.expires_at) == expires_at + timedelta(weeks=2)

    def test_extend_expired_enrollment_counts_from_now(
        self, db_session, test_student, test_course
    ):
        enrollment = create_enrollment_factory(
            db_session, test_student, test_course, expires_at=utcnow() - timedelta(days=30)
        )
        now = utcnow()

        extended = EnrollmentService.extend(db_session, enrollment.id, weeks=1, now=now)

        assert ensure_utc(extended.expires_at) == now + timedelta(weeks=1)


class TestAccessPredicate:
    def test_requires_active_unexpired_enrollment_in_active_course(
        self, db_session, test_student
    ):
        active_course = create_course_factory(db_session)
        expired_course = create_course_factory(db_session)
        inactive_course = create_course_factory(db_session, active=False)
        create_enrollment_factory(db_session, test_student, active_course)
        create_enrollment_factory(
            db_session, test_student, expired_course, expires_at=utcnow() - timedelta(seconds=5)
        )
        create_enrollment_factory(db_session, test_student, inactive_course)

        assert EnrollmentService.has_access(db_session, test_student.id, active_course.id)
        assert not EnrollmentService.has_access(db_session, test_student.id, expired_course.id)
        assert not EnrollmentService.has_access(db_session, test_student.id, inactive_course.id)


@pytest.mark.asyncio
async def test_create_enrollment_endpoint(
    test_client: AsyncClient, test_admin_token, test_student, test_course
):
    response = await test_client.post(
        "/api/enrollments",
        json={"studentId": str(test_student.id), "courseId": str(test_course.id), "durationWeeks": 14},
        headers=create_auth_headers(test_admin_token),
    )

    assert response.status_code == 201
    data = response.json()
    assert data["active"] is True
    assert data["payment_verified"] is False
    assert data["days_remaining"] == 98
    assert data["student_email"] == test_student.email


@pytest.mark.asyncio
async def test_create_duplicate_enrollment_endpoint(
    test_client: AsyncClient, test_admin_token, test_student, test_course, test_enrollment
):
    response = await test_client.post(
        "/api/enrollments",
        json={"studentId": str(test_student.id), "courseId": str(test_course.id)},
        headers=create_auth_headers(test_admin_token),
    )

    assert_error_code(response, 409, "DUPLICATE_ACTIVE_ENROLLMENT")


@pytest.mark.asyncio
async def test_enrollment_management_requires_admin(
    test_client: AsyncClient, test_instructor_token, test_enrollment
):
    response = await test_client.post(
        f"/api/enrollments/{test_enrollment.id}/toggle",
        headers=create_auth_headers(test_instructor_token),
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_set_payment_verified_endpoint(
    test_client: AsyncClient, test_admin_token, test_enrollment
):
    response = await test_client.patch(
        f"/api/enrollments/{test_enrollment.id}/payment",
        json={"paymentVerified": True},
        headers=create_auth_headers(test_admin_token),
    )

    assert response.status_code == 200
    assert response.json()["payment_verified"] is True


@pytest.mark.asyncio
async def test_list_expired_enrollments(
    test_client: AsyncClient, db_session, test_admin_token, test_student, test_enrollment
):
    other_course = create_course_factory(db_session)
    expired = create_enrollment_factory(
        db_session, test_student, other_course, expires_at=utcnow() - timedelta(days=1)
    )

    response = await test_client.get(
        "/api/enrollments", params={"expired": True}, headers=create_auth_headers(test_admin_token)
    )

    assert response.status_code == 200
    data = response.json()
    assert data["meta"]["total"] == 1
    assert data["data"][0]["id"] == str(expired.id)
    assert data["data"][0]["is_expired"] is True
    assert data["data"][0]["days_remaining"] == 0


@pytest.mark.asyncio
async def test_my_enrollments_and_access(
    test_client: AsyncClient, test_student_token, test_course, test_enrollment
):
    headers = create_auth_headers(test_student_token)

    mine = await test_client.get("/api/enrollments/me", headers=headers)
    access = await test_client.get(f"/api/enrollments/access/{test_course.id}", headers=headers)

    assert mine.status_code == 200
    assert [e["course_code"] for e in mine.json()] == ["MAT101"]
    assert access.json() == {"course_id": str(test_course.id), "has_access": True}


@pytest.mark.asyncio
async def test_delete_enrollment_endpoint(
    test_client: AsyncClient, db_session, test_admin_token, test_enrollment
):
    response = await test_client.delete(
        f"/api/enrollments/{test_enrollment.id}", headers=create_auth_headers(test_admin_token)
    )

    assert response.status_code == 204
    assert db_session.query(Enrollment).count() == 0
