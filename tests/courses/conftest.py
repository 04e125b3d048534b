"""
Test fixtures for courses tests.
"""

import pytest
from sqlalchemy.orm import Session

from tests.utils.factories import (
    assign_teacher_factory,
    create_course_factory,
    create_enrollment_factory,
    create_video_factory,
)


@pytest.fixture
def test_course(db_session: Session):
    """Create an active test course."""
    return create_course_factory(db_session, code="MAT101", name="Mathematics I")


@pytest.fixture
def test_video(db_session: Session, test_course):
    """Create a 600-second video in week 1."""
    return create_video_factory(db_session, test_course, title="Limits", duration=600)


@pytest.fixture
def test_enrollment(db_session: Session, test_student, test_course):
    """Active 14-week enrollment of the test student."""
    return create_enrollment_factory(db_session, test_student, test_course)


@pytest.fixture
def test_assignment(db_session: Session, test_instructor, test_course):
    """Assign the test instructor to the test course."""
    return assign_teacher_factory(db_session, test_instructor, test_course)
