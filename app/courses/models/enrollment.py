import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.datetime_utils import days_remaining, is_expired, utcnow
from app.db.session import Base

ACTIVE_ENROLLMENT_INDEX = "uq_enrollments_active_user_course"


class Enrollment(Base):
    __tablename__ = "enrollments"
    __table_args__ = (
        # At most one active enrollment per (student, course)
        Index(
            ACTIVE_ENROLLMENT_INDEX,
            "user_id",
            "course_id",
            unique=True,
            postgresql_where=text("active"),
            sqlite_where=text("active = 1"),
        ),
        Index("ix_enrollments_user_course", "user_id", "course_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4, index=True)
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("user_profiles.id", ondelete="CASCADE"), index=True
    )
    course_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("courses.id", ondelete="CASCADE"), index=True
    )
    enrolled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    payment_verified: Mapped[bool] = mapped_column(default=False)
    active: Mapped[bool] = mapped_column(default=True)
    created_by: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("user_profiles.id", ondelete="SET NULL"), default=None
    )
    notes: Mapped[str | None] = mapped_column(default=None)

    student = relationship("UserProfile", foreign_keys=[user_id])
    course = relationship("Course", back_populates="enrollments")

    @property
    def is_expired(self) -> bool:
        return is_expired(self.expires_at)

    @property
    def days_remaining(self) -> int:
        return days_remaining(self.expires_at)

    def __repr__(self) -> str:
        return f"<Enrollment(id={self.id}, user_id={self.user_id}, course_id={self.course_id})>"
