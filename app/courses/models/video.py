import uuid
from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.datetime_utils import utcnow
from app.db.session import Base


class Video(Base):
    __tablename__ = "videos"
    __table_args__ = (Index("ix_videos_course_week_order", "course_id", "week", "order_in_week"),)

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4, index=True)
    course_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("courses.id", ondelete="CASCADE"), index=True
    )
    title: Mapped[str] = mapped_column(String(500))
    description: Mapped[str | None] = mapped_column(default=None)
    # Object key inside the videos bucket, not a URL
    video_url: Mapped[str] = mapped_column(String(1024))
    week: Mapped[int] = mapped_column(default=1)
    order_in_week: Mapped[int] = mapped_column(default=0)
    duration: Mapped[int] = mapped_column(default=0)
    file_size: Mapped[int] = mapped_column(BigInteger, default=0)
    uploaded_by: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("user_profiles.id", ondelete="SET NULL"), default=None, index=True
    )
    active: Mapped[bool] = mapped_column(default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    course = relationship("Course", back_populates="videos")
    progress_records = relationship(
        "Progress", back_populates="video", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Video(id={self.id}, title={self.title}, course_id={self.course_id})>"
