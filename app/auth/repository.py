from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.auth.models.user_profile import UserProfile, UserRole
from app.core.repository import BaseRepository


class ProfileRepository(BaseRepository[UserProfile]):
    def __init__(self, db: Session):
        super().__init__(db, UserProfile)

    def find_by_email(self, email: str) -> UserProfile | None:
        return self.find_one(email=email)

    def search(
        self,
        role: UserRole | None = None,
        active: bool | None = None,
        search: str | None = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[list[UserProfile], int]:
        query = self.db.query(UserProfile)
        if role is not None:
            query = query.filter(UserProfile.role == role)
        if active is not None:
            query = query.filter(UserProfile.active == active)
        if search:
            term = f"%{search}%"
            query = query.filter(
                or_(UserProfile.full_name.ilike(term), UserProfile.email.ilike(term))
            )
        total = query.count()
        rows = query.order_by(UserProfile.created_at.desc()).offset(skip).limit(limit).all()
        return rows, total

    def get_many(self, ids: list[UUID]) -> dict[UUID, UserProfile]:
        if not ids:
            return {}
        rows = self.db.query(UserProfile).filter(UserProfile.id.in_(ids)).all()
        return {row.id: row for row in rows}
