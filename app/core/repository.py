"""Base repository pattern implementation.

Repositories are the only place that talks to the SQLAlchemy session. Each
entity gets a subclass returning its own model type, so services never handle
untyped rows or the store's schema representation directly.
"""

from typing import Any, Generic, TypeVar, cast
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType]):
    """Generic repository with common CRUD operations.

    Example:
        ```python
        class CourseRepository(BaseRepository[Course]):
            def __init__(self, db: Session):
                super().__init__(db, Course)

            def find_by_code(self, code: str) -> Course | None:
                return self.find_one(code=code)
        ```
    """

    def __init__(self, db: Session, model: type[ModelType]):
        self.db = db
        self.model = model

    def _query(self, **filters: Any) -> Query:
        query = self.db.query(self.model)
        for column, value in filters.items():
            query = query.filter(getattr(self.model, column) == value)
        return query

    def get_by_id(self, entity_id: UUID) -> ModelType | None:
        result = self._query(id=entity_id).first()
        return cast(ModelType | None, result)

    def find_one(self, **filters: Any) -> ModelType | None:
        """Return the first entity matching all equality filters."""
        return cast(ModelType | None, self._query(**filters).first())

    def find_all(
        self,
        *order_by: Any,
        skip: int = 0,
        limit: int | None = None,
        **filters: Any,
    ) -> list[ModelType]:
        """Return entities matching all equality filters, optionally ordered and paged."""
        query = self._query(**filters)
        if order_by:
            query = query.order_by(*order_by)
        if skip:
            query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)
        return cast(list[ModelType], query.all())

    def count(self, **filters: Any) -> int:
        result: int = self._query(**filters).count()
        return result

    def exists(self, **filters: Any) -> bool:
        return self.find_one(**filters) is not None

    def create(self, **kwargs: object) -> ModelType:
        """Insert a new entity and commit.

        Raises:
            SQLAlchemyError: after rolling back, when the insert is rejected.
        """
        instance = self.model(**kwargs)  # type: ignore[call-arg]
        self.db.add(instance)
        self.commit()
        self.db.refresh(instance)
        return instance

    def update(self, instance: ModelType, **kwargs: object) -> ModelType:
        for key, value in kwargs.items():
            if hasattr(instance, key):
                setattr(instance, key, value)
        self.commit()
        self.db.refresh(instance)
        return instance

    def delete(self, instance: ModelType) -> None:
        self.db.delete(instance)
        self.commit()

    def commit(self) -> None:
        """Commit the session, rolling back before re-raising on failure."""
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise


UNIQUE_VIOLATION_SQLSTATE = "23505"


def is_unique_violation(error: IntegrityError, *markers: str) -> bool:
    """Tell whether an IntegrityError is a unique violation mentioning any marker.

    Markers are matched against the driver message, which names the column
    (SQLite) or the constraint/index (PostgreSQL).
    """
    orig = error.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    message = str(orig)
    unique = (
        code == UNIQUE_VIOLATION_SQLSTATE
        or "UNIQUE constraint failed" in message
        or "duplicate key" in message
    )
    return unique and (not markers or any(marker in message for marker in markers))
