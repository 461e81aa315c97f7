from typing import Any, Generic, Optional, TypeVar

from sqlalchemy import delete, select

from clinic.database import Base, session_scope

ModelT = TypeVar("ModelT", bound=Base)


class RecordNotFoundError(ValueError):
    pass


class RecordConflictError(ValueError):
    pass


class InvalidReferenceError(ValueError):
    pass


class RecordStore(Generic[ModelT]):
    """Plain CRUD over one table; rows come back detached and fully loaded."""

    def __init__(self, model: type[ModelT], order_by: str = "created_at") -> None:
        self.model = model
        self._order_by = order_by

    def create(self, **values: Any) -> ModelT:
        instance = self.model(**values)
        with session_scope() as session:
            session.add(instance)
            session.flush()
        return instance

    def list(self, **filters: Any) -> list[ModelT]:
        order_column = getattr(self.model, self._order_by)
        stmt = (
            select(self.model)
            .where(*self._conditions(filters))
            .order_by(order_column.desc(), self.model.id.desc())
        )
        with session_scope() as session:
            return list(session.execute(stmt).scalars().all())

    def get(self, record_id: int) -> Optional[ModelT]:
        with session_scope() as session:
            return session.get(self.model, record_id)

    def exists(self, record_id: Optional[int]) -> bool:
        if record_id is None:
            return False
        return self.get(record_id) is not None

    def find_one(self, **filters: Any) -> Optional[ModelT]:
        stmt = select(self.model).where(*self._conditions(filters)).limit(1)
        with session_scope() as session:
            return session.execute(stmt).scalar_one_or_none()

    def update(self, record_id: int, **values: Any) -> Optional[ModelT]:
        with session_scope() as session:
            instance = session.get(self.model, record_id)
            if instance is None:
                return None
            for field, value in values.items():
                if not hasattr(self.model, field):
                    raise ValueError(f"{self.model.__name__} has no column '{field}'")
                setattr(instance, field, value)
            session.flush()
            return instance

    def delete(self, record_id: int) -> bool:
        with session_scope() as session:
            result = session.execute(
                delete(self.model).where(self.model.id == record_id)
            )
            return result.rowcount > 0

    def _conditions(self, filters: dict) -> list:
        conditions = []
        for field, value in filters.items():
            if not hasattr(self.model, field):
                raise ValueError(f"{self.model.__name__} has no column '{field}'")
            column = getattr(self.model, field)
            if value is None:
                conditions.append(column.is_(None))
            elif isinstance(value, (list, tuple, set)):
                conditions.append(column.in_(list(value)))
            else:
                conditions.append(column == value)
        return conditions
