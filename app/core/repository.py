from typing import Any, Dict, Generic, List, Optional, Sequence, Tuple, Type, TypeVar
import logging
import uuid

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.exceptions import DuplicateError, StorageError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


def text_search(term: str, *columns):
    """Case-insensitive substring match of ``term`` against any of ``columns``."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    pattern = f"%{escaped}%"
    return or_(*(column.ilike(pattern, escape="\\") for column in columns))


class Repository(Generic[ModelT]):
    """Filtered find/count/insert/update over one mapped model.

    Criteria are plain SQLAlchemy expressions, so computed predicates such as
    ``current_stock <= minimum_stock`` run inside the database. Storage
    failures surface as ``StorageError``; unique-constraint violations at
    commit surface as ``DuplicateError``.
    """

    def __init__(self, db: AsyncSession, model: Type[ModelT], duplicate_message: str = "Record already exists"):
        self.db = db
        self.model = model
        self.duplicate_message = duplicate_message

    async def find(
        self,
        *criteria,
        order_by: Sequence[Any] = (),
        offset: Optional[int] = None,
        limit: Optional[int] = None
    ) -> List[ModelT]:
        query = select(self.model).where(*criteria)
        if order_by:
            query = query.order_by(*order_by)
        if offset:
            query = query.offset(offset)
        if limit:
            query = query.limit(limit)
        try:
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise self._storage_error("find", e)

    async def find_one(self, *criteria) -> Optional[ModelT]:
        records = await self.find(*criteria, limit=1)
        return records[0] if records else None

    async def count(self, *criteria) -> int:
        query = select(func.count()).select_from(self.model).where(*criteria)
        try:
            result = await self.db.execute(query)
            return result.scalar_one()
        except SQLAlchemyError as e:
            raise self._storage_error("count", e)

    async def aggregate(self, *expressions, where: Sequence[Any] = ()) -> Tuple[Any, ...]:
        """Evaluate aggregate expressions (sum, avg, ...) over the filtered rows."""
        query = select(*expressions).select_from(self.model).where(*where)
        try:
            result = await self.db.execute(query)
            return tuple(result.one())
        except SQLAlchemyError as e:
            raise self._storage_error("aggregate", e)

    async def group_count(self, column, *criteria, limit: Optional[int] = None) -> List[Tuple[Any, int]]:
        """Count rows per value of ``column``, largest groups first."""
        count = func.count().label("count")
        query = (
            select(column, count)
            .select_from(self.model)
            .where(*criteria)
            .group_by(column)
            .order_by(count.desc())
        )
        if limit:
            query = query.limit(limit)
        try:
            result = await self.db.execute(query)
            return [(key, total) for key, total in result.all()]
        except SQLAlchemyError as e:
            raise self._storage_error("group_count", e)

    async def find_by_id(self, record_id: uuid.UUID) -> Optional[ModelT]:
        try:
            return await self.db.get(self.model, record_id)
        except SQLAlchemyError as e:
            raise self._storage_error("find_by_id", e)

    async def insert(self, record: ModelT) -> ModelT:
        self.db.add(record)
        await self._commit("insert")
        await self.db.refresh(record)
        return record

    async def update_by_id(self, record_id: uuid.UUID, values: Dict[str, Any]) -> Optional[ModelT]:
        record = await self.find_by_id(record_id)
        if record is None:
            return None
        for key, value in values.items():
            setattr(record, key, value)
        await self._commit("update")
        await self.db.refresh(record)
        return record

    async def _commit(self, operation: str):
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"{self.model.__name__} {operation} rejected by unique constraint: {e.orig}")
            raise DuplicateError(self.duplicate_message)
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise self._storage_error(operation, e)

    def _storage_error(self, operation: str, error: Exception) -> StorageError:
        logger.error(f"{self.model.__name__} {operation} failed: {error}")
        return StorageError(
            f"Failed to {operation.replace('_', ' ')} {self.model.__tablename__}",
            details={"reason": str(error)}
        )
