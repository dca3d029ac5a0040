"""
Persistence store helpers.

Thin get/insert/update layer over SQLAlchemy keyed by row id. Every driver or
connection failure is re-raised as StorageError so callers deal with a single
error kind.
"""

import time
from typing import Any, Dict, Iterable, Optional, Type

from sqlalchemy import select, text, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from practitioner_passport.core.database import Base
from practitioner_passport.core.exceptions import StorageError
from practitioner_passport.core.logging_config import logger


class Repository:
    """Row-level CRUD over any mapped model"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def ping(self) -> None:
        """Open the connection, raising StorageError when the store is unreachable"""
        try:
            await self.db.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.log_error_with_context(e, context="store connection")
            raise StorageError(f"Could not open the data store: {e}", operation="connect") from e

    async def get(self, model: Type[Base], row_id: str) -> Optional[Any]:
        try:
            result = await self.db.execute(select(model).where(model.id == str(row_id)))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to read {model.__tablename__}: {e}", operation="get") from e

    async def find_one(self, model: Type[Base], *criteria) -> Optional[Any]:
        try:
            result = await self.db.execute(select(model).where(*criteria))
            return result.scalars().first()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to read {model.__tablename__}: {e}", operation="find") from e

    async def insert(self, model: Type[Base], **values) -> Any:
        obj = model(**values)
        try:
            self.db.add(obj)
            await self.db.flush()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageError(f"Failed to insert into {model.__tablename__}: {e}", operation="insert") from e
        return obj

    async def update_where(
        self,
        model: Type[Base],
        criteria: Iterable[Any],
        values: Dict[str, Any],
    ) -> int:
        """Run a single UPDATE statement and return the number of matched rows"""
        stmt = (
            update(model)
            .where(*criteria)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        start = time.perf_counter()
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageError(f"Failed to update {model.__tablename__}: {e}", operation="update") from e

        logger.log_db_query(
            "UPDATE",
            model.__tablename__,
            (time.perf_counter() - start) * 1000,
            rows_affected=result.rowcount,
        )
        return result.rowcount

    async def delete(self, obj: Any) -> None:
        try:
            await self.db.delete(obj)
            await self.db.flush()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageError(f"Failed to delete from {obj.__tablename__}: {e}", operation="delete") from e

    async def commit(self) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageError(f"Failed to commit transaction: {e}", operation="commit") from e
