"""
Record store over async SQLAlchemy.

Records are addressed by string id within a partition. Supports
fetch-by-id, query-by-predicate, and batched save/delete. Database failures
are re-raised as RecordStoreError subclasses (see classify_store_error).
"""

from collections.abc import Iterable, Sequence
from typing import Any, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from riftbound.models.db import Base, Partition
from riftbound.models.failure import classify_store_error

R = TypeVar("R", bound=Base)


class RecordStore:
    """Partitioned record access for one database session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def fetch(self, model: type[R], record_id: str, partition: Partition) -> R | None:
        """Fetch one record. Returns None if it doesn't exist."""
        try:
            return await self.session.get(model, (record_id, partition.value))
        except SQLAlchemyError as e:
            raise classify_store_error(e) from e

    async def fetch_many(
        self, model: type[R], record_ids: Iterable[str], partition: Partition
    ) -> dict[str, R]:
        """Fetch records by id. Missing ids are absent from the result."""
        ids = list(dict.fromkeys(record_ids))
        if not ids:
            return {}
        id_column = model.id  # type: ignore[attr-defined]
        rows = await self.query(model, id_column.in_(ids), partition=partition)
        return {row.id: row for row in rows}  # type: ignore[attr-defined]

    async def query(
        self,
        model: type[R],
        *predicates: Any,
        partition: Partition,
        order_by: Sequence[Any] = (),
    ) -> list[R]:
        """Fetch all records in a partition matching every predicate."""
        stmt = (
            select(model)
            .where(model.partition == partition.value, *predicates)  # type: ignore[attr-defined]
            .order_by(*order_by)
        )
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            raise classify_store_error(e) from e
        return list(result.scalars().all())

    async def save(self, records: Iterable[R]) -> list[R]:
        """
        Insert or replace records by (id, partition).

        Last write wins; there is no conflict detection beyond what the
        database itself reports.
        """
        try:
            saved = [await self.session.merge(record) for record in records]
            await self.session.flush()
        except SQLAlchemyError as e:
            raise classify_store_error(e) from e
        return saved

    async def delete(
        self, model: type[R], record_ids: Iterable[str], partition: Partition
    ) -> int:
        """Delete records by id. Returns the number deleted."""
        ids = list(dict.fromkeys(record_ids))
        if not ids:
            return 0
        stmt = delete(model).where(
            model.partition == partition.value,  # type: ignore[attr-defined]
            model.id.in_(ids),  # type: ignore[attr-defined]
        )
        try:
            result = await self.session.execute(
                stmt, execution_options={"synchronize_session": "fetch"}
            )
            await self.session.flush()
        except SQLAlchemyError as e:
            raise classify_store_error(e) from e
        # rowcount is available on DELETE results; type stubs incomplete for async
        return int(result.rowcount)  # type: ignore[attr-defined]

    async def delete_where(self, model: type[R], *predicates: Any, partition: Partition) -> int:
        """Delete every record in a partition matching the predicates."""
        rows = await self.query(model, *predicates, partition=partition)
        ids = [row.id for row in rows]  # type: ignore[attr-defined]
        return await self.delete(model, ids, partition)
