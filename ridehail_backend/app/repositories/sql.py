"""
SQLAlchemy-backed stores.

Conditional updates are a single UPDATE ... WHERE id = :id AND <guard>;
the database serializes concurrent writers and rowcount tells whether the
guard held.

A failed statement rolls the session back before re-raising, so the
compensation that follows can still write on the same session (PostgreSQL
refuses every statement in an aborted transaction).
"""

from typing import Any, Mapping, Optional
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ridehail_backend.app.models.driver import Driver
from ridehail_backend.app.models.booking import Booking
from ridehail_backend.app.repositories.base import DriverStore, BookingStore
from ridehail_backend.app.schemas.assignment import DriverSnapshot, BookingSnapshot


class _SqlStoreMixin:
    model = None
    snapshot_schema = None

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, entity_id: int):
        try:
            # populate_existing: never serve a stale identity-map copy
            row = await self.db.get(self.model, entity_id, populate_existing=True)
        except SQLAlchemyError:
            await self.db.rollback()
            raise

        if row is None:
            return None
        return self.snapshot_schema.model_validate(row)

    async def update_if(
        self,
        entity_id: int,
        guard: Mapping[str, Any],
        changes: Mapping[str, Any]
    ) -> Optional[Any]:
        conditions = [self.model.id == entity_id]
        conditions.extend(getattr(self.model, field) == value for field, value in guard.items())

        stmt = (
            update(self.model)
            .where(*conditions)
            .values(**changes)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise

        if result.rowcount == 0:
            return None
        return await self.get(entity_id)


class SqlDriverStore(_SqlStoreMixin, DriverStore):
    model = Driver
    snapshot_schema = DriverSnapshot


class SqlBookingStore(_SqlStoreMixin, BookingStore):
    model = Booking
    snapshot_schema = BookingSnapshot
