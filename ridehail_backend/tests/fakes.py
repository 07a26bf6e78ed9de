"""
In-memory stores with the same compare-and-set semantics as the SQL stores.

Every call yields to the event loop first, so concurrent sagas interleave
between steps the way independent requests would.
"""

import asyncio
from typing import Any, Callable, Dict, Mapping, Optional

from ridehail_backend.app.models.enums import BookingStatus, DriverStatus
from ridehail_backend.app.repositories.base import BookingStore, DriverStore
from ridehail_backend.app.schemas.assignment import BookingSnapshot, DriverSnapshot


def driver_record(driver_id: int, is_available: bool = True, status: DriverStatus = DriverStatus.IDLE) -> dict:
    return {"id": driver_id, "is_available": is_available, "status": status, "vehicle_type": "car"}


def booking_record(booking_id: int, status: BookingStatus = BookingStatus.PENDING, driver_id: Optional[int] = None) -> dict:
    return {"id": booking_id, "status": status, "driver_id": driver_id, "user_id": 1, "vehicle_type": "car"}


class InMemoryStore:
    snapshot_schema = None

    def __init__(self, *records: dict):
        self.records: Dict[int, dict] = {record["id"]: dict(record) for record in records}
        self.writes = 0

    async def get(self, entity_id: int):
        await asyncio.sleep(0)
        record = self.records.get(entity_id)
        return None if record is None else self.snapshot_schema.model_validate(record)

    async def update_if(self, entity_id: int, guard: Mapping[str, Any], changes: Mapping[str, Any]):
        await asyncio.sleep(0)
        # Check and write without yielding: atomic with respect to other tasks
        record = self.records.get(entity_id)
        if record is None or any(record.get(name) != value for name, value in guard.items()):
            return None
        record.update(changes)
        self.writes += 1
        return self.snapshot_schema.model_validate(record)


class InMemoryDriverStore(InMemoryStore, DriverStore):
    snapshot_schema = DriverSnapshot


class InMemoryBookingStore(InMemoryStore, BookingStore):
    snapshot_schema = BookingSnapshot


class UnreleasableDriverStore(InMemoryDriverStore):
    """Unconditional writes (the release compensation) fail."""

    async def update_if(self, entity_id, guard, changes):
        if not guard:
            raise ConnectionError("driver store unavailable")
        return await super().update_if(entity_id, guard, changes)


class InterferingStore:
    """Runs `interfere(records)` once, right before the first conditional update."""

    def __init__(self, *records: dict, interfere: Callable[[Dict[int, dict]], None] = None):
        super().__init__(*records)
        self.interfere = interfere

    async def update_if(self, entity_id, guard, changes):
        if self.interfere is not None:
            self.interfere(self.records)
            self.interfere = None
        return await super().update_if(entity_id, guard, changes)


class InterferingDriverStore(InterferingStore, InMemoryDriverStore):
    pass


class InterferingBookingStore(InterferingStore, InMemoryBookingStore):
    pass
