"""
Persistence interface for the job-assignment saga.

The saga only needs two capabilities per entity kind: a point lookup and a
conditional update. Keeping them behind this interface lets the saga run
against the database in production and against in-memory stores in tests.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, Mapping, Optional, TypeVar

from ridehail_backend.app.schemas.assignment import DriverSnapshot, BookingSnapshot

SnapshotT = TypeVar("SnapshotT")


class EntityStore(ABC, Generic[SnapshotT]):
    """Point lookup + compare-and-set for one entity kind."""

    @abstractmethod
    async def get(self, entity_id: int) -> Optional[SnapshotT]:
        """Return the current snapshot, or None if the entity does not exist."""

    @abstractmethod
    async def update_if(
        self,
        entity_id: int,
        guard: Mapping[str, Any],
        changes: Mapping[str, Any]
    ) -> Optional[SnapshotT]:
        """
        Apply `changes` only if every field in `guard` still holds its expected value.

        The check and the write must be a single atomic operation at the
        storage layer. An empty guard makes the write unconditional.

        Returns:
            The post-update snapshot, or None when no entity matched
        """

    async def update(self, entity_id: int, changes: Mapping[str, Any]) -> Optional[SnapshotT]:
        """Unconditional write; None if the entity does not exist."""
        return await self.update_if(entity_id, {}, changes)


class DriverStore(EntityStore[DriverSnapshot]):
    pass


class BookingStore(EntityStore[BookingSnapshot]):
    pass
