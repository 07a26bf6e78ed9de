"""
Booking Assignment Saga.

Moves one available driver and one pending booking into the assigned state
together, or leaves both as they were.

Steps, each a single conditional write:

    reserve_driver   driver -> en-route / unavailable, guarded by is_available
                     compensation: release_driver (idle / available, unconditional)
    claim_booking    booking -> accepted / driver_id, guarded by status == pending

A failing step rolls back the completed steps in reverse order. If a
rollback write fails the driver stays reserved with no booking, and
CompensationFailedError is raised instead of the triggering error.
"""

import asyncio
import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional

from ridehail_backend.app.core.exceptions import (
    CompensationFailedError,
    ConflictError,
    InvalidInputError,
    ResourceNotFoundError,
    UnauthorizedError,
)
from ridehail_backend.app.models.enums import BookingStatus, DriverStatus
from ridehail_backend.app.repositories.base import BookingStore, DriverStore
from ridehail_backend.app.schemas.assignment import BookingSnapshot, DriverSnapshot

logger = logging.getLogger("ridehail.assignment")

DRIVER_RESERVED_STATE = {"status": DriverStatus.EN_ROUTE, "is_available": False}
DRIVER_RELEASED_STATE = {"status": DriverStatus.IDLE, "is_available": True}


class SagaState(str, enum.Enum):
    """Lifecycle of one accept-job attempt."""
    STARTED = "STARTED"
    REJECTED = "REJECTED"  # Precondition failed, nothing written
    DRIVER_RESERVED = "DRIVER_RESERVED"
    BOOKING_ASSIGNED = "BOOKING_ASSIGNED"  # Success
    COMPENSATING = "COMPENSATING"
    COMPENSATED = "COMPENSATED"  # Failed, driver released
    COMPENSATION_FAILED = "COMPENSATION_FAILED"  # Failed, driver stranded


@dataclass
class AssignmentContext:
    """Tracks a single saga execution."""
    driver_id: int
    booking_id: int
    state: SagaState = SagaState.STARTED
    history: List[SagaState] = field(default_factory=lambda: [SagaState.STARTED])
    completed_steps: List[str] = field(default_factory=list)
    failed_step: Optional[str] = None
    driver: Optional[DriverSnapshot] = None
    booking: Optional[BookingSnapshot] = None

    def transition(self, state: SagaState) -> None:
        logger.debug(
            "Assignment driver=%s booking=%s: %s -> %s",
            self.driver_id, self.booking_id, self.state.value, state.value
        )
        self.state = state
        self.history.append(state)


StepAction = Callable[[AssignmentContext], Awaitable[None]]


@dataclass
class SagaStep:
    """A forward action, the state it reaches, and how to undo it."""
    name: str
    action: StepAction
    reaches: SagaState
    compensation: Optional[StepAction] = None


@dataclass
class AssignmentResult:
    driver: DriverSnapshot
    booking: BookingSnapshot
    state: SagaState
    history: List[SagaState]


def parse_entity_id(value: Any, field_name: str) -> int:
    """
    Accept a positive int or a string of ASCII digits.

    Raises:
        InvalidInputError: for anything else (bools, floats, blanks, negatives)
    """
    if isinstance(value, bool):
        raise InvalidInputError(field_name, value)
    if isinstance(value, int):
        candidate = value
    elif isinstance(value, str) and value.isascii() and value.isdigit():
        candidate = int(value)
    else:
        raise InvalidInputError(field_name, value)

    if candidate <= 0:
        raise InvalidInputError(field_name, value)
    return candidate


class BookingAssignmentSaga:
    """
    Coordinates driver reservation and booking claim.

    No in-process locking: every guard is enforced by the store's
    conditional update, so concurrent requests for the same driver or the
    same booking are serialized by the storage layer.
    """

    def __init__(self, drivers: DriverStore, bookings: BookingStore):
        self.drivers = drivers
        self.bookings = bookings
        self.steps = [
            SagaStep(
                name="reserve_driver",
                action=self._reserve_driver,
                reaches=SagaState.DRIVER_RESERVED,
                compensation=self._compensate_reserve_driver,
            ),
            SagaStep(
                name="claim_booking",
                action=self._claim_booking,
                reaches=SagaState.BOOKING_ASSIGNED,
                compensation=None,  # Last step; nothing after it can fail
            ),
        ]

    async def accept_job(self, caller_driver_id: Any, booking_id: Any) -> AssignmentResult:
        """
        Assign `booking_id` to the calling driver.

        Raises:
            UnauthorizedError: no caller identity
            InvalidInputError: malformed driver or booking id
            ResourceNotFoundError: driver or booking does not exist
            ConflictError: driver busy, booking not pending, or a lost race
            CompensationFailedError: rollback failed after one of the above
        """
        if caller_driver_id is None:
            raise UnauthorizedError()

        ctx = AssignmentContext(
            driver_id=parse_entity_id(caller_driver_id, "driver_id"),
            booking_id=parse_entity_id(booking_id, "booking_id"),
        )

        await self._check_preconditions(ctx)

        for step in self.steps:
            try:
                await step.action(ctx)
            except (Exception, asyncio.CancelledError) as exc:
                # A cancelled request still releases the driver before unwinding
                ctx.failed_step = step.name
                logger.info(
                    "Assignment driver=%s booking=%s failed at %s: %s",
                    ctx.driver_id, ctx.booking_id, step.name, exc
                )
                await self._compensate(ctx, exc)
                raise
            ctx.completed_steps.append(step.name)
            ctx.transition(step.reaches)

        logger.info("Driver %s accepted booking %s", ctx.driver_id, ctx.booking_id)
        return AssignmentResult(
            driver=ctx.driver,
            booking=ctx.booking,
            state=ctx.state,
            history=list(ctx.history),
        )

    async def release_driver(self, driver_id: int) -> DriverSnapshot:
        """
        Return a driver to idle / available.

        Unconditional write of fixed values, so running it more than once
        leaves the same state. Used as the reserve_driver compensation and
        by operator tooling to repair stranded drivers.

        Raises:
            ResourceNotFoundError: the driver does not exist
        """
        released = await self.drivers.update(driver_id, DRIVER_RELEASED_STATE)
        if released is None:
            raise ResourceNotFoundError("Driver", driver_id)
        return released

    async def _check_preconditions(self, ctx: AssignmentContext) -> None:
        driver = await self.drivers.get(ctx.driver_id)
        if driver is None:
            ctx.transition(SagaState.REJECTED)
            raise ResourceNotFoundError("Driver", ctx.driver_id)

        if not driver.is_available:
            ctx.transition(SagaState.REJECTED)
            raise ConflictError(
                "Driver is not available",
                reason="DRIVER_UNAVAILABLE",
                details={"driver_id": ctx.driver_id, "status": driver.status.value}
            )

    async def _reserve_driver(self, ctx: AssignmentContext) -> None:
        reserved = await self.drivers.update_if(
            ctx.driver_id,
            guard={"is_available": True},
            changes=DRIVER_RESERVED_STATE,
        )
        if reserved is None:
            raise ConflictError(
                "Failed to update driver status; driver is no longer available",
                reason="DRIVER_RACE_LOST",
                details={"driver_id": ctx.driver_id}
            )
        ctx.driver = reserved

    async def _compensate_reserve_driver(self, ctx: AssignmentContext) -> None:
        ctx.driver = await self.release_driver(ctx.driver_id)

    async def _claim_booking(self, ctx: AssignmentContext) -> None:
        # Read first so "missing" and "already taken" get their own errors;
        # the guarded write below is what actually prevents double assignment.
        booking = await self.bookings.get(ctx.booking_id)
        if booking is None:
            raise ResourceNotFoundError("Booking", ctx.booking_id)

        if booking.status != BookingStatus.PENDING:
            raise ConflictError(
                "Booking is not in pending status",
                reason="BOOKING_NOT_PENDING",
                details={"booking_id": ctx.booking_id, "status": booking.status.value}
            )

        claimed = await self.bookings.update_if(
            ctx.booking_id,
            guard={"status": BookingStatus.PENDING},
            changes={"status": BookingStatus.ACCEPTED, "driver_id": ctx.driver_id},
        )
        if claimed is None:
            raise ConflictError(
                "Failed to update booking; it was accepted by another driver",
                reason="BOOKING_RACE_LOST",
                details={"booking_id": ctx.booking_id}
            )
        ctx.booking = claimed

    async def _compensate(self, ctx: AssignmentContext, error: Exception) -> None:
        if not ctx.completed_steps:
            ctx.transition(SagaState.REJECTED)
            return

        ctx.transition(SagaState.COMPENSATING)
        steps_by_name = {step.name: step for step in self.steps}

        for step_name in reversed(ctx.completed_steps):
            step = steps_by_name[step_name]
            if step.compensation is None:
                continue
            try:
                await step.compensation(ctx)
            except Exception as comp_exc:
                ctx.transition(SagaState.COMPENSATION_FAILED)
                logger.critical(
                    "Compensation %s failed for driver=%s booking=%s (triggered by %s: %s); "
                    "driver left reserved without a booking",
                    step_name, ctx.driver_id, ctx.booking_id,
                    type(error).__name__, error,
                    exc_info=comp_exc,
                )
                raise CompensationFailedError(
                    driver_id=ctx.driver_id,
                    booking_id=ctx.booking_id,
                    step=step_name,
                    cause=error,
                ) from comp_exc

        ctx.transition(SagaState.COMPENSATED)
        logger.info("Driver %s released after failed assignment of booking %s", ctx.driver_id, ctx.booking_id)
