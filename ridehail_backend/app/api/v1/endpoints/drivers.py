"""
Driver API Endpoints.

Registration, login, location updates, job acceptance and the list of
pending bookings a driver can pick up.
"""

import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from ridehail_backend.app.db.session import get_db
from ridehail_backend.app.models.driver import Driver
from ridehail_backend.app.models.booking import Booking
from ridehail_backend.app.models.rider import Rider
from ridehail_backend.app.models.enums import BookingStatus, DriverStatus
from ridehail_backend.app.schemas.driver import (
    DriverRegister,
    DriverLogin,
    TokenResponse,
    LocationUpdate,
    LocationUpdateResponse,
)
from ridehail_backend.app.schemas.assignment import AcceptJobRequest, AcceptJobResponse, AcceptedDriver
from ridehail_backend.app.schemas.booking import PendingBookingItem, PendingBookingListResponse
from ridehail_backend.app.core.config import settings
from ridehail_backend.app.core.dependencies import get_current_driver
from ridehail_backend.app.core.exceptions import AppException, CompensationFailedError, ResourceNotFoundError
from ridehail_backend.app.core.jwt import create_driver_token
from ridehail_backend.app.core.security import get_password_hash, verify_password
from ridehail_backend.app.repositories.sql import SqlBookingStore, SqlDriverStore
from ridehail_backend.app.services.assignment_saga import BookingAssignmentSaga
from ridehail_backend.app.services.audit import log_event, log_auth_event, AuditAction

logger = logging.getLogger("ridehail.drivers")

router = APIRouter(prefix="/drivers", tags=["Drivers"])


def get_assignment_saga(db: AsyncSession = Depends(get_db)) -> BookingAssignmentSaga:
    """Saga wired to the request's database session."""
    return BookingAssignmentSaga(SqlDriverStore(db), SqlBookingStore(db))


def _point(coordinates) -> dict:
    return {"type": "Point", "coordinates": [float(c) for c in coordinates]}


def _client_ip(request: Request):
    return request.client.host if request.client else None


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register_driver(
    driver_data: DriverRegister,
    request: Request,
    db: AsyncSession = Depends(get_db)
):
    """
    Register a new driver.

    Defaults: available, idle, and the configured default coordinates when
    no location is sent. Returns a long-lived token.
    """
    result = await db.execute(select(Driver).where(Driver.email == driver_data.email))
    if result.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Driver already exists"
        )

    coordinates = driver_data.location or settings.default_driver_coordinates

    new_driver = Driver(
        name=driver_data.name,
        email=driver_data.email,
        hashed_password=get_password_hash(driver_data.password),
        vehicle_type=driver_data.vehicle_type,
        is_available=True if driver_data.is_available is None else driver_data.is_available,
        status=driver_data.status or DriverStatus.IDLE,
        location=_point(coordinates)
    )

    db.add(new_driver)
    await db.commit()
    await db.refresh(new_driver)

    await log_auth_event(
        db=db,
        action=AuditAction.DRIVER_REGISTERED,
        driver_id=new_driver.id,
        email=new_driver.email,
        ip_address=_client_ip(request)
    )
    logger.info("Registered driver %s (%s)", new_driver.id, new_driver.vehicle_type)

    token = create_driver_token(
        new_driver.id,
        new_driver.email,
        expires_delta=timedelta(days=settings.registration_token_expire_days)
    )

    return TokenResponse(
        message="Driver registered successfully",
        access_token=token,
        driver_id=new_driver.id,
        email=new_driver.email
    )


@router.post("/login", response_model=TokenResponse)
async def login_driver(
    credentials: DriverLogin,
    request: Request,
    db: AsyncSession = Depends(get_db)
):
    """
    Login a driver and return a short-lived JWT.

    Unknown email and wrong password give the same 401.
    """
    result = await db.execute(select(Driver).where(Driver.email == credentials.email))
    driver = result.scalar_one_or_none()

    if not driver or not verify_password(credentials.password, driver.hashed_password):
        await log_auth_event(
            db=db,
            action=AuditAction.LOGIN_FAILED,
            driver_id=driver.id if driver else None,
            email=credentials.email,
            ip_address=_client_ip(request),
            metadata={"reason": "Invalid password" if driver else "Driver not found"}
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = create_driver_token(driver.id, driver.email)

    await log_auth_event(
        db=db,
        action=AuditAction.LOGIN_SUCCESS,
        driver_id=driver.id,
        email=driver.email,
        ip_address=_client_ip(request)
    )

    return TokenResponse(
        message="Login successful",
        access_token=token,
        driver_id=driver.id,
        email=driver.email
    )


@router.put("/location", response_model=LocationUpdateResponse)
async def update_location(
    location: LocationUpdate,
    current_driver: dict = Depends(get_current_driver),
    db: AsyncSession = Depends(get_db)
):
    """Replace the authenticated driver's current location."""
    driver_id = current_driver["driver_id"]
    point = _point(location.coordinates)

    updated = await SqlDriverStore(db).update(driver_id, {"location": point})
    if updated is None:
        raise ResourceNotFoundError("Driver", driver_id)

    await log_event(
        db=db,
        action=AuditAction.LOCATION_UPDATED,
        actor_id=driver_id,
        actor_email=current_driver.get("sub"),
        metadata={"coordinates": point["coordinates"]}
    )

    return LocationUpdateResponse(driver_id=driver_id, location=point)


@router.post("/accept-job", response_model=AcceptJobResponse)
async def accept_job(
    job: AcceptJobRequest,
    request: Request,
    current_driver: dict = Depends(get_current_driver),
    saga: BookingAssignmentSaga = Depends(get_assignment_saga),
    db: AsyncSession = Depends(get_db)
):
    """
    Accept a pending booking.

    Errors:
    - 404 driver or booking not found
    - 409 driver busy, booking already taken, or lost a race
    - 500 ERR_SAGA_001 when the driver could not be released after a failure
    """
    driver_id = current_driver.get("driver_id")

    try:
        result = await saga.accept_job(driver_id, job.booking_id)
    except CompensationFailedError as exc:
        # The session may have been left mid-failure by the store
        await db.rollback()
        await log_event(
            db=db,
            action=AuditAction.COMPENSATION_FAILED,
            actor_id=exc.driver_id,
            actor_email=current_driver.get("sub"),
            booking_id=job.booking_id,
            metadata=exc.details,
            ip_address=_client_ip(request)
        )
        raise
    except AppException as exc:
        await log_event(
            db=db,
            action=AuditAction.JOB_REJECTED,
            actor_id=driver_id,
            actor_email=current_driver.get("sub"),
            booking_id=job.booking_id,
            metadata={"error_code": exc.error_code, **exc.details},
            ip_address=_client_ip(request)
        )
        raise

    await log_event(
        db=db,
        action=AuditAction.JOB_ACCEPTED,
        actor_id=result.driver.id,
        actor_email=current_driver.get("sub"),
        booking_id=result.booking.id,
        ip_address=_client_ip(request)
    )

    return AcceptJobResponse(
        booking=result.booking,
        driver=AcceptedDriver(
            id=result.driver.id,
            status=result.driver.status,
            is_available=result.driver.is_available
        )
    )


@router.get("/bookings/pending", response_model=PendingBookingListResponse)
async def list_pending_bookings(
    current_driver: dict = Depends(get_current_driver),
    db: AsyncSession = Depends(get_db)
):
    """
    List bookings the driver can accept.

    Pending, unassigned bookings for the driver's vehicle type, oldest first,
    with the requesting rider's name and email.
    """
    driver_id = current_driver["driver_id"]
    driver = await db.get(Driver, driver_id)
    if driver is None:
        raise ResourceNotFoundError("Driver", driver_id)

    query = (
        select(Booking, Rider)
        .join(Rider, Booking.user_id == Rider.id)
        .where(
            Booking.status == BookingStatus.PENDING,
            Booking.driver_id.is_(None),
            Booking.vehicle_type == driver.vehicle_type
        )
        .order_by(Booking.created_at.asc(), Booking.id.asc())
    )
    rows = (await db.execute(query)).all()

    data = [
        PendingBookingItem(
            id=booking.id,
            user_name=rider.name,
            user_email=rider.email,
            pickup_location=booking.pickup_location,
            dropoff_location=booking.dropoff_location,
            vehicle_type=booking.vehicle_type,
            estimated_price=booking.estimated_price,
            created_at=booking.created_at
        )
        for booking, rider in rows
    ]

    return PendingBookingListResponse(count=len(data), data=data)
