"""
Job assignment schemas.

Snapshots are the read model the assignment saga works with; both the SQL
stores and the in-memory test stores return them.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Dict, Optional
from ridehail_backend.app.models.enums import DriverStatus, BookingStatus


class DriverSnapshot(BaseModel):
    """Driver state relevant to assignment."""
    id: int
    status: DriverStatus
    is_available: bool
    vehicle_type: Optional[str] = None

    class Config:
        from_attributes = True


class BookingSnapshot(BaseModel):
    """Booking as seen by the assigned driver."""
    id: int
    status: BookingStatus
    driver_id: Optional[int] = None
    user_id: Optional[int] = None
    pickup_location: Optional[Dict[str, Any]] = None
    dropoff_location: Optional[Dict[str, Any]] = None
    vehicle_type: Optional[str] = None
    estimated_price: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AcceptJobRequest(BaseModel):
    """Schema for accepting a booking."""
    booking_id: int = Field(..., description="Booking to accept")


class AcceptedDriver(BaseModel):
    id: int
    status: DriverStatus
    is_available: bool


class AcceptJobResponse(BaseModel):
    """Response after a successful job acceptance."""
    message: str = "Job accepted"
    booking: BookingSnapshot
    driver: AcceptedDriver
