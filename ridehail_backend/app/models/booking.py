"""
Booking database model.

Bookings are created by the booking flow in PENDING status with no driver.
Job acceptance moves them to ACCEPTED and records the driver.
"""

from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, Enum, JSON
from sqlalchemy.sql import func
from ridehail_backend.app.db.session import Base
from ridehail_backend.app.models.enums import BookingStatus


class Booking(Base):
    """
    Booking model.

    Invariant: driver_id is set if and only if status is ACCEPTED or later.
    """
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Requesting rider
    user_id = Column(Integer, ForeignKey('riders.id'), nullable=False, index=True)

    # Assigned driver (set on acceptance only)
    driver_id = Column(Integer, ForeignKey('drivers.id'), nullable=True, index=True)

    status = Column(Enum(BookingStatus), default=BookingStatus.PENDING, nullable=False, index=True)

    # Trip details
    pickup_location = Column(JSON, nullable=False)
    dropoff_location = Column(JSON, nullable=False)
    vehicle_type = Column(String(50), nullable=False, index=True)
    estimated_price = Column(Float, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Booking(id={self.id}, status='{self.status.value}', driver_id={self.driver_id})>"
