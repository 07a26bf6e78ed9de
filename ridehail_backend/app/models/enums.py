"""
Driver and booking enumerations.

Values are the wire format shared with the mobile clients and the
booking-creation service.
"""

import enum


class DriverStatus(str, enum.Enum):
    """
    Driver operational state.

    EN_ROUTE always goes together with is_available=False.
    """
    IDLE = "idle"
    EN_ROUTE = "en-route"
    OFFLINE = "offline"


class BookingStatus(str, enum.Enum):
    """Booking lifecycle. A driver is attached from ACCEPTED onwards."""
    PENDING = "pending"  # Created by the booking flow, unassigned
    ACCEPTED = "accepted"  # Claimed by a driver
    COMPLETED = "completed"
    CANCELLED = "cancelled"
