"""
Booking listing schemas.
"""

from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from datetime import datetime


class PendingBookingItem(BaseModel):
    """A pending booking a driver can accept, with the requesting rider."""
    id: int
    user_name: str
    user_email: str
    pickup_location: Dict[str, Any]
    dropoff_location: Dict[str, Any]
    vehicle_type: str
    estimated_price: Optional[float]
    created_at: datetime


class PendingBookingListResponse(BaseModel):
    success: bool = True
    count: int
    data: List[PendingBookingItem]
