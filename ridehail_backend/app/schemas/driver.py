"""
Driver Pydantic schemas.

Request and response schemas for registration, login and location updates.
"""

from pydantic import BaseModel, EmailStr, Field, conlist, model_validator
from typing import List, Optional
from ridehail_backend.app.models.enums import DriverStatus


class DriverRegister(BaseModel):
    """
    Schema for driver registration.

    Used by POST /drivers/register. Location is [lng, lat]; when omitted the
    configured default coordinates are stored.
    """
    name: str = Field(..., min_length=1, max_length=100, description="Display name")
    email: EmailStr = Field(..., description="Driver email address")
    password: str = Field(..., min_length=6, description="Password (min 6 characters)")
    vehicle_type: str = Field(..., min_length=1, max_length=50, description="Vehicle category, e.g. car, bike")
    is_available: Optional[bool] = Field(default=None, description="Defaults to true")
    status: Optional[DriverStatus] = Field(default=None, description="Defaults to idle; en-route is not allowed")
    location: Optional[conlist(float, min_length=2, max_length=2)] = Field(default=None, description="[lng, lat]")

    @model_validator(mode="after")
    def check_not_en_route(self):
        # A new driver holds no booking, and en-route is only reached by accepting one
        if self.status == DriverStatus.EN_ROUTE:
            raise ValueError("A newly registered driver cannot be en-route")
        return self


class DriverLogin(BaseModel):
    """Schema for driver login."""
    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., description="Password")


class TokenResponse(BaseModel):
    """
    Schema for JWT token response.

    Returned by successful register/login operations.
    """
    message: str
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    driver_id: int = Field(..., description="Driver ID")
    email: str = Field(..., description="Email address")


class LocationUpdate(BaseModel):
    """Schema for a driver location update."""
    coordinates: List[float] = Field(..., min_length=2, max_length=2, description="[lng, lat]")


class LocationUpdateResponse(BaseModel):
    message: str = "Location updated successfully"
    driver_id: int
    location: dict
