"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from ridehail_backend.app.api.v1.endpoints import drivers

router = APIRouter()

# Driver auth, location and job assignment
router.include_router(drivers.router)
