"""
Driver database model.
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum, JSON
from sqlalchemy.sql import func
from ridehail_backend.app.db.session import Base
from ridehail_backend.app.models.enums import DriverStatus


class Driver(Base):
    """
    Driver model.

    `is_available` and `status` move together during job acceptance:
    a driver that is EN_ROUTE is never available.
    """
    __tablename__ = "drivers"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    vehicle_type = Column(String(50), nullable=False, index=True)

    # Assignment state
    is_available = Column(Boolean, default=True, nullable=False, index=True)
    status = Column(Enum(DriverStatus), default=DriverStatus.IDLE, nullable=False)

    # GeoJSON point: {"type": "Point", "coordinates": [lng, lat]}
    location = Column(JSON, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Driver(id={self.id}, email='{self.email}', status='{self.status.value}', available={self.is_available})>"
