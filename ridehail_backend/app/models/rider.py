"""
Rider database model.

Riders are created by the passenger-facing service; this backend only
reads them to describe who requested a booking.
"""

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from ridehail_backend.app.db.session import Base


class Rider(Base):
    __tablename__ = "riders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Rider(id={self.id}, email='{self.email}')>"
