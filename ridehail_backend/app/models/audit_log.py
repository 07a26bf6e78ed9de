"""
Audit Log Database Model.

Tracks authentication events and job-assignment outcomes for security and
operational monitoring.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func
from ridehail_backend.app.db.session import Base


class AuditLog(Base):
    """
    Audit log model.

    Events logged:
    - DRIVER_REGISTERED
    - LOGIN_SUCCESS / LOGIN_FAILED
    - LOCATION_UPDATED
    - JOB_ACCEPTED / JOB_REJECTED
    - COMPENSATION_FAILED (driver stranded, needs release)
    """
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Who performed the action (None when the driver is unknown, e.g. bad login)
    actor_id = Column(Integer, index=True, nullable=True)
    actor_email = Column(String(255), nullable=True)

    action = Column(String(100), nullable=False, index=True)

    # Booking involved in job-assignment events
    booking_id = Column(Integer, index=True, nullable=True)

    meta_data = Column(JSON, nullable=True)
    ip_address = Column(String(50), nullable=True)

    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}', actor={self.actor_email}, booking={self.booking_id})>"
