"""
Audit logging service for driver authentication and job assignment.

Provides centralized persistence of security and operational events.
"""

from typing import Optional, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from ridehail_backend.app.models.audit_log import AuditLog


class AuditAction:
    """Standardized audit action constants."""
    DRIVER_REGISTERED = "DRIVER_REGISTERED"
    LOGIN_SUCCESS = "LOGIN_SUCCESS"
    LOGIN_FAILED = "LOGIN_FAILED"
    LOCATION_UPDATED = "LOCATION_UPDATED"

    # Job assignment
    JOB_ACCEPTED = "JOB_ACCEPTED"
    JOB_REJECTED = "JOB_REJECTED"
    COMPENSATION_FAILED = "COMPENSATION_FAILED"


async def log_event(
    db: AsyncSession,
    action: str,
    actor_id: Optional[int] = None,
    actor_email: Optional[str] = None,
    booking_id: Optional[int] = None,
    metadata: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None
) -> AuditLog:
    """
    Persist an event to the audit log.

    Args:
        db: Database session
        action: Action being recorded (use AuditAction constants)
        actor_id: ID of the driver performing the action
        actor_email: Email of the driver
        booking_id: Booking involved, for job-assignment events
        metadata: Additional context as JSON
        ip_address: IP address of the request

    Returns:
        Created AuditLog instance
    """
    audit_log = AuditLog(
        actor_id=actor_id,
        actor_email=actor_email,
        action=action,
        booking_id=booking_id,
        meta_data=metadata,
        ip_address=ip_address
    )

    db.add(audit_log)
    await db.commit()
    await db.refresh(audit_log)

    return audit_log


async def log_auth_event(
    db: AsyncSession,
    action: str,
    driver_id: Optional[int],
    email: Optional[str],
    ip_address: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None
) -> AuditLog:
    """Log a registration or login attempt."""
    return await log_event(
        db=db,
        action=action,
        actor_id=driver_id,
        actor_email=email,
        ip_address=ip_address,
        metadata=metadata
    )


async def get_audit_trail(
    db: AsyncSession,
    action: Optional[str] = None,
    actor_id: Optional[int] = None,
    limit: int = 100
) -> list[AuditLog]:
    """
    Retrieve audit entries, most recent first.

    Args:
        db: Database session
        action: Filter by action type
        actor_id: Filter by acting driver
        limit: Maximum number of records to return
    """
    query = select(AuditLog).order_by(desc(AuditLog.timestamp), desc(AuditLog.id))

    if action:
        query = query.where(AuditLog.action == action)

    if actor_id:
        query = query.where(AuditLog.actor_id == actor_id)

    result = await db.execute(query.limit(limit))
    return list(result.scalars().all())
