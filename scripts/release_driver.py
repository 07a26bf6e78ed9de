"""
Release drivers stranded by a failed job-assignment rollback.

When the release write fails during accept-job, the driver stays en-route
and unavailable with no booking, and a COMPENSATION_FAILED audit entry is
written. This script re-runs the (idempotent) release.

Usage:
    python scripts/release_driver.py 12 15        # release the given drivers
    python scripts/release_driver.py --from-audit  # release drivers named in COMPENSATION_FAILED entries
    python scripts/release_driver.py --from-audit --dry-run
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select, func

from ridehail_backend.app.core.config import settings
from ridehail_backend.app.core.observability import configure_logging
from ridehail_backend.app.db.session import AsyncSessionLocal
from ridehail_backend.app.models.booking import Booking
from ridehail_backend.app.models.driver import Driver
from ridehail_backend.app.models.enums import BookingStatus, DriverStatus
from ridehail_backend.app.repositories.sql import SqlBookingStore, SqlDriverStore
from ridehail_backend.app.services.assignment_saga import BookingAssignmentSaga
from ridehail_backend.app.services.audit import AuditAction, get_audit_trail

logger = logging.getLogger("ridehail.ops")


async def is_stranded(db, driver_id: int) -> bool:
    """Reserved (en-route, unavailable) but holding no accepted booking."""
    driver = await db.get(Driver, driver_id, populate_existing=True)
    if driver is None or driver.is_available or driver.status != DriverStatus.EN_ROUTE:
        return False

    result = await db.execute(
        select(func.count(Booking.id)).where(
            Booking.driver_id == driver_id,
            Booking.status == BookingStatus.ACCEPTED
        )
    )
    return result.scalar() == 0


async def release_drivers(session_factory, driver_ids, from_audit: bool, dry_run: bool) -> int:
    async with session_factory() as db:
        candidates = list(driver_ids)
        if from_audit:
            entries = await get_audit_trail(db, action=AuditAction.COMPENSATION_FAILED, limit=1000)
            candidates.extend(entry.actor_id for entry in entries if entry.actor_id)

        saga = BookingAssignmentSaga(SqlDriverStore(db), SqlBookingStore(db))
        released = 0

        for driver_id in sorted(set(candidates)):
            if not await is_stranded(db, driver_id):
                logger.info("Driver %s is not stranded, skipping", driver_id)
                continue
            if dry_run:
                print(f"Would release driver {driver_id}")
                continue
            await saga.release_driver(driver_id)
            released += 1
            print(f"✅ Released driver {driver_id}")

        return released


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("driver_ids", nargs="*", type=int, help="Driver IDs to release")
    parser.add_argument("--from-audit", action="store_true", help="Include drivers from COMPENSATION_FAILED audit entries")
    parser.add_argument("--dry-run", action="store_true", help="Only report what would be released")
    args = parser.parse_args()

    if not args.driver_ids and not args.from_audit:
        parser.error("give driver IDs or --from-audit")

    configure_logging(settings.log_level)
    released = asyncio.run(release_drivers(AsyncSessionLocal, args.driver_ids, args.from_audit, args.dry_run))
    print(f"Released {released} driver(s)")


if __name__ == "__main__":
    main()
