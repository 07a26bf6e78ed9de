"""
Database seeding script for local development.

Creates a rider, two drivers and a few pending bookings so the driver
endpoints can be exercised by hand.
Run this script after the database is reachable.
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from ridehail_backend.app.db.session import AsyncSessionLocal, init_models
from ridehail_backend.app.models.booking import Booking
from ridehail_backend.app.models.driver import Driver
from ridehail_backend.app.models.rider import Rider
from ridehail_backend.app.models.enums import BookingStatus, DriverStatus
from ridehail_backend.app.core.security import get_password_hash
from sqlalchemy import select


async def seed_data():
    """
    Seed sample data.

    Creates:
    - 1 rider
    - 2 drivers (car, bike), both idle and available
    - 3 pending bookings
    """
    await init_models()

    async with AsyncSessionLocal() as db:
        print("🌱 Starting seeding...")

        result = await db.execute(select(Rider).where(Rider.email == "rider@ridehail.dev"))
        if result.scalar_one_or_none():
            print("ℹ️  Sample data already exists, skipping seeding")
            return

        rider = Rider(name="Sample Rider", email="rider@ridehail.dev")
        db.add(rider)

        for email, vehicle_type, coordinates in [
            ("car.driver@ridehail.dev", "car", [77.5946, 12.9716]),
            ("bike.driver@ridehail.dev", "bike", [77.6101, 12.9352]),
        ]:
            db.add(Driver(
                name=email.split("@")[0],
                email=email,
                hashed_password=get_password_hash("driver123"),
                vehicle_type=vehicle_type,
                is_available=True,
                status=DriverStatus.IDLE,
                location={"type": "Point", "coordinates": coordinates}
            ))
        await db.flush()

        for vehicle_type, price in [("car", 240.0), ("car", 180.0), ("bike", 60.0)]:
            db.add(Booking(
                user_id=rider.id,
                status=BookingStatus.PENDING,
                pickup_location={"type": "Point", "coordinates": [77.5946, 12.9716]},
                dropoff_location={"type": "Point", "coordinates": [77.6412, 12.9784]},
                vehicle_type=vehicle_type,
                estimated_price=price
            ))

        await db.commit()

        print("\n🎉 Seeding completed successfully!")
        print("  - Drivers: car.driver@ridehail.dev / bike.driver@ridehail.dev (password: driver123)")
        print("  - 3 pending bookings (2 car, 1 bike)")


if __name__ == "__main__":
    asyncio.run(seed_data())
