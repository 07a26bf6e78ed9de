"""
Shared test helpers.
"""

from ridehail_backend.app.core.jwt import create_driver_token


def auth_headers(driver) -> dict:
    token = create_driver_token(driver.id, driver.email)
    return {"Authorization": f"Bearer {token}"}


async def fetch(db_session, model, entity_id):
    """Read the committed row, bypassing the session identity map."""
    return await db_session.get(model, entity_id, populate_existing=True)
