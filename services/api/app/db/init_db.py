from __future__ import annotations

import logging
import os

from services.api.app.db.database import db_session, get_engine
from services.api.app.db.models import Base, Restaurant
from sqlalchemy import select

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "y"}


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


def init_db() -> None:
    if not _flag("PEDIDOS_DB_AUTO_CREATE", "true"):
        return

    engine = get_engine()
    Base.metadata.create_all(bind=engine)

    if _flag("PEDIDOS_SEED_ON_START", "false"):
        seed_catalog_if_empty()


def seed_catalog_if_empty() -> None:
    """Load the static restaurant file into an empty catalog."""
    from services.api.app.services.catalog import import_catalog
    from services.api.app.services.restaurant_json import JsonRestaurantRepository

    db = db_session()
    try:
        if db.scalars(select(Restaurant.id).limit(1)).first() is not None:
            return
        restaurants, dishes = import_catalog(db, JsonRestaurantRepository())
        logger.info("seeded empty catalog with %d restaurants, %d dishes", restaurants, dishes)
    finally:
        db.close()
