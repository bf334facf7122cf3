from __future__ import annotations

import os

from services.api.app.services.restaurant_base import RestaurantRepository
from services.api.app.services.restaurant_db import DbRestaurantRepository
from sqlalchemy.orm import Session


def get_restaurant_repository(db: Session) -> RestaurantRepository:
    """Select the restaurant read source based on env vars.

    Defaults to the database. ``json`` serves the bundled static file instead, for demos
    without a seeded database.
    """

    source = os.getenv("PEDIDOS_RESTAURANT_SOURCE", "db").strip().lower()

    if source in ("db", "database"):
        return DbRestaurantRepository(db)

    if source in ("json", "file"):
        from services.api.app.services.restaurant_json import JsonRestaurantRepository

        return JsonRestaurantRepository()

    raise ValueError(f"Unknown PEDIDOS_RESTAURANT_SOURCE={source!r}. Expected db or json.")
