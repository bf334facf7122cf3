from __future__ import annotations

from services.api.app.db.models import Dish, Restaurant
from services.api.app.services.restaurant_base import (
    DishRecord,
    RestaurantRecord,
    RestaurantRepository,
)
from sqlalchemy import select
from sqlalchemy.orm import Session


def restaurant_record(row: Restaurant) -> RestaurantRecord:
    return RestaurantRecord(
        id=row.id,
        slug=row.slug,
        name=row.name,
        category=row.category,
        rating=row.rating,
        prep_time=row.prep_time,
        image_url=row.image_url,
    )


def dish_record(row: Dish) -> DishRecord:
    return DishRecord(
        id=row.id,
        name=row.name,
        description=row.description,
        price_cents=row.price_cents,
        image_url=row.image_url,
    )


class DbRestaurantRepository(RestaurantRepository):
    source = "db"

    def __init__(self, db: Session) -> None:
        self._db = db

    def list_restaurants(self) -> list[RestaurantRecord]:
        rows = self._db.scalars(select(Restaurant).order_by(Restaurant.name)).all()
        return [restaurant_record(r) for r in rows]

    def get_restaurant(self, slug: str) -> RestaurantRecord | None:
        row = self._db.scalars(select(Restaurant).where(Restaurant.slug == slug)).first()
        return restaurant_record(row) if row else None

    def list_dishes(self, slug: str) -> list[DishRecord]:
        rows = self._db.scalars(
            select(Dish)
            .join(Restaurant, Restaurant.id == Dish.restaurant_id)
            .where(Restaurant.slug == slug)
            .order_by(Dish.id)
        ).all()
        return [dish_record(d) for d in rows]
