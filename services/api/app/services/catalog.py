from __future__ import annotations

import logging

from services.api.app.db.models import Dish, Order, OrderLine, Restaurant
from services.api.app.services.restaurant_base import RestaurantRepository
from sqlalchemy import select, update
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Base class for restaurant/dish management errors."""


class RestaurantNotFoundError(CatalogError):
    def __init__(self, slug: str) -> None:
        super().__init__("Restaurante no encontrado")
        self.slug = slug


class SlugTakenError(CatalogError):
    def __init__(self, slug: str) -> None:
        super().__init__(f"Ya existe un restaurante con el identificador {slug!r}")
        self.slug = slug


class CatalogDishNotFoundError(CatalogError):
    def __init__(self, dish_id: int) -> None:
        super().__init__("Plato no encontrado")
        self.dish_id = dish_id


class DishInUseError(CatalogError):
    def __init__(self, dish_id: int) -> None:
        super().__init__("El plato tiene pedidos asociados")
        self.dish_id = dish_id


def get_restaurant_row(db: Session, slug: str) -> Restaurant:
    row = db.scalars(select(Restaurant).where(Restaurant.slug == slug)).first()
    if row is None:
        raise RestaurantNotFoundError(slug)
    return row


def create_restaurant(
    db: Session,
    *,
    slug: str,
    name: str,
    category: str | None = None,
    rating: float | None = None,
    prep_time: str | None = None,
    image_url: str | None = None,
) -> Restaurant:
    if db.scalars(select(Restaurant).where(Restaurant.slug == slug)).first() is not None:
        raise SlugTakenError(slug)

    row = Restaurant(
        slug=slug,
        name=name,
        category=category,
        rating=rating,
        prep_time=prep_time,
        image_url=image_url,
    )
    db.add(row)
    db.commit()
    db.refresh(row)

    logger.info("restaurant %s created", slug)
    return row


def _dish_in_use(db: Session, dish_ids: list[int]) -> int | None:
    if not dish_ids:
        return None
    return db.scalars(
        select(OrderLine.dish_id).where(OrderLine.dish_id.in_(dish_ids)).limit(1)
    ).first()


def delete_restaurant(db: Session, slug: str) -> None:
    """Delete a restaurant and its dishes. Orders keep their slug; their restaurant id is
    cleared. Refused while any order line still points at one of its dishes."""

    row = get_restaurant_row(db, slug)

    used = _dish_in_use(db, [d.id for d in row.dishes])
    if used is not None:
        raise DishInUseError(used)

    db.execute(update(Order).where(Order.restaurant_id == row.id).values(restaurant_id=None))
    db.delete(row)
    db.commit()

    logger.info("restaurant %s deleted", slug)


def add_dish(
    db: Session,
    slug: str,
    *,
    name: str,
    price_cents: int,
    description: str | None = None,
    image_url: str | None = None,
) -> Dish:
    restaurant = get_restaurant_row(db, slug)

    dish = Dish(
        restaurant_id=restaurant.id,
        name=name,
        description=description,
        price_cents=price_cents,
        image_url=image_url,
    )
    db.add(dish)
    db.commit()
    db.refresh(dish)

    logger.info("dish %s added to %s", dish.id, slug)
    return dish


def delete_dish(db: Session, dish_id: int) -> None:
    dish = db.get(Dish, dish_id)
    if dish is None:
        raise CatalogDishNotFoundError(dish_id)
    if _dish_in_use(db, [dish_id]) is not None:
        raise DishInUseError(dish_id)

    db.delete(dish)
    db.commit()

    logger.info("dish %s deleted", dish_id)


def import_catalog(db: Session, repo: RestaurantRepository) -> tuple[int, int]:
    """Copy restaurants and dishes from another source into the database.

    Restaurants whose slug already exists are left untouched. Returns the number of
    restaurants and dishes inserted.
    """

    restaurants = 0
    dishes = 0
    for record in repo.list_restaurants():
        exists = db.scalars(select(Restaurant.id).where(Restaurant.slug == record.slug)).first()
        if exists is not None:
            continue

        row = Restaurant(
            slug=record.slug,
            name=record.name,
            category=record.category,
            rating=record.rating,
            prep_time=record.prep_time,
            image_url=record.image_url,
        )
        for dish in repo.list_dishes(record.slug):
            row.dishes.append(
                Dish(
                    name=dish.name,
                    description=dish.description,
                    price_cents=dish.price_cents,
                    image_url=dish.image_url,
                )
            )
            dishes += 1
        db.add(row)
        restaurants += 1

    db.commit()
    logger.info("imported %d restaurants and %d dishes", restaurants, dishes)
    return restaurants, dishes
