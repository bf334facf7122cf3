from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


class RestaurantSourceError(Exception):
    """Base class for restaurant repository errors."""


class RestaurantDataFileError(RestaurantSourceError):
    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Could not load restaurant data from {path}: {reason}")
        self.path = path


@dataclass(frozen=True, slots=True)
class DishRecord:
    name: str
    price_cents: int
    description: str | None = None
    image_url: str | None = None
    # None when the dish only exists in the static file.
    id: int | None = None


@dataclass(frozen=True, slots=True)
class RestaurantRecord:
    slug: str
    name: str
    category: str | None = None
    rating: float | None = None
    prep_time: str | None = None
    image_url: str | None = None
    id: int | None = None


class RestaurantRepository(Protocol):
    source: str

    def list_restaurants(self) -> list[RestaurantRecord]: ...

    def get_restaurant(self, slug: str) -> RestaurantRecord | None: ...

    def list_dishes(self, slug: str) -> list[DishRecord]: ...
