from __future__ import annotations

from pydantic import BaseModel, Field


class DishOut(BaseModel):
    id: int | None = None
    nombre: str
    descripcion: str | None = None
    precio_centavos: int
    imagen: str | None = None


class RestaurantOut(BaseModel):
    id: str
    nombre: str
    categoria: str | None = None
    rating: float | None = None
    tiempo: str | None = None
    imagen: str | None = None


class RestaurantDetailOut(RestaurantOut):
    platos: list[DishOut] = Field(default_factory=list)


class RestaurantCreateRequest(BaseModel):
    slug: str = Field(..., min_length=1, max_length=80, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    nombre: str = Field(..., min_length=1)
    categoria: str | None = None
    rating: float | None = Field(None, ge=0, le=5)
    tiempo: str | None = None
    imagen: str | None = None


class DishCreateRequest(BaseModel):
    nombre: str = Field(..., min_length=1)
    descripcion: str | None = None
    precio_centavos: int = Field(..., ge=0)
    imagen: str | None = None
