from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from services.api.app.db.deps import get_db
from services.api.app.models.restaurant import (
    DishCreateRequest,
    DishOut,
    RestaurantCreateRequest,
    RestaurantDetailOut,
    RestaurantOut,
)
from services.api.app.routers.deps import require_admin
from services.api.app.services.catalog import (
    CatalogDishNotFoundError,
    CatalogError,
    DishInUseError,
    RestaurantNotFoundError,
    SlugTakenError,
    add_dish,
    create_restaurant,
    delete_dish,
    delete_restaurant,
)
from services.api.app.services.restaurant_base import (
    DishRecord,
    RestaurantRecord,
    RestaurantSourceError,
)
from services.api.app.services.restaurant_db import dish_record, restaurant_record
from services.api.app.services.restaurant_factory import get_restaurant_repository
from sqlalchemy.orm import Session

router = APIRouter()


def restaurant_out(r: RestaurantRecord) -> RestaurantOut:
    return RestaurantOut(
        id=r.slug,
        nombre=r.name,
        categoria=r.category,
        rating=r.rating,
        tiempo=r.prep_time,
        imagen=r.image_url,
    )


def dish_out(d: DishRecord) -> DishOut:
    return DishOut(
        id=d.id,
        nombre=d.name,
        descripcion=d.description,
        precio_centavos=d.price_cents,
        imagen=d.image_url,
    )


def _raise_catalog_http_error(e: Exception) -> None:
    if isinstance(e, (RestaurantNotFoundError, CatalogDishNotFoundError)):
        raise HTTPException(status_code=404, detail=str(e)) from e

    if isinstance(e, (SlugTakenError, DishInUseError)):
        raise HTTPException(status_code=409, detail=str(e)) from e

    if isinstance(e, RestaurantSourceError):
        raise HTTPException(status_code=503, detail="Catálogo no disponible") from e

    raise HTTPException(status_code=500, detail="Error interno del servidor") from e


@router.get("/api/restaurantes", response_model=list[RestaurantOut])
def list_restaurants(db: Session = Depends(get_db)) -> list[RestaurantOut]:
    try:
        repo = get_restaurant_repository(db)
    except ValueError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e

    try:
        return [restaurant_out(r) for r in repo.list_restaurants()]
    except RestaurantSourceError as e:
        _raise_catalog_http_error(e)


@router.get("/api/restaurantes/{slug}", response_model=RestaurantDetailOut)
def read_restaurant(slug: str, db: Session = Depends(get_db)) -> RestaurantDetailOut:
    try:
        repo = get_restaurant_repository(db)
    except ValueError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e

    try:
        restaurant = repo.get_restaurant(slug)
        if restaurant is None:
            raise HTTPException(status_code=404, detail="Restaurante no encontrado")
        dishes = repo.list_dishes(slug)
    except RestaurantSourceError as e:
        _raise_catalog_http_error(e)

    return RestaurantDetailOut(
        **restaurant_out(restaurant).model_dump(),
        platos=[dish_out(d) for d in dishes],
    )


@router.post("/api/restaurantes", status_code=201, response_model=RestaurantOut)
def add_restaurant(
    payload: RestaurantCreateRequest,
    db: Session = Depends(get_db),
    _admin: dict = Depends(require_admin),
) -> RestaurantOut:
    try:
        row = create_restaurant(
            db,
            slug=payload.slug,
            name=payload.nombre,
            category=payload.categoria,
            rating=payload.rating,
            prep_time=payload.tiempo,
            image_url=payload.imagen,
        )
    except CatalogError as e:
        _raise_catalog_http_error(e)

    return restaurant_out(restaurant_record(row))


@router.delete("/api/restaurantes/{slug}")
def remove_restaurant(
    slug: str, db: Session = Depends(get_db), _admin: dict = Depends(require_admin)
) -> dict:
    try:
        delete_restaurant(db, slug)
    except CatalogError as e:
        _raise_catalog_http_error(e)

    return {"success": True, "message": "Restaurante eliminado"}


@router.post("/api/restaurantes/{slug}/platos", status_code=201, response_model=DishOut)
def add_restaurant_dish(
    slug: str,
    payload: DishCreateRequest,
    db: Session = Depends(get_db),
    _admin: dict = Depends(require_admin),
) -> DishOut:
    try:
        dish = add_dish(
            db,
            slug,
            name=payload.nombre,
            price_cents=payload.precio_centavos,
            description=payload.descripcion,
            image_url=payload.imagen,
        )
    except CatalogError as e:
        _raise_catalog_http_error(e)

    return dish_out(dish_record(dish))


@router.delete("/api/platos/{dish_id}")
def remove_dish(
    dish_id: int, db: Session = Depends(get_db), _admin: dict = Depends(require_admin)
) -> dict:
    try:
        delete_dish(db, dish_id)
    except CatalogError as e:
        _raise_catalog_http_error(e)

    return {"success": True, "message": "Plato eliminado"}
