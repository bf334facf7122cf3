from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from services.api.app.services.restaurant_base import (
    DishRecord,
    RestaurantDataFileError,
    RestaurantRecord,
    RestaurantRepository,
)

logger = logging.getLogger(__name__)

DEFAULT_DATA_PATH = Path(__file__).resolve().parents[1] / "data" / "restaurantes.json"

# path -> (mtime, entries); a newer mtime on disk triggers a reload.
_CACHE: dict[str, tuple[float, list[dict]]] = {}


def default_data_path() -> Path:
    raw = os.getenv("PEDIDOS_RESTAURANTS_JSON", "").strip()
    return Path(raw) if raw else DEFAULT_DATA_PATH


def load_restaurant_file(path: Path) -> list[dict]:
    """Read and shape-check the static restaurant file.

    Expected format: a list of objects with ``id`` (the slug), ``nombre`` and an optional
    ``platos`` list whose entries carry ``nombre`` and ``precio`` (whole currency units).
    """

    try:
        mtime = path.stat().st_mtime
    except OSError as e:
        raise RestaurantDataFileError(str(path), str(e)) from e

    key = str(path)
    cached = _CACHE.get(key)
    if cached is not None and cached[0] == mtime:
        return cached[1]

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise RestaurantDataFileError(str(path), str(e)) from e

    if not isinstance(data, list):
        raise RestaurantDataFileError(str(path), "top-level value must be a list")

    entries = [r for r in data if isinstance(r, dict) and r.get("id") and r.get("nombre")]
    _CACHE[key] = (mtime, entries)
    logger.info("loaded %d restaurants from %s", len(entries), path)
    return entries


def _price_cents(raw: object) -> int:
    try:
        return int(round(float(raw) * 100))
    except (TypeError, ValueError):
        return 0


def _restaurant(entry: dict) -> RestaurantRecord:
    rating = entry.get("rating")
    return RestaurantRecord(
        slug=str(entry["id"]),
        name=str(entry["nombre"]),
        category=entry.get("categoria"),
        rating=float(rating) if isinstance(rating, (int, float)) else None,
        prep_time=entry.get("tiempo"),
        image_url=entry.get("imagen"),
    )


def _dish(entry: dict) -> DishRecord:
    return DishRecord(
        name=str(entry.get("nombre") or ""),
        description=entry.get("descripcion"),
        price_cents=_price_cents(entry.get("precio")),
        image_url=entry.get("imagen"),
    )


class JsonRestaurantRepository(RestaurantRepository):
    source = "json"

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or default_data_path()

    def _entries(self) -> list[dict]:
        return load_restaurant_file(self.path)

    def _find(self, slug: str) -> dict | None:
        return next((r for r in self._entries() if str(r["id"]) == slug), None)

    def list_restaurants(self) -> list[RestaurantRecord]:
        return [_restaurant(r) for r in self._entries()]

    def get_restaurant(self, slug: str) -> RestaurantRecord | None:
        entry = self._find(slug)
        return _restaurant(entry) if entry else None

    def list_dishes(self, slug: str) -> list[DishRecord]:
        entry = self._find(slug)
        if entry is None:
            return []
        platos = entry.get("platos") or []
        return [_dish(p) for p in platos if isinstance(p, dict) and p.get("nombre")]
