from __future__ import annotations

import json
import os
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from services.api.app.services import restaurant_json
from services.api.app.services.restaurant_base import RestaurantDataFileError
from services.api.app.services.restaurant_json import JsonRestaurantRepository


@pytest.fixture()
def client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    db_path = tmp_path / "pedidos_restaurants.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_path}")
    monkeypatch.setenv("PEDIDOS_DB_AUTO_CREATE", "true")
    monkeypatch.setenv("PEDIDOS_RESTAURANT_SOURCE", "db")

    from services.api.app.db.database import db_session
    from services.api.app.main import app
    from services.api.app.services.auth import register_user
    from services.api.app.services.catalog import import_catalog

    with TestClient(app) as c:
        db = db_session()
        try:
            import_catalog(db, JsonRestaurantRepository())
            register_user(
                db, name="Admin", email="admin@pedidoshn.com", password="secreto123", is_admin=True
            )
        finally:
            db.close()
        yield c


def test_json_repository_reads_bundled_file() -> None:
    repo = JsonRestaurantRepository()

    slugs = [r.slug for r in repo.list_restaurants()]
    assert "carnitas-del-anillo" in slugs

    restaurant = repo.get_restaurant("carnitas-del-anillo")
    assert restaurant is not None
    assert restaurant.name == "Carnitas Del Anillo"
    assert restaurant.rating == 4.6

    dishes = repo.list_dishes("carnitas-del-anillo")
    assert dishes[0].name == "Carne de Cerdo con Pollo"
    assert dishes[0].price_cents == 17800

    assert repo.get_restaurant("no-existe") is None
    assert repo.list_dishes("no-existe") == []


def test_json_repository_rejects_bad_file(tmp_path: Path) -> None:
    bad = tmp_path / "restaurantes.json"
    bad.write_text(json.dumps({"id": "no-es-lista"}), encoding="utf-8")

    with pytest.raises(RestaurantDataFileError):
        JsonRestaurantRepository(bad).list_restaurants()

    with pytest.raises(RestaurantDataFileError):
        JsonRestaurantRepository(tmp_path / "missing.json").list_restaurants()


def test_json_repository_reloads_edited_file(tmp_path: Path) -> None:
    path = tmp_path / "restaurantes.json"
    path.write_text(json.dumps([{"id": "uno", "nombre": "Uno"}]), encoding="utf-8")
    os.utime(path, (1_000_000, 1_000_000))
    assert [r.slug for r in JsonRestaurantRepository(path).list_restaurants()] == ["uno"]

    path.write_text(json.dumps([{"id": "dos", "nombre": "Dos"}]), encoding="utf-8")
    os.utime(path, (2_000_000, 2_000_000))
    assert [r.slug for r in JsonRestaurantRepository(path).list_restaurants()] == ["dos"]

    assert restaurant_json._CACHE[str(path)][0] == 2_000_000


def test_repository_factory(monkeypatch: pytest.MonkeyPatch) -> None:
    from services.api.app.services.restaurant_db import DbRestaurantRepository
    from services.api.app.services.restaurant_factory import get_restaurant_repository

    monkeypatch.setenv("PEDIDOS_RESTAURANT_SOURCE", "json")
    assert isinstance(get_restaurant_repository(None), JsonRestaurantRepository)

    monkeypatch.setenv("PEDIDOS_RESTAURANT_SOURCE", "db")
    assert isinstance(get_restaurant_repository(None), DbRestaurantRepository)

    monkeypatch.setenv("PEDIDOS_RESTAURANT_SOURCE", "redis")
    with pytest.raises(ValueError):
        get_restaurant_repository(None)


def test_list_and_read_restaurants(client: TestClient) -> None:
    listed = client.get("/api/restaurantes")
    assert listed.status_code == 200
    assert {r["id"] for r in listed.json()} == {
        "carnitas-del-anillo",
        "baleadas-la-ceibena",
        "pupuseria-el-comal",
    }

    detail = client.get("/api/restaurantes/baleadas-la-ceibena").json()
    assert detail["nombre"] == "Baleadas La Ceibeña"
    assert [p["precio_centavos"] for p in detail["platos"]] == [2500, 4500]
    assert all(p["id"] for p in detail["platos"])

    missing = client.get("/api/restaurantes/no-existe")
    assert missing.status_code == 404
    assert missing.json() == {"success": False, "error": "Restaurante no encontrado"}


def test_json_source_serves_without_database_rows(
    client: TestClient, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    data = tmp_path / "solo.json"
    entry = {"id": "solo-json", "nombre": "Solo JSON", "platos": [{"nombre": "Taco", "precio": 20}]}
    data.write_text(
        json.dumps([entry]),
        encoding="utf-8",
    )
    monkeypatch.setenv("PEDIDOS_RESTAURANT_SOURCE", "json")
    monkeypatch.setenv("PEDIDOS_RESTAURANTS_JSON", str(data))

    assert [r["id"] for r in client.get("/api/restaurantes").json()] == ["solo-json"]
    detail = client.get("/api/restaurantes/solo-json").json()
    assert detail["platos"] == [
        {"id": None, "nombre": "Taco", "descripcion": None, "precio_centavos": 2000, "imagen": None}
    ]


def test_pages_render_restaurants(client: TestClient) -> None:
    home = client.get("/")
    assert home.status_code == 200
    assert "Carnitas Del Anillo" in home.text

    page = client.get("/restaurantes/carnitas-del-anillo")
    assert page.status_code == 200
    assert "Carne de Cerdo con Chuleta" in page.text
    assert "L 175.00" in page.text

    missing = client.get("/restaurantes/no-existe")
    assert missing.status_code == 404
    assert "Restaurante no encontrado" in missing.text


def test_admin_manages_catalog(client: TestClient) -> None:
    payload = {"slug": "sopas-dona-tere", "nombre": "Sopas Doña Tere", "categoria": "Típica"}

    assert client.post("/api/restaurantes", json=payload).status_code == 403

    client.post("/api/login", json={"email": "admin@pedidoshn.com", "password": "secreto123"})

    created = client.post("/api/restaurantes", json=payload)
    assert created.status_code == 201
    assert created.json()["id"] == "sopas-dona-tere"

    assert client.post("/api/restaurantes", json=payload).status_code == 409

    dish = client.post(
        "/api/restaurantes/sopas-dona-tere/platos",
        json={"nombre": "Sopa de Caracol", "precio_centavos": 15000},
    )
    assert dish.status_code == 201
    dish_id = dish.json()["id"]

    detail = client.get("/api/restaurantes/sopas-dona-tere").json()
    assert [p["nombre"] for p in detail["platos"]] == ["Sopa de Caracol"]

    assert client.delete(f"/api/platos/{dish_id}").status_code == 200
    assert client.delete(f"/api/platos/{dish_id}").status_code == 404
    assert client.delete("/api/restaurantes/sopas-dona-tere").status_code == 200
    assert client.get("/api/restaurantes/sopas-dona-tere").status_code == 404


def test_dish_in_an_order_cannot_be_deleted(client: TestClient) -> None:
    from datetime import date

    order = client.post(
        "/api/ordenes",
        json={
            "nombre": "Ana María",
            "direccion": "Col. Palmira",
            "telefono": "50499887766",
            "restauranteId": "pupuseria-el-comal",
            "pedido": "Pupusa Revuelta",
            "scheduleDate": date.today().isoformat(),
            "scheduleSlot": "Inmediato",
        },
    )
    assert order.status_code == 201

    client.post("/api/login", json={"email": "admin@pedidoshn.com", "password": "secreto123"})
    dish_id = client.get("/api/restaurantes/pupuseria-el-comal").json()["platos"][0]["id"]

    assert client.delete(f"/api/platos/{dish_id}").status_code == 409
    assert client.delete("/api/restaurantes/pupuseria-el-comal").status_code == 409
