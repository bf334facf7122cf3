from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest
from fastapi.testclient import TestClient


@pytest.fixture()
def app(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    db_path = tmp_path / "pedidos_lifecycle.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_path}")
    monkeypatch.setenv("PEDIDOS_DB_AUTO_CREATE", "true")
    monkeypatch.setenv("PEDIDOS_RESTAURANT_SOURCE", "db")

    from services.api.app.db.database import db_session
    from services.api.app.main import app
    from services.api.app.services.auth import register_user
    from services.api.app.services.catalog import import_catalog
    from services.api.app.services.restaurant_json import JsonRestaurantRepository

    with TestClient(app):
        db = db_session()
        try:
            import_catalog(db, JsonRestaurantRepository())
            for name, email, admin in (
                ("Ana", "ana@correo.com", False),
                ("Beto", "beto@correo.com", False),
                ("Admin", "admin@pedidoshn.com", True),
            ):
                register_user(db, name=name, email=email, password="secreto123", is_admin=admin)
        finally:
            db.close()
        yield app


def _login(app, email: str) -> TestClient:
    c = TestClient(app)
    resp = c.post("/api/login", json={"email": email, "password": "secreto123"})
    assert resp.status_code == 200
    return c


def _dish_id(name: str) -> int:
    from services.api.app.db.database import db_session
    from services.api.app.db.models import Dish
    from sqlalchemy import select

    db = db_session()
    try:
        return db.scalars(select(Dish.id).where(Dish.name == name)).one()
    finally:
        db.close()


def _place_order(c: TestClient) -> int:
    resp = c.post(
        "/api/ordenes",
        json={
            "nombre": "Ana María",
            "direccion": "Col. Palmira",
            "telefono": "50499887766",
            "restauranteId": "carnitas-del-anillo",
            "pedido": "Carne de Cerdo con Pollo",
            "scheduleDate": date.today().isoformat(),
            "scheduleSlot": "Inmediato",
        },
    )
    assert resp.status_code == 201
    return resp.json()["orderId"]


def test_draft_order_add_and_remove_lines(app) -> None:
    ana = _login(app, "ana@correo.com")
    order_id = _place_order(ana)

    order = ana.get(f"/api/ordenes/{order_id}").json()["data"]
    assert order["estado"] == "draft"
    assert order["total_centavos"] == 17800
    assert len(order["lineas"]) == 1

    chorizo = _dish_id("Carne de Cerdo Doble con Chorizo")
    added = ana.post(f"/api/ordenes/{order_id}/lineas", json={"plato_id": chorizo, "cantidad": 2})
    assert added.status_code == 201
    data = added.json()["data"]
    assert data["total_centavos"] == 17800 + 2 * 19000

    # Adding the same dish again bumps the existing line.
    again = ana.post(f"/api/ordenes/{order_id}/lineas", json={"plato_id": chorizo, "cantidad": 1})
    lines = again.json()["data"]["lineas"]
    assert len(lines) == 2
    assert next(ln for ln in lines if ln["plato_id"] == chorizo)["cantidad"] == 3

    first_line = lines[0]["id"]
    removed = ana.delete(f"/api/ordenes/{order_id}/lineas/{first_line}")
    assert removed.status_code == 200
    assert removed.json()["data"]["total_centavos"] == 3 * 19000


def test_add_line_unknown_dish_is_404(app) -> None:
    ana = _login(app, "ana@correo.com")
    order_id = _place_order(ana)

    resp = ana.post(f"/api/ordenes/{order_id}/lineas", json={"plato_id": 9999})
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Plato no encontrado"}


def test_confirm_blocks_line_changes(app) -> None:
    ana = _login(app, "ana@correo.com")
    order_id = _place_order(ana)

    confirmed = ana.post(f"/api/ordenes/{order_id}/confirmar")
    assert confirmed.status_code == 200
    data = confirmed.json()["data"]
    assert data["estado"] == "confirmed"

    baleada = _dish_id("Baleada Sencilla")
    add = ana.post(f"/api/ordenes/{order_id}/lineas", json={"plato_id": baleada})
    assert add.status_code == 409

    remove = ana.delete(f"/api/ordenes/{order_id}/lineas/{data['lineas'][0]['id']}")
    assert remove.status_code == 409

    twice = ana.post(f"/api/ordenes/{order_id}/confirmar")
    assert twice.status_code == 409


def test_other_user_cannot_confirm(app) -> None:
    ana = _login(app, "ana@correo.com")
    beto = _login(app, "beto@correo.com")
    order_id = _place_order(ana)

    resp = beto.post(f"/api/ordenes/{order_id}/confirmar")
    assert resp.status_code == 403

    order = ana.get(f"/api/ordenes/{order_id}").json()["data"]
    assert order["estado"] == "draft"


def test_other_user_cannot_touch_lines_or_read(app) -> None:
    ana = _login(app, "ana@correo.com")
    beto = _login(app, "beto@correo.com")
    order_id = _place_order(ana)
    line_id = ana.get(f"/api/ordenes/{order_id}").json()["data"]["lineas"][0]["id"]

    assert beto.get(f"/api/ordenes/{order_id}").status_code == 403
    assert beto.delete(f"/api/ordenes/{order_id}/lineas/{line_id}").status_code == 403
    assert (
        beto.post(
            f"/api/ordenes/{order_id}/lineas", json={"plato_id": _dish_id("Baleada Sencilla")}
        ).status_code
        == 403
    )
    assert beto.delete(f"/api/ordenes/{order_id}").status_code == 403

    order = ana.get(f"/api/ordenes/{order_id}").json()["data"]
    assert len(order["lineas"]) == 1


def test_line_from_another_order_is_404(app) -> None:
    ana = _login(app, "ana@correo.com")
    first = _place_order(ana)
    second = _place_order(ana)
    other_line = ana.get(f"/api/ordenes/{second}").json()["data"]["lineas"][0]["id"]

    resp = ana.delete(f"/api/ordenes/{first}/lineas/{other_line}")
    assert resp.status_code == 404


def test_mutations_require_login(app) -> None:
    ana = _login(app, "ana@correo.com")
    order_id = _place_order(ana)

    anon = TestClient(app)
    resp = anon.post(f"/api/ordenes/{order_id}/confirmar")
    assert resp.status_code == 401
    assert resp.json()["success"] is False
    assert anon.delete(f"/api/ordenes/{order_id}").status_code == 401


def test_owner_deletes_confirmed_order(app) -> None:
    ana = _login(app, "ana@correo.com")
    order_id = _place_order(ana)
    ana.post(f"/api/ordenes/{order_id}/confirmar")

    resp = ana.delete(f"/api/ordenes/{order_id}")
    assert resp.status_code == 200
    assert ana.get(f"/api/ordenes/{order_id}").status_code == 404
    assert ana.get("/api/ordenes/mias").json()["total"] == 0


def test_admin_deletes_any_order_and_reads_events(app) -> None:
    ana = _login(app, "ana@correo.com")
    admin = _login(app, "admin@pedidoshn.com")
    order_id = _place_order(ana)
    ana.post(f"/api/ordenes/{order_id}/confirmar")

    listed = admin.get("/api/ordenes").json()
    assert listed["total"] == 1
    assert listed["data"][0]["restaurante"] == "Carnitas Del Anillo"

    assert admin.delete(f"/api/ordenes/{order_id}").status_code == 200

    events = admin.get(f"/api/ordenes/{order_id}/eventos")
    assert events.status_code == 200
    kinds = [e["event_type"] for e in events.json()]
    assert kinds == ["ORDER_CREATED", "ORDER_CONFIRMED", "ORDER_DELETED"]
    assert events.json()[-1]["payload"]["by_admin"] is True


def test_html_order_flow(app) -> None:
    ana = _login(app, "ana@correo.com")
    order_id = _place_order(ana)

    page = ana.get(f"/pedidos/{order_id}")
    assert page.status_code == 200
    assert "Carne de Cerdo con Pollo" in page.text

    added = ana.post(
        f"/pedidos/{order_id}/lineas",
        data={"plato_id": str(_dish_id("Carne de Cerdo con Costilla")), "cantidad": "1"},
        follow_redirects=False,
    )
    assert added.status_code == 303
    assert added.headers["location"] == f"/pedidos/{order_id}"

    confirmed = ana.post(f"/pedidos/{order_id}/confirmar", follow_redirects=False)
    assert confirmed.status_code == 303

    listing = ana.get("/pedidos")
    assert "Confirmado" in listing.text

    deleted = ana.post(f"/pedidos/{order_id}/eliminar", follow_redirects=False)
    assert deleted.status_code == 303
    assert ana.get(f"/pedidos/{order_id}").status_code == 404


def test_html_mutation_without_session_redirects_to_login(app) -> None:
    ana = _login(app, "ana@correo.com")
    order_id = _place_order(ana)

    anon = TestClient(app)
    resp = anon.post(f"/pedidos/{order_id}/confirmar", follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/login"
