from pathlib import Path

from sqlalchemy import inspect


def test_init_db_creates_tables(tmp_path: Path, monkeypatch) -> None:
    db_path = tmp_path / "pedidos_test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_path}")
    monkeypatch.setenv("PEDIDOS_DB_AUTO_CREATE", "true")

    from services.api.app.db.database import get_engine
    from services.api.app.db.init_db import init_db

    init_db()

    inspector = inspect(get_engine())
    tables = set(inspector.get_table_names())

    assert {
        "usuarios",
        "restaurantes",
        "platos",
        "ordenes",
        "detalles_orden",
        "contactos",
        "event_log",
    } <= tables


def test_init_db_respects_auto_create_flag(tmp_path: Path, monkeypatch) -> None:
    db_path = tmp_path / "pedidos_noop.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_path}")
    monkeypatch.setenv("PEDIDOS_DB_AUTO_CREATE", "false")

    from services.api.app.db.database import get_engine
    from services.api.app.db.init_db import init_db

    init_db()

    assert inspect(get_engine()).get_table_names() == []


def test_seed_on_start_fills_empty_catalog_once(tmp_path: Path, monkeypatch) -> None:
    db_path = tmp_path / "pedidos_seed.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_path}")
    monkeypatch.setenv("PEDIDOS_DB_AUTO_CREATE", "true")
    monkeypatch.setenv("PEDIDOS_SEED_ON_START", "true")

    from services.api.app.db.database import db_session
    from services.api.app.db.init_db import init_db
    from services.api.app.db.models import Dish, Restaurant
    from sqlalchemy import func, select

    init_db()
    init_db()

    db = db_session()
    try:
        assert db.scalar(select(func.count()).select_from(Restaurant)) == 3
        assert db.scalar(select(func.count()).select_from(Dish)) == 7
    finally:
        db.close()
