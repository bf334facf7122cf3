from __future__ import annotations

import os

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

_ENGINE: Engine | None = None
_ENGINE_URL: str | None = None
_SESSIONMAKER: sessionmaker | None = None


def _default_db_url() -> str:
    # Local-only default. Production must provide DATABASE_URL (PostgreSQL) explicitly.
    return "sqlite+pysqlite:///.local/pedidos.db"


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_engine() -> Engine:
    """Return a cached SQLAlchemy engine.

    We cache based on DATABASE_URL so tests can point each run at its own database file.
    """

    global _ENGINE, _ENGINE_URL, _SESSIONMAKER

    url = os.getenv("DATABASE_URL", _default_db_url())

    if _ENGINE is not None and _ENGINE_URL == url:
        return _ENGINE

    is_sqlite = url.startswith("sqlite")
    if is_sqlite and ":///.local/" in url:
        os.makedirs(".local", exist_ok=True)

    connect_args = {"check_same_thread": False} if is_sqlite else {}
    engine = create_engine(url, future=True, pool_pre_ping=not is_sqlite, connect_args=connect_args)
    if is_sqlite:
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)

    _ENGINE = engine
    _ENGINE_URL = url
    _SESSIONMAKER = sessionmaker(bind=engine, class_=Session, autocommit=False, autoflush=False)
    return _ENGINE


def db_session() -> Session:
    get_engine()  # ensure _SESSIONMAKER is created
    assert _SESSIONMAKER is not None
    return _SESSIONMAKER()
