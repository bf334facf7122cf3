from __future__ import annotations

from collections.abc import Generator

from services.api.app.db.database import db_session
from sqlalchemy.orm import Session


def get_db() -> Generator[Session, None, None]:
    """One session per request. Anything left uncommitted when the handler fails is
    rolled back before the connection goes back to the pool."""
    db = db_session()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
