from __future__ import annotations

import logging

from packages.shared.schemas.events import EntityTypeV1, EventTypeV1
from services.api.app.db.models import Order, User
from services.api.app.services.events import log_event
from sqlalchemy import select
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class UserNotFoundError(Exception):
    def __init__(self, user_id: int) -> None:
        super().__init__("Usuario no encontrado")
        self.user_id = user_id


def list_users(db: Session, limit: int = 500) -> list[User]:
    return list(db.scalars(select(User).order_by(User.id).limit(limit)))


def delete_user(db: Session, user_id: int, *, admin_id: int | None) -> int:
    """Hard-delete a user and every order they own. Returns the number of orders removed."""

    user = db.get(User, user_id)
    if user is None:
        raise UserNotFoundError(user_id)

    orders = db.scalars(select(Order).where(Order.user_id == user_id)).all()
    for order in orders:
        db.delete(order)
    db.flush()
    db.delete(user)

    log_event(
        db,
        user_id=admin_id,
        entity_type=EntityTypeV1.USER,
        entity_id=user_id,
        event_type=EventTypeV1.USER_DELETED,
        event_payload={"orders_deleted": len(orders)},
    )
    db.commit()

    logger.info("user %s deleted with %d orders", user_id, len(orders))
    return len(orders)
