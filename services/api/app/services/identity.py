from __future__ import annotations

import logging

from packages.shared.schemas.events import EntityTypeV1, EventTypeV1
from services.api.app.db.models import User
from services.api.app.services.events import log_event
from services.api.app.services.validation import CheckoutData
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


def resolve_user(db: Session, data: CheckoutData, session_user_id: int | None) -> User:
    """Return the user an order should be attached to.

    A logged-in customer keeps their row and gets address/phone overwritten with what they
    just typed. Guests always get a fresh row. Nothing is committed here; the caller owns
    the transaction.
    """

    user = db.get(User, session_user_id) if session_user_id is not None else None

    if user is not None:
        user.address = data.address
        user.phone = data.phone
        if not user.name:
            user.name = data.name
        log_event(
            db,
            user_id=user.id,
            entity_type=EntityTypeV1.USER,
            entity_id=user.id,
            event_type=EventTypeV1.USER_UPDATED,
            event_payload={"address": data.address, "phone": data.phone},
        )
        return user

    if session_user_id is not None:
        logger.warning("session user %s no longer exists; checking out as guest", session_user_id)

    user = User(name=data.name, email=None, address=data.address, phone=data.phone)
    db.add(user)
    db.flush()

    log_event(
        db,
        user_id=user.id,
        entity_type=EntityTypeV1.USER,
        entity_id=user.id,
        event_type=EventTypeV1.USER_CREATED,
        event_payload={"guest": True, "name": data.name},
    )
    return user
