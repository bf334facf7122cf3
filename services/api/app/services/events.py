from __future__ import annotations

from uuid import uuid4

from packages.shared.schemas.events import EntityTypeV1, EventTypeV1
from services.api.app.db.models import EventLog
from sqlalchemy.orm import Session


def log_event(
    db: Session,
    *,
    user_id: int | None,
    entity_type: EntityTypeV1,
    entity_id: int | str,
    event_type: EventTypeV1,
    event_payload: dict,
) -> None:
    """Queue an event row on the caller's transaction; the caller commits."""
    db.add(
        EventLog(
            id=uuid4().hex,
            user_id=user_id,
            entity_type=entity_type.value,
            entity_id=str(entity_id),
            event_type=event_type.value,
            event_payload_json=event_payload,
        )
    )
