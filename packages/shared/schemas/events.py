"""Shared event schema (v1).

The backend stores an append-only event log of order and account changes. Admin
screens read these events to render an audit trail for an order.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class EntityTypeV1(str, Enum):
    USER = "User"
    ORDER = "Order"
    ORDER_LINE = "OrderLine"


class EventTypeV1(str, Enum):
    USER_REGISTERED = "USER_REGISTERED"
    USER_CREATED = "USER_CREATED"
    USER_UPDATED = "USER_UPDATED"
    USER_DELETED = "USER_DELETED"
    ORDER_CREATED = "ORDER_CREATED"
    ORDER_LINE_ADDED = "ORDER_LINE_ADDED"
    ORDER_LINE_REMOVED = "ORDER_LINE_REMOVED"
    ORDER_CONFIRMED = "ORDER_CONFIRMED"
    ORDER_DELETED = "ORDER_DELETED"


class EventV1(BaseModel):
    id: str
    user_id: int | None = None

    entity_type: EntityTypeV1
    entity_id: str

    event_type: EventTypeV1
    payload: dict[str, Any] = Field(default_factory=dict)
    created_at: str
