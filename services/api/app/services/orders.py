from __future__ import annotations

import logging

from packages.shared.schemas.events import EntityTypeV1, EventTypeV1
from services.api.app.db.models import (
    ORDER_STATUS_CONFIRMED,
    ORDER_STATUS_DRAFT,
    Dish,
    Order,
    OrderLine,
    Restaurant,
)
from services.api.app.services.events import log_event
from services.api.app.services.identity import resolve_user
from services.api.app.services.validation import CheckoutData
from sqlalchemy import select
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class OrderError(Exception):
    """Base class for order lifecycle errors."""


class OrderNotFoundError(OrderError):
    def __init__(self, order_id: int) -> None:
        super().__init__("Pedido no encontrado")
        self.order_id = order_id


class OrderOwnershipError(OrderError):
    def __init__(self, order_id: int) -> None:
        super().__init__("No tienes permiso para modificar este pedido")
        self.order_id = order_id


class OrderNotDraftError(OrderError):
    def __init__(self, order_id: int, status: str) -> None:
        label = "confirmado" if status == ORDER_STATUS_CONFIRMED else status
        super().__init__(f"El pedido ya está {label}")
        self.order_id = order_id
        self.status = status


class DishNotFoundError(OrderError):
    def __init__(self, dish_id: int) -> None:
        super().__init__("Plato no encontrado")
        self.dish_id = dish_id


class OrderLineNotFoundError(OrderError):
    def __init__(self, line_id: int) -> None:
        super().__init__("Línea de pedido no encontrada")
        self.line_id = line_id


def create_order(db: Session, data: CheckoutData, session_user_id: int | None) -> Order:
    """Persist a checkout as a draft order, all or nothing.

    User upsert, restaurant lookup, order insert and the optional first line share one
    transaction. An unknown dish name leaves the order without lines; an unknown slug
    leaves restaurant_id empty and the order without lines. Any exception rolls the whole thing back.
    """

    try:
        user = resolve_user(db, data, session_user_id)

        restaurant = db.scalars(
            select(Restaurant).where(Restaurant.slug == data.restaurant_slug)
        ).first()

        order = Order(
            user_id=user.id,
            restaurant_id=restaurant.id if restaurant else None,
            restaurant_slug=data.restaurant_slug,
            customer_name=data.name,
            pedido=data.pedido,
            address=data.address,
            phone=data.phone,
            schedule_date=data.schedule_date,
            schedule_slot=data.schedule_slot,
            status=ORDER_STATUS_DRAFT,
        )
        db.add(order)
        db.flush()

        # Without a known restaurant there is no menu to match the dish against.
        dish = _find_dish_by_name(db, data.pedido, restaurant.id) if restaurant else None
        if dish is not None:
            db.add(OrderLine(order_id=order.id, dish_id=dish.id, quantity=1))

        log_event(
            db,
            user_id=user.id,
            entity_type=EntityTypeV1.ORDER,
            entity_id=order.id,
            event_type=EventTypeV1.ORDER_CREATED,
            event_payload={
                "restaurant_slug": data.restaurant_slug,
                "pedido": data.pedido,
                "dish_id": dish.id if dish else None,
                "schedule_date": data.schedule_date.isoformat(),
                "schedule_slot": data.schedule_slot,
            },
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(order)
    logger.info(
        "order %s created for user %s (restaurant=%s, lines=%d)",
        order.id,
        order.user_id,
        data.restaurant_slug,
        len(order.lines),
    )
    return order


def _find_dish_by_name(db: Session, name: str, restaurant_id: int) -> Dish | None:
    stmt = select(Dish).where(Dish.name == name, Dish.restaurant_id == restaurant_id)
    return db.scalars(stmt.order_by(Dish.id)).first()


def _owned_order(db: Session, order_id: int, user_id: int) -> Order:
    order = db.get(Order, order_id)
    if order is None:
        raise OrderNotFoundError(order_id)
    if order.user_id != user_id:
        raise OrderOwnershipError(order_id)
    return order


def _owned_draft(db: Session, order_id: int, user_id: int) -> Order:
    order = _owned_order(db, order_id, user_id)
    if order.status != ORDER_STATUS_DRAFT:
        raise OrderNotDraftError(order_id, order.status)
    return order


def get_order(db: Session, order_id: int, user_id: int | None, *, is_admin: bool = False) -> Order:
    """Load an order for reading; admins may read any order."""
    if is_admin:
        order = db.get(Order, order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    if user_id is None:
        raise OrderOwnershipError(order_id)
    return _owned_order(db, order_id, user_id)


def add_line(
    db: Session, order_id: int, user_id: int, dish_id: int, quantity: int = 1
) -> OrderLine:
    if quantity < 1:
        raise ValueError("quantity must be >= 1")

    order = _owned_draft(db, order_id, user_id)

    dish = db.get(Dish, dish_id)
    if dish is None:
        raise DishNotFoundError(dish_id)

    line = next((ln for ln in order.lines if ln.dish_id == dish_id), None)
    if line is None:
        line = OrderLine(order_id=order.id, dish_id=dish_id, quantity=quantity)
        order.lines.append(line)
    else:
        line.quantity += quantity

    log_event(
        db,
        user_id=user_id,
        entity_type=EntityTypeV1.ORDER,
        entity_id=order.id,
        event_type=EventTypeV1.ORDER_LINE_ADDED,
        event_payload={"dish_id": dish_id, "quantity": quantity},
    )
    db.commit()
    db.refresh(line)

    logger.info("order %s: added %d x dish %s", order.id, quantity, dish_id)
    return line


def remove_line(db: Session, order_id: int, line_id: int, user_id: int) -> None:
    order = _owned_draft(db, order_id, user_id)

    line = db.get(OrderLine, line_id)
    if line is None or line.order_id != order.id:
        raise OrderLineNotFoundError(line_id)

    order.lines.remove(line)

    log_event(
        db,
        user_id=user_id,
        entity_type=EntityTypeV1.ORDER,
        entity_id=order.id,
        event_type=EventTypeV1.ORDER_LINE_REMOVED,
        event_payload={"line_id": line_id, "dish_id": line.dish_id},
    )
    db.commit()

    logger.info("order %s: removed line %s", order.id, line_id)


def confirm_order(db: Session, order_id: int, user_id: int) -> Order:
    order = _owned_draft(db, order_id, user_id)
    order.status = ORDER_STATUS_CONFIRMED

    log_event(
        db,
        user_id=user_id,
        entity_type=EntityTypeV1.ORDER,
        entity_id=order.id,
        event_type=EventTypeV1.ORDER_CONFIRMED,
        event_payload={"total_cents": order_total_cents(order)},
    )
    db.commit()

    logger.info("order %s confirmed by user %s", order.id, user_id)
    return order


def delete_order(db: Session, order_id: int, user_id: int) -> None:
    order = _owned_order(db, order_id, user_id)
    _delete(db, order, actor_id=user_id, by_admin=False)


def admin_delete_order(db: Session, order_id: int, admin_id: int | None = None) -> None:
    order = db.get(Order, order_id)
    if order is None:
        raise OrderNotFoundError(order_id)
    _delete(db, order, actor_id=admin_id, by_admin=True)


def _delete(db: Session, order: Order, *, actor_id: int | None, by_admin: bool) -> None:
    order_id = order.id
    status = order.status
    db.delete(order)

    log_event(
        db,
        user_id=actor_id,
        entity_type=EntityTypeV1.ORDER,
        entity_id=order_id,
        event_type=EventTypeV1.ORDER_DELETED,
        event_payload={"status": status, "by_admin": by_admin, "owner_id": order.user_id},
    )
    db.commit()

    logger.info("order %s deleted (status=%s, by_admin=%s)", order_id, status, by_admin)


def order_total_cents(order: Order) -> int:
    return sum(line.dish.price_cents * line.quantity for line in order.lines)


def list_orders_for_user(db: Session, user_id: int) -> list[Order]:
    return list(
        db.scalars(
            select(Order)
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
        )
    )


def list_all_orders(db: Session, limit: int = 200) -> list[Order]:
    return list(
        db.scalars(select(Order).order_by(Order.created_at.desc(), Order.id.desc()).limit(limit))
    )
