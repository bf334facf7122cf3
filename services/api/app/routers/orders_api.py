from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from packages.shared.schemas.events import EntityTypeV1, EventV1
from services.api.app.db.deps import get_db
from services.api.app.db.models import EventLog, Order
from services.api.app.models.order import (
    CheckoutRequest,
    CheckoutResponse,
    OrderLineAddRequest,
    OrderLineOut,
    OrderListResponse,
    OrderOut,
    OrderResponse,
)
from services.api.app.routers.deps import raise_order_http_error, require_admin, require_user_id
from services.api.app.services.auth import is_admin, session_user_id
from services.api.app.services.orders import (
    OrderError,
    add_line,
    admin_delete_order,
    confirm_order,
    create_order,
    delete_order,
    get_order,
    list_all_orders,
    list_orders_for_user,
    order_total_cents,
    remove_line,
)
from services.api.app.services.validation import CheckoutValidationError, validate_checkout
from sqlalchemy import select
from sqlalchemy.orm import Session

router = APIRouter(prefix="/api/ordenes")


def order_out(order: Order) -> OrderOut:
    return OrderOut(
        id=order.id,
        usuario_id=order.user_id,
        restaurante_id=order.restaurant_id,
        restaurante_slug=order.restaurant_slug,
        restaurante=order.restaurant.name if order.restaurant else None,
        nombre=order.customer_name,
        pedido=order.pedido,
        direccion=order.address,
        telefono=order.phone,
        fecha=order.created_at.isoformat(),
        schedule_date=order.schedule_date.isoformat(),
        schedule_slot=order.schedule_slot,
        estado=order.status,
        lineas=[
            OrderLineOut(
                id=line.id,
                plato_id=line.dish_id,
                plato=line.dish.name,
                precio_centavos=line.dish.price_cents,
                cantidad=line.quantity,
                subtotal_centavos=line.dish.price_cents * line.quantity,
            )
            for line in order.lines
        ],
        total_centavos=order_total_cents(order),
    )


@router.post("", status_code=201, response_model=CheckoutResponse)
def submit_order(payload: CheckoutRequest, request: Request, db: Session = Depends(get_db)):
    try:
        data = validate_checkout(payload.model_dump(by_alias=True))
    except CheckoutValidationError as e:
        return JSONResponse(status_code=400, content={"success": False, "error": e.message})

    order = create_order(db, data, session_user_id(request.session))
    return CheckoutResponse(message="Orden registrada exitosamente", order_id=order.id)


@router.get("", response_model=OrderListResponse)
def list_orders(
    db: Session = Depends(get_db), _admin: dict = Depends(require_admin)
) -> OrderListResponse:
    rows = [order_out(o) for o in list_all_orders(db)]
    return OrderListResponse(total=len(rows), data=rows)


@router.get("/mias", response_model=OrderListResponse)
def list_my_orders(
    db: Session = Depends(get_db), user_id: int = Depends(require_user_id)
) -> OrderListResponse:
    rows = [order_out(o) for o in list_orders_for_user(db, user_id)]
    return OrderListResponse(total=len(rows), data=rows)


@router.get("/{order_id}", response_model=OrderResponse)
def read_order(order_id: int, request: Request, db: Session = Depends(get_db)) -> OrderResponse:
    admin = is_admin(request.session)
    user_id = session_user_id(request.session)
    if user_id is None and not admin:
        raise HTTPException(status_code=401, detail="Inicia sesión para continuar")

    try:
        order = get_order(db, order_id, user_id, is_admin=admin)
    except OrderError as e:
        raise_order_http_error(e)

    return OrderResponse(data=order_out(order))


@router.post("/{order_id}/lineas", status_code=201, response_model=OrderResponse)
def add_order_line(
    order_id: int,
    payload: OrderLineAddRequest,
    db: Session = Depends(get_db),
    user_id: int = Depends(require_user_id),
) -> OrderResponse:
    try:
        add_line(db, order_id, user_id, payload.plato_id, payload.cantidad)
        order = get_order(db, order_id, user_id)
    except OrderError as e:
        raise_order_http_error(e)

    return OrderResponse(data=order_out(order))


@router.delete("/{order_id}/lineas/{line_id}", response_model=OrderResponse)
def remove_order_line(
    order_id: int,
    line_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(require_user_id),
) -> OrderResponse:
    try:
        remove_line(db, order_id, line_id, user_id)
        order = get_order(db, order_id, user_id)
    except OrderError as e:
        raise_order_http_error(e)

    return OrderResponse(data=order_out(order))


@router.post("/{order_id}/confirmar", response_model=OrderResponse)
def confirm(
    order_id: int, db: Session = Depends(get_db), user_id: int = Depends(require_user_id)
) -> OrderResponse:
    try:
        order = confirm_order(db, order_id, user_id)
    except OrderError as e:
        raise_order_http_error(e)

    return OrderResponse(data=order_out(order))


@router.delete("/{order_id}")
def remove_order(order_id: int, request: Request, db: Session = Depends(get_db)) -> dict:
    user_id = session_user_id(request.session)
    if user_id is None:
        raise HTTPException(status_code=401, detail="Inicia sesión para continuar")

    try:
        if is_admin(request.session):
            admin_delete_order(db, order_id, admin_id=user_id)
        else:
            delete_order(db, order_id, user_id)
    except OrderError as e:
        raise_order_http_error(e)

    return {"success": True, "message": "Pedido eliminado"}


@router.get("/{order_id}/eventos", response_model=list[EventV1])
def order_events(
    order_id: int, db: Session = Depends(get_db), _admin: dict = Depends(require_admin)
) -> list[EventV1]:
    rows = db.scalars(
        select(EventLog)
        .where(
            EventLog.entity_type == EntityTypeV1.ORDER.value,
            EventLog.entity_id == str(order_id),
        )
        .order_by(EventLog.created_at)
    ).all()

    return [
        EventV1(
            id=r.id,
            user_id=r.user_id,
            entity_type=r.entity_type,
            entity_id=r.entity_id,
            event_type=r.event_type,
            payload=r.event_payload_json,
            created_at=r.created_at.isoformat(),
        )
        for r in rows
    ]
