from __future__ import annotations

import logging
from datetime import date, timedelta

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import RedirectResponse
from services.api.app.db.deps import get_db
from services.api.app.db.models import User
from services.api.app.routers.deps import (
    raise_order_http_error,
    render,
    require_admin,
    require_user_id,
)
from services.api.app.services.auth import session_user_id
from services.api.app.services.contacts import (
    ContactValidationError,
    create_contact,
    list_contacts,
)
from services.api.app.services.orders import (
    OrderError,
    add_line,
    confirm_order,
    create_order,
    delete_order,
    get_order,
    list_all_orders,
    list_orders_for_user,
    order_total_cents,
    remove_line,
)
from services.api.app.services.restaurant_base import RestaurantSourceError
from services.api.app.services.restaurant_factory import get_restaurant_repository
from services.api.app.services.users import list_users
from services.api.app.services.validation import (
    IMMEDIATE_SLOT,
    SCHEDULE_WINDOW_DAYS,
    CheckoutValidationError,
    validate_checkout,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

router = APIRouter()

SCHEDULE_SLOTS = [
    IMMEDIATE_SLOT,
    "11:00 - 12:00",
    "12:00 - 13:00",
    "13:00 - 14:00",
    "18:00 - 19:00",
    "19:00 - 20:00",
]


def _repository(db: Session):
    try:
        return get_restaurant_repository(db)
    except ValueError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e


def _render_checkout(
    request: Request, form: dict, *, error: str | None = None, status_code: int = 200
):
    today = date.today()
    return render(
        request,
        "checkout.html",
        {
            "form": form,
            "error": error,
            "slots": SCHEDULE_SLOTS,
            "min_date": today.isoformat(),
            "max_date": (today + timedelta(days=SCHEDULE_WINDOW_DAYS)).isoformat(),
        },
        status_code=status_code,
    )


@router.get("/")
def home(request: Request, db: Session = Depends(get_db)):
    try:
        restaurants = _repository(db).list_restaurants()
    except RestaurantSourceError:
        logger.exception("restaurant list unavailable")
        restaurants = []
    return render(request, "home.html", {"restaurantes": restaurants})


@router.get("/restaurantes/{slug}")
def restaurant_page(slug: str, request: Request, db: Session = Depends(get_db)):
    repo = _repository(db)
    try:
        restaurant = repo.get_restaurant(slug)
        dishes = repo.list_dishes(slug) if restaurant else []
    except RestaurantSourceError as e:
        raise HTTPException(status_code=503, detail="Catálogo no disponible") from e

    if restaurant is None:
        raise HTTPException(status_code=404, detail="Restaurante no encontrado")

    return render(request, "restaurante.html", {"restaurante": restaurant, "platos": dishes})


@router.get("/checkout")
def checkout_page(
    request: Request,
    restaurante: str = "",
    plato: str = "",
    precio: str = "",
    db: Session = Depends(get_db),
):
    form = {
        "restauranteId": restaurante,
        "pedido": plato,
        "precio": precio,
        "scheduleDate": date.today().isoformat(),
    }

    user_id = session_user_id(request.session)
    if user_id is not None:
        user = db.get(User, user_id)
        if user is not None:
            form.update(
                {"nombre": user.name, "direccion": user.address, "telefono": user.phone or ""}
            )

    return _render_checkout(request, form)


@router.post("/checkout")
def checkout_submit(
    request: Request,
    nombre: str = Form(""),
    direccion: str = Form(""),
    telefono: str = Form(""),
    restaurante_id: str = Form("", alias="restauranteId"),
    pedido: str = Form(""),
    schedule_date: str = Form("", alias="scheduleDate"),
    schedule_slot: str = Form("", alias="scheduleSlot"),
    precio: str = Form(""),
    db: Session = Depends(get_db),
):
    form = {
        "nombre": nombre,
        "direccion": direccion,
        "telefono": telefono,
        "restauranteId": restaurante_id,
        "pedido": pedido,
        "scheduleDate": schedule_date,
        "scheduleSlot": schedule_slot,
        "precio": precio,
    }

    try:
        data = validate_checkout(form)
    except CheckoutValidationError as e:
        return _render_checkout(request, form, error=e.message, status_code=400)

    try:
        order = create_order(db, data, session_user_id(request.session))
    except SQLAlchemyError:
        logger.exception("checkout failed for restaurant %s", data.restaurant_slug)
        return _render_checkout(
            request, form, error="No pudimos registrar tu pedido, intenta de nuevo", status_code=500
        )

    return RedirectResponse(f"/pedidos?orden={order.id}", status_code=303)


@router.get("/contacto")
def contact_page(request: Request):
    return render(request, "contacto.html", {"form": {}})


@router.post("/contacto")
def contact_submit(
    request: Request,
    nombre: str = Form(""),
    email: str = Form(""),
    telefono: str = Form(""),
    mensaje: str = Form(""),
    db: Session = Depends(get_db),
):
    try:
        create_contact(db, name=nombre, email=email, phone=telefono, message=mensaje)
    except ContactValidationError as e:
        form = {"nombre": nombre, "email": email, "telefono": telefono, "mensaje": mensaje}
        return render(request, "contacto.html", {"form": form, "error": e.message}, status_code=400)

    return render(request, "contacto.html", {"form": {}, "sent": True})


@router.get("/pedidos")
def orders_page(request: Request, orden: int | None = None, db: Session = Depends(get_db)):
    user_id = session_user_id(request.session)
    orders = list_orders_for_user(db, user_id) if user_id is not None else []
    return render(
        request,
        "pedidos.html",
        {"pedidos": orders, "nueva_orden": orden, "total_of": order_total_cents},
    )


@router.get("/pedidos/{order_id}")
def order_page(
    order_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user_id: int = Depends(require_user_id),
):
    try:
        order = get_order(db, order_id, user_id)
    except OrderError as e:
        raise_order_http_error(e)

    dishes = order.restaurant.dishes if order.restaurant else []
    return render(
        request,
        "pedido.html",
        {"pedido": order, "platos": dishes, "total": order_total_cents(order)},
    )


@router.post("/pedidos/{order_id}/lineas")
def order_add_line(
    order_id: int,
    plato_id: int = Form(...),
    cantidad: int = Form(1),
    db: Session = Depends(get_db),
    user_id: int = Depends(require_user_id),
):
    if cantidad < 1:
        raise HTTPException(status_code=400, detail="La cantidad debe ser al menos 1")

    try:
        add_line(db, order_id, user_id, plato_id, cantidad)
    except OrderError as e:
        raise_order_http_error(e)

    return RedirectResponse(f"/pedidos/{order_id}", status_code=303)


@router.post("/pedidos/{order_id}/lineas/{line_id}/eliminar")
def order_remove_line(
    order_id: int,
    line_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(require_user_id),
):
    try:
        remove_line(db, order_id, line_id, user_id)
    except OrderError as e:
        raise_order_http_error(e)

    return RedirectResponse(f"/pedidos/{order_id}", status_code=303)


@router.post("/pedidos/{order_id}/confirmar")
def order_confirm(
    order_id: int, db: Session = Depends(get_db), user_id: int = Depends(require_user_id)
):
    try:
        confirm_order(db, order_id, user_id)
    except OrderError as e:
        raise_order_http_error(e)

    return RedirectResponse("/pedidos", status_code=303)


@router.post("/pedidos/{order_id}/eliminar")
def order_delete(
    order_id: int, db: Session = Depends(get_db), user_id: int = Depends(require_user_id)
):
    try:
        delete_order(db, order_id, user_id)
    except OrderError as e:
        raise_order_http_error(e)

    return RedirectResponse("/pedidos", status_code=303)


@router.get("/admin")
def admin_page(
    request: Request, db: Session = Depends(get_db), _admin: dict = Depends(require_admin)
):
    return render(
        request,
        "admin.html",
        {
            "pedidos": list_all_orders(db),
            "usuarios": list_users(db),
            "contactos": list_contacts(db),
            "total_of": order_total_cents,
        },
    )
