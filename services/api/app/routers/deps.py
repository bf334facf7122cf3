from __future__ import annotations

from pathlib import Path
from typing import Any

from fastapi import HTTPException, Request
from fastapi.templating import Jinja2Templates
from services.api.app.services.auth import is_admin, session_user
from services.api.app.services.orders import (
    DishNotFoundError,
    OrderError,
    OrderLineNotFoundError,
    OrderNotDraftError,
    OrderNotFoundError,
    OrderOwnershipError,
)

TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"

ADMIN_ONLY = "Solo administradores"
LOGIN_REQUIRED = "Inicia sesión para continuar"


def format_money(cents: int | None) -> str:
    return f"L {(cents or 0) / 100:,.2f}"


templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["money"] = format_money


def render(
    request: Request, name: str, context: dict[str, Any] | None = None, status_code: int = 200
):
    ctx = {"user": session_user(request.session), "site_name": "PedidosHN"}
    ctx.update(context or {})
    return templates.TemplateResponse(request, name, ctx, status_code=status_code)


def require_user_id(request: Request) -> int:
    user = session_user(request.session)
    if user is None:
        raise HTTPException(status_code=401, detail=LOGIN_REQUIRED)
    return user["id"]


def require_admin(request: Request) -> dict:
    if not is_admin(request.session):
        raise HTTPException(status_code=403, detail=ADMIN_ONLY)
    return session_user(request.session) or {}


def raise_order_http_error(e: OrderError) -> None:
    if isinstance(e, (OrderNotFoundError, DishNotFoundError, OrderLineNotFoundError)):
        raise HTTPException(status_code=404, detail=str(e)) from e

    if isinstance(e, OrderOwnershipError):
        raise HTTPException(status_code=403, detail=str(e)) from e

    if isinstance(e, OrderNotDraftError):
        raise HTTPException(status_code=409, detail=str(e)) from e

    raise HTTPException(status_code=500, detail="Error interno del servidor") from e
