"""PedidosHN web service entrypoint."""

from __future__ import annotations

import logging
import os

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse
from services.api.app.db.init_db import init_db
from services.api.app.routers.auth import router as auth_router
from services.api.app.routers.contacts_api import router as contacts_router
from services.api.app.routers.deps import render
from services.api.app.routers.orders_api import router as orders_router
from services.api.app.routers.pages import router as pages_router
from services.api.app.routers.restaurants_api import router as restaurants_router
from services.api.app.routers.users_api import router as users_router
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Error interno del servidor"


def _configure_logging() -> None:
    level = os.getenv("PEDIDOS_LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _session_max_age() -> int:
    raw = os.getenv("PEDIDOS_SESSION_MAX_AGE", "3600")
    try:
        return int(raw)
    except ValueError:
        return 3600


_configure_logging()

app = FastAPI(title="PedidosHN")

app.add_middleware(
    SessionMiddleware,
    secret_key=os.getenv("PEDIDOS_SESSION_SECRET", "dev-secret-change-me"),
    session_cookie="pedidos_session",
    max_age=_session_max_age(),
    same_site="lax",
)

app.include_router(pages_router)
app.include_router(auth_router)
app.include_router(restaurants_router)
app.include_router(orders_router)
app.include_router(users_router)
app.include_router(contacts_router)


def _is_api(request: Request) -> bool:
    return request.url.path.startswith("/api/")


@app.exception_handler(StarletteHTTPException)
async def _http_error(request: Request, exc: StarletteHTTPException):
    if _is_api(request):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    if exc.status_code == 401:
        return RedirectResponse("/login", status_code=303)

    return render(request, "error.html", {"mensaje": exc.detail}, status_code=exc.status_code)


@app.exception_handler(SQLAlchemyError)
async def _storage_error(request: Request, exc: SQLAlchemyError):
    logger.exception("storage error on %s %s", request.method, request.url.path, exc_info=exc)

    if _is_api(request):
        return JSONResponse(status_code=500, content={"success": False, "error": GENERIC_ERROR})

    return render(request, "error.html", {"mensaje": GENERIC_ERROR}, status_code=500)


@app.on_event("startup")
def _startup() -> None:
    init_db()


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
