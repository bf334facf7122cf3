from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import JSONResponse, RedirectResponse
from services.api.app.db.deps import get_db
from services.api.app.models.account import LoginRequest, RegisterRequest, SessionUserOut
from services.api.app.routers.deps import render
from services.api.app.services.auth import (
    SESSION_USER_KEY,
    AuthError,
    EmailTakenError,
    MissingFieldsError,
    PasswordTooLongError,
    authenticate,
    register_user,
    session_payload,
)
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

router = APIRouter()


def _auth_status(e: AuthError) -> int:
    if isinstance(e, (MissingFieldsError, PasswordTooLongError)):
        return 400
    if isinstance(e, EmailTakenError):
        return 409
    return 401


@router.get("/login")
def login_page(request: Request):
    return render(request, "login.html")


@router.get("/register")
def register_page(request: Request):
    return render(request, "register.html")


@router.post("/register")
def register_form(
    request: Request,
    nombre: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    direccion: str = Form(""),
    db: Session = Depends(get_db),
):
    try:
        register_user(db, name=nombre, email=email, password=password, address=direccion)
    except AuthError as e:
        return render(
            request,
            "register.html",
            {"error": str(e), "form": {"nombre": nombre, "email": email, "direccion": direccion}},
            status_code=_auth_status(e),
        )

    return RedirectResponse("/login", status_code=303)


@router.post("/login")
def login_form(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db),
):
    try:
        user = authenticate(db, email, password)
    except AuthError as e:
        return render(
            request,
            "login.html",
            {"error": str(e), "form": {"email": email}},
            status_code=_auth_status(e),
        )

    request.session[SESSION_USER_KEY] = session_payload(user)
    logger.info("user %s logged in", user.id)
    return RedirectResponse("/", status_code=303)


@router.get("/logout")
def logout_page(request: Request):
    request.session.clear()
    return RedirectResponse("/", status_code=303)


@router.post("/api/register", status_code=201)
def register_api(payload: RegisterRequest, db: Session = Depends(get_db)):
    try:
        user = register_user(
            db,
            name=payload.nombre,
            email=payload.email,
            password=payload.password,
            address=payload.direccion,
        )
    except AuthError as e:
        return JSONResponse(
            status_code=_auth_status(e), content={"success": False, "error": str(e)}
        )

    return {"success": True, "id": user.id}


@router.post("/api/login")
def login_api(payload: LoginRequest, request: Request, db: Session = Depends(get_db)):
    try:
        user = authenticate(db, payload.email, payload.password)
    except AuthError as e:
        return JSONResponse(
            status_code=_auth_status(e), content={"success": False, "error": str(e)}
        )

    request.session[SESSION_USER_KEY] = session_payload(user)
    logger.info("user %s logged in", user.id)
    return {"success": True, "user": SessionUserOut(**session_payload(user)).model_dump()}


@router.post("/api/logout")
def logout_api(request: Request) -> dict:
    request.session.clear()
    return {"success": True, "message": "Sesión cerrada correctamente"}
