from __future__ import annotations

from pydantic import BaseModel


class RegisterRequest(BaseModel):
    nombre: str = ""
    email: str = ""
    password: str = ""
    direccion: str = ""


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


class SessionUserOut(BaseModel):
    id: int
    nombre: str
    email: str | None = None
    es_admin: bool = False


class UserOut(BaseModel):
    id: int
    nombre: str
    email: str | None = None
    direccion: str
    telefono: str | None = None
    es_admin: bool
    invitado: bool
    creado: str
