from __future__ import annotations

from pydantic import BaseModel


class ContactRequest(BaseModel):
    nombre: str = ""
    email: str = ""
    telefono: str | None = None
    mensaje: str = ""


class ContactOut(BaseModel):
    id: int
    nombre: str
    email: str
    telefono: str | None = None
    mensaje: str
    fecha: str
