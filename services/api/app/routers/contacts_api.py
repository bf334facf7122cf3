from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from services.api.app.db.deps import get_db
from services.api.app.db.models import ContactMessage
from services.api.app.models.contact import ContactOut, ContactRequest
from services.api.app.routers.deps import require_admin
from services.api.app.services.contacts import (
    ContactValidationError,
    create_contact,
    list_contacts,
)
from sqlalchemy.orm import Session

router = APIRouter(prefix="/api/contactos")


def contact_out(c: ContactMessage) -> ContactOut:
    return ContactOut(
        id=c.id,
        nombre=c.name,
        email=c.email,
        telefono=c.phone,
        mensaje=c.message,
        fecha=c.created_at.isoformat(),
    )


@router.post("", status_code=201)
def submit_contact(payload: ContactRequest, db: Session = Depends(get_db)):
    try:
        row = create_contact(
            db,
            name=payload.nombre,
            email=payload.email,
            phone=payload.telefono,
            message=payload.mensaje,
        )
    except ContactValidationError as e:
        return JSONResponse(status_code=400, content={"success": False, "error": e.message})

    return {"success": True, "message": "Mensaje recibido", "id": row.id}


@router.get("")
def read_contacts(db: Session = Depends(get_db), _admin: dict = Depends(require_admin)) -> dict:
    rows = [contact_out(c).model_dump() for c in list_contacts(db)]
    return {"success": True, "total": len(rows), "data": rows}
