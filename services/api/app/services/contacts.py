from __future__ import annotations

import logging
import re

from services.api.app.db.models import ContactMessage
from sqlalchemy import select
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class ContactValidationError(ValueError):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def create_contact(
    db: Session, *, name: str, email: str, message: str, phone: str | None = None
) -> ContactMessage:
    name = (name or "").strip()
    email = (email or "").strip()
    message = (message or "").strip()
    phone = (phone or "").strip() or None

    if not name or not email or not message:
        raise ContactValidationError("Faltan campos obligatorios")
    if not _EMAIL_RE.match(email):
        raise ContactValidationError("El correo no es válido")

    row = ContactMessage(name=name, email=email, phone=phone, message=message)
    db.add(row)
    db.commit()
    db.refresh(row)

    logger.info("contact message %s received", row.id)
    return row


def list_contacts(db: Session, limit: int = 200) -> list[ContactMessage]:
    return list(
        db.scalars(
            select(ContactMessage)
            .order_by(ContactMessage.created_at.desc(), ContactMessage.id.desc())
            .limit(limit)
        )
    )
