"""Checkout form validation.

Rules are checked in a fixed order and the first failure wins, so the customer sees one
message at a time. Nothing here touches the database.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Mapping

IMMEDIATE_SLOT = "Inmediato"
SCHEDULE_WINDOW_DAYS = 7

_NAME_RE = re.compile(r"^[A-Za-zÀ-ÖØ-öø-ÿ ]{3,60}$")
_PHONE_RE = re.compile(r"^[0-9]{8,15}$")
_DATE_RE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")

MSG_REQUIRED = "Faltan campos obligatorios"
MSG_NAME = "El nombre solo puede contener letras y espacios (3 a 60 caracteres)"
MSG_PHONE = "El teléfono debe contener solo dígitos (8 a 15)"
MSG_SCHEDULE_REQUIRED = "Selecciona la fecha y el horario de entrega"
MSG_DATE_INVALID = "La fecha de entrega no es válida"
MSG_DATE_RANGE = "La fecha de entrega debe estar entre hoy y los próximos 7 días"
MSG_IMMEDIATE_ONLY_TODAY = "La entrega inmediata solo está disponible para hoy"


class CheckoutValidationError(ValueError):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


@dataclass(frozen=True, slots=True)
class CheckoutData:
    name: str
    address: str
    phone: str
    pedido: str
    restaurant_slug: str
    schedule_date: date
    schedule_slot: str


def _field(form: Mapping[str, object], key: str) -> str:
    value = form.get(key)
    if value is None:
        return ""
    return str(value).strip()


def validate_checkout(form: Mapping[str, object], today: date | None = None) -> CheckoutData:
    """Validate raw checkout fields and return the normalized record.

    ``form`` uses the wire names: nombre, direccion, telefono, pedido, restauranteId,
    scheduleDate, scheduleSlot. Raises CheckoutValidationError naming the first broken rule.
    """

    today = today or date.today()

    name = _field(form, "nombre")
    address = _field(form, "direccion")
    phone = _field(form, "telefono")
    pedido = _field(form, "pedido")
    restaurant_slug = _field(form, "restauranteId")
    raw_date = _field(form, "scheduleDate")
    slot = _field(form, "scheduleSlot")

    if not name or not address or not pedido or not restaurant_slug:
        raise CheckoutValidationError(MSG_REQUIRED)

    # Collapse runs of spaces before the length check.
    name = " ".join(name.split())
    if not _NAME_RE.match(name):
        raise CheckoutValidationError(MSG_NAME)

    if not _PHONE_RE.match(phone):
        raise CheckoutValidationError(MSG_PHONE)

    if not raw_date or not slot:
        raise CheckoutValidationError(MSG_SCHEDULE_REQUIRED)

    if not _DATE_RE.match(raw_date):
        raise CheckoutValidationError(MSG_DATE_INVALID)
    try:
        schedule_date = date.fromisoformat(raw_date)
    except ValueError as e:
        raise CheckoutValidationError(MSG_DATE_INVALID) from e

    if not today <= schedule_date <= today + timedelta(days=SCHEDULE_WINDOW_DAYS):
        raise CheckoutValidationError(MSG_DATE_RANGE)

    if slot == IMMEDIATE_SLOT and schedule_date != today:
        raise CheckoutValidationError(MSG_IMMEDIATE_ONLY_TODAY)

    return CheckoutData(
        name=name,
        address=address,
        phone=phone,
        pedido=pedido,
        restaurant_slug=restaurant_slug,
        schedule_date=schedule_date,
        schedule_slot=slot,
    )
