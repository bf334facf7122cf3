from __future__ import annotations

import logging
from typing import Any, Mapping

import bcrypt
from packages.shared.schemas.events import EntityTypeV1, EventTypeV1
from services.api.app.db.models import User
from services.api.app.services.events import log_event
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user"

# bcrypt only hashes the first 72 bytes and 5.x refuses anything longer.
MAX_PASSWORD_BYTES = 72


class AuthError(Exception):
    """Base class for account errors."""


class MissingFieldsError(AuthError):
    def __init__(self) -> None:
        super().__init__("Faltan campos obligatorios")


class EmailTakenError(AuthError):
    def __init__(self, email: str) -> None:
        super().__init__("Ya existe una cuenta con ese correo")
        self.email = email


class PasswordTooLongError(AuthError):
    def __init__(self) -> None:
        super().__init__("La contraseña no puede superar 72 bytes")


class UnknownUserError(AuthError):
    def __init__(self) -> None:
        super().__init__("Usuario no encontrado")


class WrongPasswordError(AuthError):
    def __init__(self) -> None:
        super().__init__("Contraseña incorrecta")


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def register_user(
    db: Session,
    *,
    name: str,
    email: str,
    password: str,
    address: str = "",
    is_admin: bool = False,
) -> User:
    name = (name or "").strip()
    email = _normalize_email(email)
    if not name or not email or not password:
        raise MissingFieldsError()
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise PasswordTooLongError()

    if db.scalars(select(User).where(User.email == email)).first() is not None:
        raise EmailTakenError(email)

    user = User(
        name=name,
        email=email,
        address=(address or "").strip(),
        password_hash=hash_password(password),
        is_admin=is_admin,
    )
    db.add(user)
    try:
        db.flush()
    except IntegrityError as e:
        # Lost a race against another registration with the same email.
        db.rollback()
        raise EmailTakenError(email) from e

    log_event(
        db,
        user_id=user.id,
        entity_type=EntityTypeV1.USER,
        entity_id=user.id,
        event_type=EventTypeV1.USER_REGISTERED,
        event_payload={"email": email, "is_admin": is_admin},
    )
    db.commit()

    logger.info("registered user %s", user.id)
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    user = db.scalars(select(User).where(User.email == _normalize_email(email))).first()
    if user is None:
        raise UnknownUserError()
    if not verify_password(password or "", user.password_hash):
        raise WrongPasswordError()
    return user


def session_payload(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "nombre": user.name,
        "email": user.email,
        "es_admin": bool(user.is_admin),
    }


def session_user(session: Mapping[str, Any]) -> dict[str, Any] | None:
    """Return the logged-in user payload stored in a session mapping, if any."""
    user = session.get(SESSION_USER_KEY)
    if not isinstance(user, dict) or not isinstance(user.get("id"), int):
        return None
    return user


def session_user_id(session: Mapping[str, Any]) -> int | None:
    user = session_user(session)
    return user["id"] if user else None


def is_admin(session: Mapping[str, Any]) -> bool:
    user = session_user(session)
    return bool(user and user.get("es_admin") is True)
