from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from services.api.app.db.deps import get_db
from services.api.app.db.models import User
from services.api.app.models.account import UserOut
from services.api.app.routers.deps import require_admin
from services.api.app.services.users import UserNotFoundError, delete_user, list_users
from sqlalchemy.orm import Session

router = APIRouter(prefix="/api/usuarios")


def user_out(u: User) -> UserOut:
    return UserOut(
        id=u.id,
        nombre=u.name,
        email=u.email,
        direccion=u.address,
        telefono=u.phone,
        es_admin=u.is_admin,
        invitado=u.password_hash is None,
        creado=u.created_at.isoformat(),
    )


@router.get("")
def read_users(db: Session = Depends(get_db), _admin: dict = Depends(require_admin)) -> dict:
    rows = [user_out(u).model_dump() for u in list_users(db)]
    return {"success": True, "total": len(rows), "data": rows}


@router.delete("/{user_id}")
def remove_user(
    user_id: int, db: Session = Depends(get_db), admin: dict = Depends(require_admin)
) -> dict:
    if user_id == admin.get("id"):
        raise HTTPException(status_code=409, detail="No puedes eliminar tu propia cuenta")

    try:
        removed = delete_user(db, user_id, admin_id=admin.get("id"))
    except UserNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    return {"success": True, "message": "Usuario eliminado", "ordenes_eliminadas": removed}
