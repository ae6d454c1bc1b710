from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from .. import models, schemas, auth, audit
from ..rbac import ensure_role

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/me", response_model=schemas.UserOut)
async def read_profile(current_user: models.User = Depends(auth.get_current_user)):
    return current_user


@router.put("/me", response_model=schemas.UserOut)
async def update_profile(
    update: schemas.UserUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user),
):
    if update.full_name is not None:
        current_user.full_name = update.full_name
    db.add(current_user)
    db.commit()
    db.refresh(current_user)
    return current_user


@router.put("/{user_id}/role", response_model=schemas.UserOut)
async def assign_role(
    user_id: UUID,
    payload: schemas.RoleAssignment,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user),
):
    ensure_role(current_user, ["admin"])
    user = db.get(models.User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    previous = user.role
    user.role = payload.role
    audit.log_action(
        db, current_user.id, "assign_role", "user", user.id, {"from": previous, "to": payload.role}, commit=False
    )
    db.commit()
    db.refresh(user)
    return user
