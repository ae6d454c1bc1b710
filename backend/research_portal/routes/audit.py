from uuid import UUID
from datetime import datetime
from sqlalchemy.orm import Session
from fastapi import APIRouter, Depends
from ..database import get_db
from ..auth import get_current_user
from ..rbac import OFFICE_ROLES, has_role
from .. import models, schemas, audit

router = APIRouter(prefix="/api/audit", tags=["audit"])


def _scope(user_id: UUID | None, current_user: models.User) -> UUID | None:
    # office staff may look at anyone; everyone else only at themselves
    if user_id and has_role(current_user, OFFICE_ROLES):
        return user_id
    return current_user.id


@router.get("/", response_model=list[schemas.AuditLogOut])
async def list_logs(
    user_id: UUID | None = None,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    query = db.query(models.AuditLog).filter(models.AuditLog.user_id == _scope(user_id, current_user))
    return query.order_by(models.AuditLog.created_at.desc()).all()


@router.get("/report", response_model=list[schemas.AuditReportItem])
async def audit_report(
    start: datetime,
    end: datetime,
    user_id: UUID | None = None,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    data = audit.generate_report(db, start, end, _scope(user_id, current_user))
    return data


@router.get("/targets/{target_type}/{target_id}", response_model=list[schemas.AuditLogOut])
async def target_history(
    target_type: str,
    target_id: UUID,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    # office staff see every entry; everyone else only their own actions
    user_id = None if has_role(current_user, OFFICE_ROLES) else current_user.id
    return audit.history_for(db, target_type, target_id, user_id)
