from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..auth import get_current_user
from ..database import get_db
from ..rbac import ensure_role
from ..services import ibc_review

# purpose: maintain the IBC board roster used for reviewer assignment
# status: active
# depends_on: backend.research_portal.services.ibc_review

router = APIRouter(prefix="/api/ibc-board-members", tags=["ibc"])


@router.get("/", response_model=list[schemas.IbcBoardMemberOut])
def list_board_members(
    active: bool = False,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    return ibc_review.list_board_members(db, active_only=active)


@router.get("/{member_id}", response_model=schemas.IbcBoardMemberOut)
def get_board_member(
    member_id: UUID,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    try:
        return ibc_review.get_board_member(db, member_id)
    except ibc_review.BoardMemberNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=schemas.IbcBoardMemberOut)
def create_board_member(
    payload: schemas.IbcBoardMemberCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    ensure_role(user)
    try:
        member = ibc_review.create_board_member(db, payload)
        db.commit()
        db.refresh(member)
    except ibc_review.ScientistNotFound as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return member


@router.put("/{member_id}", response_model=schemas.IbcBoardMemberOut)
def update_board_member(
    member_id: UUID,
    payload: schemas.IbcBoardMemberUpdate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    ensure_role(user)
    try:
        member = ibc_review.get_board_member(db, member_id)
    except ibc_review.BoardMemberNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    ibc_review.update_board_member(db, member, payload)
    db.commit()
    db.refresh(member)
    return member
