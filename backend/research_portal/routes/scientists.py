from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..auth import get_current_user
from ..database import get_db
from ..services import publications, research

# purpose: scientist directory endpoints plus per-scientist authorship statistics
# status: active
# depends_on: backend.research_portal.services.research, backend.research_portal.services.publications

router = APIRouter(prefix="/api/scientists", tags=["scientists"])


@router.get("/", response_model=list[schemas.ScientistOut])
def list_scientists(
    search: str | None = None,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    return research.list_scientists(db, search)


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=schemas.ScientistOut)
def create_scientist(
    payload: schemas.ScientistCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    try:
        scientist = research.create_scientist(db, payload)
        db.commit()
        db.refresh(scientist)
    except research.RecordConflict as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except research.RecordNotFound as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return scientist


@router.get("/{scientist_id}", response_model=schemas.ScientistOut)
def get_scientist(
    scientist_id: UUID,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    try:
        return research.get_scientist(db, scientist_id)
    except research.RecordNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.put("/{scientist_id}", response_model=schemas.ScientistOut)
def update_scientist(
    scientist_id: UUID,
    payload: schemas.ScientistUpdate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    try:
        scientist = research.get_scientist(db, scientist_id)
    except research.RecordNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    try:
        research.update_scientist(db, scientist, payload)
        db.commit()
        db.refresh(scientist)
    except research.RecordConflict as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except research.ResearchRecordError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return scientist


@router.get("/{scientist_id}/authorship-stats", response_model=list[schemas.AuthorshipStat])
def authorship_stats(
    scientist_id: UUID,
    years: int = Query(default=5, ge=1, le=50),
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    try:
        return publications.authorship_stats(db, scientist_id, years=years)
    except publications.ScientistNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
