from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..auth import get_current_user
from ..database import get_db
from ..services import research, team_composition

# purpose: research activity (SDR) records and their team membership
# status: active
# depends_on: backend.research_portal.services.team_composition

router = APIRouter(prefix="/api/research-activities", tags=["research-activities"])


def _load(db: Session, activity_id: UUID) -> models.ResearchActivity:
    try:
        return research.get_activity(db, activity_id)
    except research.RecordNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.get("/", response_model=list[schemas.ResearchActivityOut])
def list_activities(
    status_filter: str | None = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    return research.list_activities(db, status_filter)


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=schemas.ResearchActivityOut)
def create_activity(
    payload: schemas.ResearchActivityCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    try:
        activity = research.create_activity(db, payload)
        db.commit()
        db.refresh(activity)
    except research.RecordConflict as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except research.ResearchRecordError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return activity


@router.get("/{activity_id}", response_model=schemas.ResearchActivityOut)
def get_activity(
    activity_id: UUID,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    return _load(db, activity_id)


@router.put("/{activity_id}", response_model=schemas.ResearchActivityOut)
def update_activity(
    activity_id: UUID,
    payload: schemas.ResearchActivityUpdate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    activity = _load(db, activity_id)
    try:
        research.update_activity(db, activity, payload)
        db.commit()
        db.refresh(activity)
    except research.ResearchRecordError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return activity


@router.delete("/{activity_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_activity(
    activity_id: UUID,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    try:
        research.delete_activity(db, _load(db, activity_id))
        db.commit()
    except research.RecordConflict as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{activity_id}/members", response_model=list[schemas.ProjectMemberOut])
def list_members(
    activity_id: UUID,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    try:
        return team_composition.list_members(db, activity_id)
    except team_composition.ResearchActivityNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.get("/{activity_id}/members/role-options", response_model=schemas.RoleOptionsOut)
def member_role_options(
    activity_id: UUID,
    scientist_id: UUID,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    try:
        return team_composition.options_for(db, activity_id, scientist_id)
    except (team_composition.ResearchActivityNotFound, team_composition.ScientistNotFound) as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.post(
    "/{activity_id}/members",
    status_code=status.HTTP_201_CREATED,
    response_model=schemas.ProjectMemberOut,
)
def add_member(
    activity_id: UUID,
    payload: schemas.ProjectMemberCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    try:
        member = team_composition.add_member(db, activity_id, payload, actor_id=user.id)
        db.commit()
        db.refresh(member)
    except (team_composition.ResearchActivityNotFound, team_composition.ScientistNotFound) as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except team_composition.TeamCompositionError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return member


@router.delete("/{activity_id}/members/{scientist_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_member(
    activity_id: UUID,
    scientist_id: UUID,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    try:
        team_composition.remove_member(db, activity_id, scientist_id, actor_id=user.id)
        db.commit()
    except team_composition.MemberNotFound as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
