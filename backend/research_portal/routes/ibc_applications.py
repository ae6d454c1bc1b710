"""IBC protocol application API routes."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..auth import get_current_user
from ..database import get_db
from ..services import ibc_review
from ..workflow import WorkflowError

# purpose: expose IBC application records and the office review workflow
# status: active
# depends_on: backend.research_portal.services.ibc_review

router = APIRouter(prefix="/api/ibc-applications", tags=["ibc"])


def _load(db: Session, application_id: UUID) -> models.IbcApplication:
    try:
        return ibc_review.get_application(db, application_id)
    except ibc_review.ApplicationNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.get("/", response_model=list[schemas.IbcApplicationOut])
def list_applications(
    status_filter: str | None = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    return ibc_review.list_applications(db, status=status_filter)


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=schemas.IbcApplicationOut)
def create_application(
    payload: schemas.IbcApplicationCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    try:
        application = ibc_review.create_application(db, payload, actor=user)
        db.commit()
        db.refresh(application)
    except ibc_review.ApplicationConflict as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ibc_review.ScientistNotFound as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return application


@router.get("/{application_id}", response_model=schemas.IbcApplicationOut)
def get_application(
    application_id: UUID,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    return _load(db, application_id)


@router.patch("/{application_id}", response_model=schemas.IbcApplicationOut)
def update_application(
    application_id: UUID,
    payload: schemas.IbcApplicationUpdate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    application = _load(db, application_id)
    try:
        ibc_review.update_application(db, application, payload, actor=user)
        db.commit()
        db.refresh(application)
    except (WorkflowError, ibc_review.IbcError) as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return application


@router.delete("/{application_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_application(
    application_id: UUID,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    application = _load(db, application_id)
    try:
        ibc_review.delete_application(db, application)
        db.commit()
    except ibc_review.ApplicationConflict as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{application_id}/transitions", response_model=schemas.TransitionOptions)
def application_transitions(
    application_id: UUID,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    return ibc_review.transition_options(_load(db, application_id))


@router.get("/{application_id}/personnel", response_model=list[schemas.PersonnelOut])
def application_personnel(
    application_id: UUID,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    return ibc_review.list_personnel(db, _load(db, application_id))


@router.get("/{application_id}/comments", response_model=list[schemas.IbcCommentOut])
def application_comments(
    application_id: UUID,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    return ibc_review.list_comments(db, _load(db, application_id))


@router.post("/{application_id}/reviewer-feedback", response_model=schemas.ReviewerFeedbackOut)
def reviewer_feedback(
    application_id: UUID,
    payload: schemas.ReviewerFeedbackIn,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    application = _load(db, application_id)
    try:
        ibc_review.record_reviewer_feedback(db, application, payload, actor=user)
        db.commit()
        db.refresh(application)
    except WorkflowError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return schemas.ReviewerFeedbackOut(
        message="Reviewer feedback submitted successfully",
        application=schemas.IbcApplicationOut.model_validate(application),
    )


@router.post(
    "/{application_id}/pi-comment",
    status_code=status.HTTP_201_CREATED,
    response_model=schemas.IbcCommentOut,
)
def pi_comment(
    application_id: UUID,
    payload: schemas.PiCommentIn,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    application = _load(db, application_id)
    try:
        entry = ibc_review.add_pi_comment(db, application, payload.comment)
        db.commit()
        db.refresh(entry)
    except ibc_review.IbcError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return entry
