"""Publication office API routes."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..auth import get_current_user
from ..database import get_db
from ..services import publications
from ..workflow import WorkflowError

# purpose: manuscripts, their status workflow, authorship and history
# status: active
# depends_on: backend.research_portal.services.publications

router = APIRouter(prefix="/api/publications", tags=["publications"])


def _load(db: Session, publication_id: UUID) -> models.Publication:
    try:
        return publications.get_publication(db, publication_id)
    except publications.PublicationNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.get("/", response_model=list[schemas.PublicationOut])
def list_publications(
    status_filter: str | None = Query(default=None, alias="status"),
    research_activity_id: UUID | None = None,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    return publications.list_publications(
        db, status=status_filter, research_activity_id=research_activity_id
    )


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=schemas.PublicationOut)
def create_publication(
    payload: schemas.PublicationCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    try:
        publication = publications.create_publication(db, payload)
        db.commit()
        db.refresh(publication)
    except publications.ResearchActivityNotFound as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return publication


@router.get("/{publication_id}", response_model=schemas.PublicationOut)
def get_publication(
    publication_id: UUID,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    return _load(db, publication_id)


@router.put("/{publication_id}", response_model=schemas.PublicationOut)
def update_publication(
    publication_id: UUID,
    payload: schemas.PublicationUpdate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    publication = _load(db, publication_id)
    try:
        publications.update_publication(db, publication, payload)
        db.commit()
        db.refresh(publication)
    except publications.ResearchActivityNotFound as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return publication


@router.delete("/{publication_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_publication(
    publication_id: UUID,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    db.delete(_load(db, publication_id))
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{publication_id}/status", response_model=schemas.PublicationOut)
def change_publication_status(
    publication_id: UUID,
    payload: schemas.PublicationStatusChange,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    publication = _load(db, publication_id)
    try:
        publications.change_status(db, publication, payload, actor_id=user.id)
        db.commit()
        db.refresh(publication)
    except (WorkflowError, publications.ResearchActivityNotFound) as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return publication


@router.get("/{publication_id}/transitions", response_model=schemas.TransitionOptions)
def publication_transitions(
    publication_id: UUID,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    return publications.transition_options(_load(db, publication_id))


@router.get("/{publication_id}/history", response_model=list[schemas.ManuscriptHistoryOut])
def publication_history(
    publication_id: UUID,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    return publications.list_history(db, _load(db, publication_id))


@router.get("/{publication_id}/authors", response_model=list[schemas.PublicationAuthorOut])
def list_authors(
    publication_id: UUID,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    return publications.list_authors(db, _load(db, publication_id))


@router.post(
    "/{publication_id}/authors",
    status_code=status.HTTP_201_CREATED,
    response_model=schemas.PublicationAuthorOut,
)
def add_author(
    publication_id: UUID,
    payload: schemas.PublicationAuthorCreate,
    response: Response,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    publication = _load(db, publication_id)
    try:
        link, created = publications.add_author(db, publication, payload)
        db.commit()
        db.refresh(link)
    except publications.ScientistNotFound as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    if not created:
        response.status_code = status.HTTP_200_OK
    return link


@router.delete("/{publication_id}/authors/{scientist_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_author(
    publication_id: UUID,
    scientist_id: UUID,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    publication = _load(db, publication_id)
    try:
        publications.remove_author(db, publication, scientist_id)
        db.commit()
    except publications.AuthorNotFound as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
