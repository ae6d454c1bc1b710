"""Publications, their status workflow, authorship and manuscript history."""

from __future__ import annotations

import logging
from collections import Counter
from datetime import date, datetime, timezone
from typing import Sequence
from uuid import UUID

from sqlalchemy.orm import Session, joinedload

from .. import audit, models, schemas
from ..authorship import AuthorshipParseError, AuthorshipRole
from ..workflow import FieldChange, FieldRequirement, WorkflowDefinition, diff_fields

# purpose: drive manuscripts from concept to publication with an append-only history
# status: active
# depends_on: backend.research_portal.workflow, backend.research_portal.authorship

logger = logging.getLogger(__name__)

CONCEPT = "Concept"
COMPLETE_DRAFT = "Complete Draft"
VETTED = "Vetted for submission"
SUBMITTED_WITH_PREPRINT = "Submitted for review with pre-publication"
SUBMITTED_WITHOUT_PREPRINT = "Submitted for review without pre-publication"
UNDER_REVIEW = "Under review"
ACCEPTED = "Accepted/In Press"
PUBLISHED = "Published"

PUBLICATION_STATUSES: tuple[str, ...] = (
    CONCEPT,
    COMPLETE_DRAFT,
    VETTED,
    SUBMITTED_WITH_PREPRINT,
    SUBMITTED_WITHOUT_PREPRINT,
    UNDER_REVIEW,
    ACCEPTED,
    PUBLISHED,
)

_JOURNAL_REQUIRED = (FieldRequirement("journal", "Journal name is required for this status"),)

PUBLICATION_WORKFLOW = WorkflowDefinition(
    name="publication",
    initial=CONCEPT,
    transitions={
        CONCEPT: (COMPLETE_DRAFT,),
        COMPLETE_DRAFT: (VETTED,),
        VETTED: (SUBMITTED_WITH_PREPRINT, SUBMITTED_WITHOUT_PREPRINT),
        SUBMITTED_WITH_PREPRINT: (UNDER_REVIEW,),
        SUBMITTED_WITHOUT_PREPRINT: (UNDER_REVIEW,),
        UNDER_REVIEW: (ACCEPTED,),
        ACCEPTED: (PUBLISHED,),
        PUBLISHED: (),
    },
    requirements={
        COMPLETE_DRAFT: (
            FieldRequirement("authors", "Authorship field is required for Complete Draft status"),
        ),
        VETTED: (
            FieldRequirement(
                "vetted_for_submission_by_ip_office",
                "IP office approval is required for Vetted for submission status",
            ),
        ),
        SUBMITTED_WITH_PREPRINT: (
            FieldRequirement("prepublication_url", "Prepublication URL is required for pre-publication submission"),
            FieldRequirement("prepublication_site", "Prepublication site is required for pre-publication submission"),
        ),
        UNDER_REVIEW: _JOURNAL_REQUIRED,
        ACCEPTED: _JOURNAL_REQUIRED,
        PUBLISHED: (
            FieldRequirement("publication_date", "Publication date is required for Published status"),
            FieldRequirement("doi", "DOI is required for Published status"),
        ),
    },
)

# statuses counted in authorship statistics
_COUNTED_STATUSES = {ACCEPTED, PUBLISHED}


class PublicationError(RuntimeError):
    """Base error for publication operations."""


class PublicationNotFound(PublicationError):
    """Raised when a publication cannot be located."""


class AuthorNotFound(PublicationError):
    """Raised when removing an author who is not linked to the publication."""


class ScientistNotFound(PublicationError):
    """Raised when a referenced scientist does not exist."""


class ResearchActivityNotFound(PublicationError):
    """Raised when a publication points at an unknown research activity."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def get_publication(db: Session, publication_id: UUID) -> models.Publication:
    publication = db.get(models.Publication, publication_id)
    if not publication:
        raise PublicationNotFound("Publication not found")
    return publication


def list_publications(
    db: Session,
    *,
    status: str | None = None,
    research_activity_id: UUID | None = None,
) -> Sequence[models.Publication]:
    query = db.query(models.Publication)
    if status:
        query = query.filter(models.Publication.status == status)
    if research_activity_id:
        query = query.filter(models.Publication.research_activity_id == research_activity_id)
    return query.order_by(models.Publication.created_at.desc()).all()


def _check_activity(db: Session, research_activity_id: UUID | None) -> None:
    if research_activity_id and not db.get(models.ResearchActivity, research_activity_id):
        raise ResearchActivityNotFound("Research activity not found")


def create_publication(db: Session, payload: schemas.PublicationCreate) -> models.Publication:
    _check_activity(db, payload.research_activity_id)
    publication = models.Publication(**payload.model_dump(), status=PUBLICATION_WORKFLOW.initial)
    db.add(publication)
    db.flush()
    return publication


def update_publication(
    db: Session,
    publication: models.Publication,
    payload: schemas.PublicationUpdate,
) -> models.Publication:
    """Edit descriptive fields; the status only moves through ``change_status``."""

    data = payload.model_dump(exclude_unset=True)
    _check_activity(db, data.get("research_activity_id"))
    for key, value in data.items():
        setattr(publication, key, value)
    publication.updated_at = _utcnow()
    db.flush()
    return publication


def transition_options(publication: models.Publication) -> schemas.TransitionOptions:
    allowed = PUBLICATION_WORKFLOW.allowed_next(publication.status)
    return schemas.TransitionOptions(
        current=PUBLICATION_WORKFLOW.normalize(publication.status),
        allowed=list(allowed),
        terminal=PUBLICATION_WORKFLOW.is_terminal(publication.status),
        requirements={
            target: [req.field for req in PUBLICATION_WORKFLOW.required_fields(target)]
            for target in allowed
        },
    )


def _merged_view(publication: models.Publication, updates: dict) -> dict:
    view = {column.name: getattr(publication, column.name) for column in models.Publication.__table__.columns}
    view.update(updates)
    return view


def change_status(
    db: Session,
    publication: models.Publication,
    payload: schemas.PublicationStatusChange,
    *,
    actor_id: UUID | None = None,
) -> tuple[models.Publication, list[FieldChange]]:
    """Validate and apply a status change with the fields collected for it.

    The submitted fields are merged over the stored record before the
    transition guards run, so a single request can both supply the DOI and
    move the manuscript to Published. One history row is written for the
    status change and one per changed field.
    """

    updates = payload.updated_fields.model_dump(exclude_unset=True)
    _check_activity(db, updates.get("research_activity_id"))
    current = PUBLICATION_WORKFLOW.normalize(publication.status)
    PUBLICATION_WORKFLOW.check_transition(current, payload.status, _merged_view(publication, updates))

    changes = diff_fields(publication, updates)
    for key, value in updates.items():
        setattr(publication, key, value)
    publication.status = payload.status
    publication.updated_at = _utcnow()

    now = _utcnow()
    db.add(
        models.ManuscriptHistory(
            publication_id=publication.id,
            from_status=current,
            to_status=payload.status,
            changed_by=actor_id,
            change_reason=f"Status changed from {current} to {payload.status}",
            created_at=now,
        )
    )
    for change in changes:
        db.add(
            models.ManuscriptHistory(
                publication_id=publication.id,
                from_status=current,
                to_status=payload.status,
                changed_field=change.field,
                old_value=change.old_value,
                new_value=change.new_value,
                changed_by=actor_id,
                change_reason=f"{change.field} changed during status transition",
                created_at=now,
            )
        )
    audit.log_action(
        db,
        actor_id,
        "publication_status_change",
        "publication",
        publication.id,
        {"from": current, "to": payload.status, "fields": [c.field for c in changes]},
        commit=False,
    )
    db.flush()
    logger.info("Publication %s moved %s -> %s", publication.id, current, payload.status)
    return publication, changes


def list_history(db: Session, publication: models.Publication) -> Sequence[models.ManuscriptHistory]:
    return (
        db.query(models.ManuscriptHistory)
        .filter(models.ManuscriptHistory.publication_id == publication.id)
        .order_by(models.ManuscriptHistory.created_at.desc())
        .all()
    )


def list_authors(db: Session, publication: models.Publication) -> Sequence[models.PublicationAuthor]:
    return (
        db.query(models.PublicationAuthor)
        .options(joinedload(models.PublicationAuthor.scientist))
        .filter(models.PublicationAuthor.publication_id == publication.id)
        .order_by(models.PublicationAuthor.author_position.asc())
        .all()
    )


def add_author(
    db: Session,
    publication: models.Publication,
    payload: schemas.PublicationAuthorCreate,
) -> tuple[models.PublicationAuthor, bool]:
    """Link a scientist as author; returns the link and whether it was created."""

    if not db.get(models.Scientist, payload.scientist_id):
        raise ScientistNotFound("Scientist not found")
    role = payload.authorship.to_role()
    existing = (
        db.query(models.PublicationAuthor)
        .filter(
            models.PublicationAuthor.publication_id == publication.id,
            models.PublicationAuthor.scientist_id == payload.scientist_id,
        )
        .one_or_none()
    )
    if existing is not None:
        try:
            current = AuthorshipRole.parse(existing.authorship_type)
        except AuthorshipParseError:
            current = role
        existing.authorship_type = current.merge(role).serialize()
        if payload.author_position is not None:
            existing.author_position = payload.author_position
        db.flush()
        return existing, False
    link = models.PublicationAuthor(
        publication_id=publication.id,
        scientist_id=payload.scientist_id,
        authorship_type=role.serialize(),
        author_position=payload.author_position,
    )
    db.add(link)
    db.flush()
    return link, True


def remove_author(db: Session, publication: models.Publication, scientist_id: UUID) -> None:
    link = (
        db.query(models.PublicationAuthor)
        .filter(
            models.PublicationAuthor.publication_id == publication.id,
            models.PublicationAuthor.scientist_id == scientist_id,
        )
        .one_or_none()
    )
    if link is None:
        raise AuthorNotFound("Publication author not found")
    db.delete(link)
    db.flush()


def authorship_stats(
    db: Session,
    scientist_id: UUID,
    *,
    years: int = 5,
    today: date | None = None,
) -> list[schemas.AuthorshipStat]:
    """Count accepted or published papers per year and base authorship role."""

    if not db.get(models.Scientist, scientist_id):
        raise ScientistNotFound("Scientist not found")
    today = today or date.today()
    # window covers the current calendar year and the years - 1 before it
    cutoff = date(today.year - years + 1, 1, 1)
    rows = (
        db.query(models.PublicationAuthor, models.Publication)
        .join(models.Publication, models.Publication.id == models.PublicationAuthor.publication_id)
        .filter(
            models.PublicationAuthor.scientist_id == scientist_id,
            models.Publication.status.in_(_COUNTED_STATUSES),
            models.Publication.publication_date.is_not(None),
            models.Publication.publication_date >= cutoff,
        )
        .all()
    )
    counts: Counter[tuple[int, str]] = Counter()
    for link, publication in rows:
        try:
            role = AuthorshipRole.parse(link.authorship_type)
        except AuthorshipParseError:
            logger.warning("Skipping unparseable authorship %r on %s", link.authorship_type, publication.id)
            continue
        counts[(publication.publication_date.year, role.base_role)] += 1
        if role.is_corresponding:
            counts[(publication.publication_date.year, "Corresponding Author")] += 1
    return [
        schemas.AuthorshipStat(year=year, authorship_type=role, count=count)
        for (year, role), count in sorted(counts.items(), key=lambda item: (-item[0][0], item[0][1]))
    ]
