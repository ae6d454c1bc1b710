"""IBC protocol applications and their review workflow."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Iterable, Sequence
from uuid import UUID

from sqlalchemy.orm import Session

from .. import audit, models, schemas
from ..workflow import WorkflowDefinition, WorkflowError

# purpose: gate IBC application status changes and keep the review timeline
# status: active
# depends_on: backend.research_portal.workflow, backend.research_portal.models.IbcApplication

logger = logging.getLogger(__name__)

IBC_WORKFLOW = WorkflowDefinition(
    name="ibc_application",
    initial="draft",
    transitions={
        "draft": ("submitted",),
        "submitted": ("vetted", "draft"),
        "vetted": ("under_review", "submitted"),
        "under_review": ("active", "vetted"),
        "active": ("expired",),
        "expired": (),
    },
)

STATUS_LABELS: dict[str, str] = {
    "draft": "Draft",
    "submitted": "Submitted",
    "vetted": "Vetted",
    "under_review": "Under Review",
    "active": "Active",
    "expired": "Expired",
}

# status entered -> timeline column stamped on first entry
_TIMELINE_COLUMNS: dict[str, str] = {
    "submitted": "submission_date",
    "vetted": "vetted_date",
    "under_review": "under_review_date",
    "active": "approval_date",
}

_RECOMMENDATION_OUTCOMES: dict[str, tuple[str, str]] = {
    "approve": ("active", "Application approved by reviewer"),
    "minor_revisions": ("vetted", "Application returned to office for minor revisions"),
    "major_revisions": ("vetted", "Application returned to office for major revisions"),
    "reject": ("vetted", "Application returned to office after reviewer rejection"),
}


class IbcError(RuntimeError):
    """Base error for IBC application operations."""


class ApplicationNotFound(IbcError):
    """Raised when an application cannot be located."""


class ApplicationConflict(IbcError):
    """Raised when an IBC number is already registered."""


class MissingReviewers(WorkflowError):
    """Raised when an application is sent to review without reviewers."""


class ReviewerNotFound(IbcError):
    """Raised when a reviewer id is not an active board member."""


class ScientistNotFound(IbcError):
    """Raised when a referenced scientist does not exist."""


class BoardMemberNotFound(IbcError):
    """Raised when a board member cannot be located."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _label(status: str | None) -> str:
    return STATUS_LABELS.get(status or "", status or "Unknown")


def _actor_name(actor: models.User | None) -> str:
    if actor is None:
        return "IBC Office"
    return actor.full_name or actor.email


def allowed_statuses(application: models.IbcApplication) -> tuple[str, ...]:
    return IBC_WORKFLOW.allowed_next(application.status)


def transition_options(application: models.IbcApplication) -> schemas.TransitionOptions:
    allowed = allowed_statuses(application)
    requirements = {"under_review": ["At least one reviewer must be assigned"]} if "under_review" in allowed else {}
    return schemas.TransitionOptions(
        current=IBC_WORKFLOW.normalize(application.status),
        allowed=list(allowed),
        terminal=IBC_WORKFLOW.is_terminal(application.status),
        requirements=requirements,
    )


def get_application(db: Session, application_id: UUID) -> models.IbcApplication:
    application = db.get(models.IbcApplication, application_id)
    if not application:
        raise ApplicationNotFound("IBC application not found")
    return application


def list_applications(db: Session, *, status: str | None = None) -> Sequence[models.IbcApplication]:
    query = db.query(models.IbcApplication)
    if status:
        query = query.filter(models.IbcApplication.status == status)
    return query.order_by(models.IbcApplication.created_at.desc()).all()


def _ensure_scientist(db: Session, scientist_id: UUID) -> models.Scientist:
    scientist = db.get(models.Scientist, scientist_id)
    if not scientist:
        raise ScientistNotFound("Principal investigator not found")
    return scientist


def create_application(
    db: Session,
    payload: schemas.IbcApplicationCreate,
    *,
    actor: models.User | None = None,
) -> models.IbcApplication:
    _ensure_scientist(db, payload.principal_investigator_id)
    existing = (
        db.query(models.IbcApplication)
        .filter(models.IbcApplication.ibc_number == payload.ibc_number)
        .first()
    )
    if existing:
        raise ApplicationConflict(f"IBC number {payload.ibc_number} already exists")
    data = payload.model_dump(mode="json", exclude={"principal_investigator_id", "expiration_date"})
    application = models.IbcApplication(
        **data,
        principal_investigator_id=payload.principal_investigator_id,
        expiration_date=payload.expiration_date,
        status=IBC_WORKFLOW.initial,
        review_comments=[],
        reviewer_assignments=[],
    )
    db.add(application)
    db.flush()
    audit.log_action(
        db,
        actor.id if actor else None,
        "create_ibc_application",
        "ibc_application",
        application.id,
        {"ibc_number": application.ibc_number},
        commit=False,
    )
    return application


def update_application(
    db: Session,
    application: models.IbcApplication,
    payload: schemas.IbcApplicationUpdate,
    *,
    actor: models.User | None = None,
) -> models.IbcApplication:
    """Apply a partial update; a status change goes through ``transition``."""

    updates = payload.model_dump(exclude_unset=True, exclude={"status", "review_comment", "reviewer_ids"})
    target = payload.status
    # validate the status change before touching any column
    if target and target != application.status:
        _validate(db, application, target, payload.reviewer_ids)
    if updates.get("principal_investigator_id"):
        _ensure_scientist(db, updates["principal_investigator_id"])
    for key, value in updates.items():
        if key == "protocol_team_members" and value is not None:
            value = [
                {"scientist_id": str(member["scientist_id"]), "role": member["role"]}
                for member in value
            ]
        setattr(application, key, value)
    if target and target != application.status:
        transition(
            db,
            application,
            target,
            comment=payload.review_comment,
            reviewer_ids=payload.reviewer_ids,
            actor=actor,
        )
    elif payload.review_comment:
        _append_review_comment(db, application, payload.review_comment, actor)
    application.updated_at = _utcnow()
    db.flush()
    return application


def _active_reviewers(db: Session, reviewer_ids: Iterable[UUID]) -> list[models.IbcBoardMember]:
    today = date.today()
    reviewers: list[models.IbcBoardMember] = []
    for reviewer_id in reviewer_ids:
        member = db.get(models.IbcBoardMember, reviewer_id)
        if not member or not member.is_active or member.term_end_date < today:
            raise ReviewerNotFound(f"Reviewer {reviewer_id} is not an active IBC board member")
        reviewers.append(member)
    return reviewers


def _validate(
    db: Session,
    application: models.IbcApplication,
    target: str,
    reviewer_ids: Sequence[UUID],
) -> list[models.IbcBoardMember]:
    IBC_WORKFLOW.check_transition(application.status, target)
    if target != "under_review":
        return []
    if not reviewer_ids:
        raise MissingReviewers("Please select at least one reviewer before moving to Under Review")
    return _active_reviewers(db, reviewer_ids)


def _append_review_comment(
    db: Session,
    application: models.IbcApplication,
    comment: str,
    actor: models.User | None,
) -> None:
    now = _utcnow()
    application.review_comments = list(application.review_comments or []) + [
        {"comment": comment, "timestamp": now.isoformat(), "user": _actor_name(actor)}
    ]
    db.add(
        models.IbcApplicationComment(
            application_id=application.id,
            comment_type="office_comment",
            author_type="office",
            author_name=_actor_name(actor),
            comment=comment,
            created_at=now,
        )
    )


def transition(
    db: Session,
    application: models.IbcApplication,
    target: str,
    *,
    comment: str | None = None,
    reviewer_ids: Sequence[UUID] = (),
    actor: models.User | None = None,
    reason: str | None = None,
) -> models.IbcApplication:
    """Move ``application`` to ``target``; nothing is written if validation fails."""

    reviewers = _validate(db, application, target, reviewer_ids)
    current = IBC_WORKFLOW.normalize(application.status)
    now = _utcnow()

    if reviewers:
        assignments = list(application.reviewer_assignments or [])
        assigned = {entry.get("reviewer_id") for entry in assignments}
        for reviewer in reviewers:
            if str(reviewer.id) in assigned:
                continue
            assignments.append(
                {
                    "reviewer_id": str(reviewer.id),
                    "status": "assigned",
                    "assigned_date": now.isoformat(),
                }
            )
        application.reviewer_assignments = assignments

    application.status = target
    column = _TIMELINE_COLUMNS.get(target)
    if column and getattr(application, column) is None:
        setattr(application, column, now)

    db.add(
        models.IbcApplicationComment(
            application_id=application.id,
            comment_type="status_change",
            author_type="system",
            author_name="System",
            comment=reason or f"Status changed from {_label(current)} to {_label(target)}",
            status_from=current,
            status_to=target,
            created_at=now,
        )
    )
    if comment:
        _append_review_comment(db, application, comment, actor)
    audit.log_action(
        db,
        actor.id if actor else None,
        "ibc_status_change",
        "ibc_application",
        application.id,
        {"from": current, "to": target, "reviewers": [str(r.id) for r in reviewers]},
        commit=False,
    )
    logger.info("IBC application %s moved %s -> %s", application.ibc_number, current, target)
    return application


def record_reviewer_feedback(
    db: Session,
    application: models.IbcApplication,
    payload: schemas.ReviewerFeedbackIn,
    *,
    actor: models.User | None = None,
) -> models.IbcApplication:
    if application.status != "under_review":
        raise WorkflowError("Reviewer feedback can only be submitted while the application is under review")
    db.add(
        models.IbcApplicationComment(
            application_id=application.id,
            comment_type="reviewer_feedback",
            author_type="reviewer",
            author_name=_actor_name(actor) if actor else "IBC Reviewer",
            comment=payload.comments,
            recommendation=payload.recommendation,
            created_at=_utcnow(),
        )
    )
    outcome = _RECOMMENDATION_OUTCOMES.get(payload.recommendation)
    if outcome is None:
        db.flush()
        return application
    target, reason = outcome
    transition(db, application, target, actor=actor, reason=reason)
    db.flush()
    return application


def add_pi_comment(db: Session, application: models.IbcApplication, comment: str) -> models.IbcApplicationComment:
    text = (comment or "").strip()
    if not text:
        raise IbcError("Comment is required")
    pi = db.get(models.Scientist, application.principal_investigator_id)
    entry = models.IbcApplicationComment(
        application_id=application.id,
        comment_type="pi_response",
        author_type="pi",
        author_name=pi.name if pi else "Principal Investigator",
        comment=text,
        created_at=_utcnow(),
    )
    db.add(entry)
    db.flush()
    return entry


def list_comments(db: Session, application: models.IbcApplication) -> Sequence[models.IbcApplicationComment]:
    return (
        db.query(models.IbcApplicationComment)
        .filter(models.IbcApplicationComment.application_id == application.id)
        .order_by(models.IbcApplicationComment.created_at.asc())
        .all()
    )


def list_personnel(db: Session, application: models.IbcApplication) -> list[schemas.PersonnelOut]:
    personnel: list[schemas.PersonnelOut] = []
    for entry in application.protocol_team_members or []:
        scientist_id = entry.get("scientist_id")
        if not scientist_id:
            continue
        scientist = db.get(models.Scientist, UUID(str(scientist_id)))
        extra = {k: v for k, v in entry.items() if k not in {"scientist_id", "role"}}
        personnel.append(
            schemas.PersonnelOut(
                scientist_id=UUID(str(scientist_id)),
                role=entry.get("role") or "Team Member",
                scientist=schemas.ScientistSummary.model_validate(scientist) if scientist else None,
                extra=extra,
            )
        )
    return personnel


def list_board_members(db: Session, *, active_only: bool = False) -> Sequence[models.IbcBoardMember]:
    query = db.query(models.IbcBoardMember)
    if active_only:
        query = query.filter(
            models.IbcBoardMember.is_active.is_(True),
            models.IbcBoardMember.term_end_date >= date.today(),
        )
    return query.order_by(models.IbcBoardMember.role.asc()).all()


def get_board_member(db: Session, member_id: UUID) -> models.IbcBoardMember:
    member = db.get(models.IbcBoardMember, member_id)
    if not member:
        raise BoardMemberNotFound("IBC board member not found")
    return member


def create_board_member(db: Session, payload: schemas.IbcBoardMemberCreate) -> models.IbcBoardMember:
    if not db.get(models.Scientist, payload.scientist_id):
        raise ScientistNotFound("Scientist not found")
    member = models.IbcBoardMember(**payload.model_dump())
    db.add(member)
    db.flush()
    return member


def update_board_member(
    db: Session,
    member: models.IbcBoardMember,
    payload: schemas.IbcBoardMemberUpdate,
) -> models.IbcBoardMember:
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(member, key, value)
    member.updated_at = _utcnow()
    db.flush()
    return member


def delete_application(db: Session, application: models.IbcApplication) -> None:
    if IBC_WORKFLOW.normalize(application.status) != IBC_WORKFLOW.initial:
        raise ApplicationConflict("Only draft applications can be deleted")
    db.delete(application)
    db.flush()
