"""Research activity team membership with single-holder role constraints."""

from __future__ import annotations

import logging
from typing import Iterable, Sequence
from uuid import UUID

from sqlalchemy.orm import Session, joinedload

from .. import audit, models, schemas

# purpose: keep at most one Principal Investigator and one Lead Scientist per SDR
# status: active
# depends_on: backend.research_portal.models.ProjectMember

logger = logging.getLogger(__name__)

PRINCIPAL_INVESTIGATOR = "Principal Investigator"
LEAD_SCIENTIST = "Lead Scientist"
TEAM_MEMBER = "Team Member"
TEAM_ROLES: tuple[str, ...] = (PRINCIPAL_INVESTIGATOR, LEAD_SCIENTIST, TEAM_MEMBER)
SINGLE_HOLDER_ROLES: tuple[str, ...] = (PRINCIPAL_INVESTIGATOR, LEAD_SCIENTIST)
PI_ELIGIBLE_TITLE = "Investigator"

PI_TITLE_NOTE = (
    "Only scientists with the job title 'Investigator' can be assigned the role of "
    "Principal Investigator"
)


class TeamCompositionError(RuntimeError):
    """Raised when a membership change would break the team composition rules."""


class ResearchActivityNotFound(TeamCompositionError):
    """Raised when the research activity cannot be located."""


class ScientistNotFound(TeamCompositionError):
    """Raised when the scientist cannot be located."""


class MemberNotFound(TeamCompositionError):
    """Raised when removing a scientist who is not on the team."""


def can_hold_principal_investigator(scientist: models.Scientist) -> bool:
    return (scientist.title or "") == PI_ELIGIBLE_TITLE


def role_holder(members: Iterable[models.ProjectMember], role: str) -> models.ProjectMember | None:
    return next((member for member in members if member.role == role), None)


def role_options(
    members: Sequence[models.ProjectMember],
    scientist: models.Scientist,
) -> schemas.RoleOptionsOut:
    """Describe which roles the add-member dialog may offer for ``scientist``."""

    options: list[schemas.RoleOption] = []
    note = None
    for role in TEAM_ROLES:
        if role == PRINCIPAL_INVESTIGATOR and not can_hold_principal_investigator(scientist):
            note = PI_TITLE_NOTE
            continue
        if role in SINGLE_HOLDER_ROLES and role_holder(members, role) is not None:
            options.append(
                schemas.RoleOption(
                    role=role,
                    enabled=False,
                    reason=f"This research activity already has a {role}",
                )
            )
            continue
        options.append(schemas.RoleOption(role=role, enabled=True))
    return schemas.RoleOptionsOut(scientist_id=scientist.id, options=options, note=note)


def check_new_member(
    members: Sequence[models.ProjectMember],
    scientist: models.Scientist,
    role: str,
) -> None:
    """Raise ``TeamCompositionError`` unless ``scientist`` may join with ``role``."""

    if role not in TEAM_ROLES:
        raise TeamCompositionError(f"Unknown team role: {role}")
    if role == PRINCIPAL_INVESTIGATOR and not can_hold_principal_investigator(scientist):
        raise TeamCompositionError(PI_TITLE_NOTE)
    if any(member.scientist_id == scientist.id for member in members):
        raise TeamCompositionError("Scientist is already a member of this research activity")
    if role in SINGLE_HOLDER_ROLES and role_holder(members, role) is not None:
        raise TeamCompositionError(f"Each research activity can only have one {role}")


def _get_activity(db: Session, research_activity_id: UUID) -> models.ResearchActivity:
    activity = db.get(models.ResearchActivity, research_activity_id)
    if not activity:
        raise ResearchActivityNotFound("Research activity not found")
    return activity


def _get_scientist(db: Session, scientist_id: UUID) -> models.Scientist:
    scientist = db.get(models.Scientist, scientist_id)
    if not scientist:
        raise ScientistNotFound("Scientist not found")
    return scientist


def list_members(db: Session, research_activity_id: UUID) -> list[models.ProjectMember]:
    _get_activity(db, research_activity_id)
    return (
        db.query(models.ProjectMember)
        .options(joinedload(models.ProjectMember.scientist))
        .filter(models.ProjectMember.research_activity_id == research_activity_id)
        .all()
    )


def options_for(db: Session, research_activity_id: UUID, scientist_id: UUID) -> schemas.RoleOptionsOut:
    members = list_members(db, research_activity_id)
    return role_options(members, _get_scientist(db, scientist_id))


def add_member(
    db: Session,
    research_activity_id: UUID,
    payload: schemas.ProjectMemberCreate,
    *,
    actor_id: UUID | None = None,
) -> models.ProjectMember:
    members = list_members(db, research_activity_id)
    scientist = _get_scientist(db, payload.scientist_id)
    check_new_member(members, scientist, payload.role)
    member = models.ProjectMember(
        research_activity_id=research_activity_id,
        scientist_id=scientist.id,
        role=payload.role,
    )
    db.add(member)
    db.flush()
    audit.log_action(
        db,
        actor_id,
        "add_team_member",
        "research_activity",
        research_activity_id,
        {"scientist_id": str(scientist.id), "role": payload.role},
        commit=False,
    )
    logger.info("Added %s as %s to research activity %s", scientist.id, payload.role, research_activity_id)
    return member


def remove_member(
    db: Session,
    research_activity_id: UUID,
    scientist_id: UUID,
    *,
    actor_id: UUID | None = None,
) -> None:
    member = (
        db.query(models.ProjectMember)
        .filter(
            models.ProjectMember.research_activity_id == research_activity_id,
            models.ProjectMember.scientist_id == scientist_id,
        )
        .one_or_none()
    )
    if member is None:
        raise MemberNotFound("Research activity member not found")
    db.delete(member)
    audit.log_action(
        db,
        actor_id,
        "remove_team_member",
        "research_activity",
        research_activity_id,
        {"scientist_id": str(scientist_id), "role": member.role},
        commit=False,
    )
