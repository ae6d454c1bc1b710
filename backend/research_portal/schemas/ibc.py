"""Pydantic schemas for IBC applications, comments and board members."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .common import not_null

from .research import ScientistSummary

IbcStatus = Literal["draft", "submitted", "vetted", "under_review", "active", "expired"]
BiosafetyLevel = Literal["BSL-1", "BSL-2", "BSL-3", "BSL-4"]
BoardRole = Literal["chair", "deputy_chair", "member"]
Recommendation = Literal["approve", "minor_revisions", "major_revisions", "reject", "defer"]


class ReviewComment(BaseModel):
    comment: str
    timestamp: datetime
    user: str | None = None


class ReviewerAssignment(BaseModel):
    reviewer_id: UUID
    status: str = "assigned"
    assigned_date: datetime


class ProtocolTeamMember(BaseModel):
    scientist_id: UUID
    role: str = "Team Member"


class IbcApplicationBase(BaseModel):
    ibc_number: str
    title: str
    short_title: str | None = None
    description: str | None = None
    principal_investigator_id: UUID
    biosafety_level: BiosafetyLevel
    risk_level: Literal["low", "moderate", "high"] = "low"
    submission_type: Literal["initial", "amendment", "renewal"] = "initial"
    recombinant_dna: bool = False
    human_materials: bool = False
    animal_work: bool = False
    field_work: bool = False
    medical_surveillance: bool = False
    biological_agents: list[str] = Field(default_factory=list)
    protocol_team_members: list[ProtocolTeamMember] = Field(default_factory=list)
    expiration_date: date | None = None


class IbcApplicationCreate(IbcApplicationBase):
    """Payload for drafting a new application."""


class IbcApplicationUpdate(BaseModel):
    """Partial update; a ``status`` is routed through the review workflow."""

    title: str | None = None
    short_title: str | None = None
    description: str | None = None
    principal_investigator_id: UUID | None = None
    biosafety_level: BiosafetyLevel | None = None
    risk_level: Literal["low", "moderate", "high"] | None = None
    recombinant_dna: bool | None = None
    human_materials: bool | None = None
    animal_work: bool | None = None
    field_work: bool | None = None
    medical_surveillance: bool | None = None
    biological_agents: list[str] | None = None
    protocol_team_members: list[ProtocolTeamMember] | None = None
    expiration_date: date | None = None
    status: IbcStatus | None = None
    review_comment: str | None = None
    reviewer_ids: list[UUID] = Field(default_factory=list)

    check_required = field_validator(
        "title", "principal_investigator_id", "biosafety_level", "risk_level", "reviewer_ids"
    )(not_null)


class IbcApplicationOut(IbcApplicationBase):
    id: UUID
    status: str
    review_comments: list[ReviewComment] = Field(default_factory=list)
    reviewer_assignments: list[ReviewerAssignment] = Field(default_factory=list)
    submission_date: datetime | None = None
    vetted_date: datetime | None = None
    under_review_date: datetime | None = None
    approval_date: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class TransitionOptions(BaseModel):
    current: str
    allowed: list[str]
    terminal: bool
    requirements: dict[str, list[str]] = Field(default_factory=dict)


class IbcCommentOut(BaseModel):
    id: UUID
    comment_type: str
    author_type: str
    author_name: str | None = None
    comment: str
    recommendation: str | None = None
    status_from: str | None = None
    status_to: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReviewerFeedbackIn(BaseModel):
    comments: str = Field(min_length=1)
    recommendation: Recommendation


class ReviewerFeedbackOut(BaseModel):
    message: str
    application: IbcApplicationOut


class PiCommentIn(BaseModel):
    comment: str


class PersonnelOut(BaseModel):
    scientist_id: UUID
    role: str
    scientist: ScientistSummary | None = None
    extra: dict[str, Any] = Field(default_factory=dict)


class IbcBoardMemberCreate(BaseModel):
    scientist_id: UUID
    role: BoardRole = "member"
    expertise: list[str] = Field(default_factory=list)
    term_end_date: date
    is_active: bool = True


class IbcBoardMemberUpdate(BaseModel):
    role: BoardRole | None = None
    expertise: list[str] | None = None
    term_end_date: date | None = None
    is_active: bool | None = None

    check_required = field_validator("role", "term_end_date", "expertise", "is_active")(not_null)


class IbcBoardMemberOut(BaseModel):
    id: UUID
    scientist_id: UUID
    role: str
    expertise: list[str] = Field(default_factory=list)
    term_end_date: date
    is_active: bool
    appointment_date: datetime | None = None
    scientist: ScientistSummary | None = None

    model_config = ConfigDict(from_attributes=True)
