"""Pydantic schemas for publications, authorship and manuscript history."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..authorship import AuthorshipParseError, AuthorshipRole
from .common import not_null
from .research import ScientistSummary


class PublicationBase(BaseModel):
    title: str
    abstract: str | None = None
    authors: str = ""
    journal: str | None = None
    volume: str | None = None
    issue: str | None = None
    pages: str | None = None
    doi: str | None = None
    publication_date: date | None = None
    publication_type: str | None = None
    prepublication_url: str | None = None
    prepublication_site: str | None = None
    vetted_for_submission_by_ip_office: bool = False
    research_activity_id: UUID | None = None


class PublicationCreate(PublicationBase):
    """New publications always start in the first workflow status."""


class PublicationUpdate(BaseModel):
    title: str | None = None
    abstract: str | None = None
    authors: str | None = None
    journal: str | None = None
    volume: str | None = None
    issue: str | None = None
    pages: str | None = None
    doi: str | None = None
    publication_date: date | None = None
    publication_type: str | None = None
    prepublication_url: str | None = None
    prepublication_site: str | None = None
    vetted_for_submission_by_ip_office: bool | None = None
    research_activity_id: UUID | None = None

    check_required = field_validator("title")(not_null)


class PublicationOut(PublicationBase):
    id: UUID
    status: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class PublicationStatusChange(BaseModel):
    status: str
    updated_fields: PublicationUpdate = Field(default_factory=PublicationUpdate)


class FieldChangeOut(BaseModel):
    field: str
    old_value: str
    new_value: str


class ManuscriptHistoryOut(BaseModel):
    id: UUID
    publication_id: UUID
    from_status: str | None = None
    to_status: str | None = None
    changed_field: str | None = None
    old_value: str | None = None
    new_value: str | None = None
    changed_by: UUID | None = None
    change_reason: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuthorshipRoleIn(BaseModel):
    base_role: Literal["First Author", "Contributing Author", "Senior Author", "Last Author"]
    is_shared: bool = False
    is_corresponding: bool = False

    def to_role(self) -> AuthorshipRole:
        return AuthorshipRole(
            base_role=self.base_role,
            is_shared=self.is_shared,
            is_corresponding=self.is_corresponding,
        )


class PublicationAuthorCreate(BaseModel):
    scientist_id: UUID
    authorship: AuthorshipRoleIn
    author_position: int | None = Field(default=None, ge=1)


class PublicationAuthorOut(BaseModel):
    id: UUID
    publication_id: UUID
    scientist_id: UUID
    authorship_type: str
    # None when the stored text predates structured roles
    authorship: AuthorshipRoleIn | None = None
    author_position: int | None = None
    scientist: ScientistSummary | None = None

    model_config = ConfigDict(from_attributes=True)

    @model_validator(mode="before")
    @classmethod
    def _expand_authorship(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return data
        try:
            role = AuthorshipRole.parse(data.authorship_type)
        except AuthorshipParseError:
            role = None
        return {
            "id": data.id,
            "publication_id": data.publication_id,
            "scientist_id": data.scientist_id,
            "authorship_type": data.authorship_type,
            "authorship": {
                "base_role": role.base_role,
                "is_shared": role.is_shared,
                "is_corresponding": role.is_corresponding,
            }
            if role
            else None,
            "author_position": data.author_position,
            "scientist": ScientistSummary.model_validate(data.scientist) if data.scientist else None,
        }
