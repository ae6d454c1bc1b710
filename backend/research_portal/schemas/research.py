"""Pydantic schemas for scientists, research activities and team membership."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, field_validator

from .common import not_null

TeamRole = Literal["Principal Investigator", "Lead Scientist", "Team Member"]


class ScientistBase(BaseModel):
    name: str
    email: EmailStr
    first_name: str | None = None
    last_name: str | None = None
    title: str | None = None
    staff_id: str | None = None
    department: str | None = None
    is_staff: bool = False
    supervisor_id: UUID | None = None


class ScientistCreate(ScientistBase):
    """Payload for registering a scientist."""


class ScientistUpdate(BaseModel):
    name: str | None = None
    email: EmailStr | None = None
    first_name: str | None = None
    last_name: str | None = None
    title: str | None = None
    staff_id: str | None = None
    department: str | None = None
    is_staff: bool | None = None
    supervisor_id: UUID | None = None

    check_required = field_validator("name", "email")(not_null)


class ScientistOut(ScientistBase):
    id: UUID
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class ScientistSummary(BaseModel):
    id: UUID
    name: str
    title: str | None = None
    email: str
    staff_id: str | None = None
    department: str | None = None

    model_config = ConfigDict(from_attributes=True)


class ResearchActivityBase(BaseModel):
    sdr_number: str
    title: str
    short_title: str | None = None
    description: str | None = None
    status: Literal["planning", "active", "completed", "on_hold"] = "planning"
    budget_source: str | None = None
    start_date: date | None = None
    end_date: date | None = None


class ResearchActivityCreate(ResearchActivityBase):
    """Payload for creating an SDR."""


class ResearchActivityUpdate(BaseModel):
    title: str | None = None
    short_title: str | None = None
    description: str | None = None
    status: Literal["planning", "active", "completed", "on_hold"] | None = None
    budget_source: str | None = None
    start_date: date | None = None
    end_date: date | None = None

    check_required = field_validator("title", "status")(not_null)


class ResearchActivityOut(ResearchActivityBase):
    id: UUID
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class ProjectMemberCreate(BaseModel):
    scientist_id: UUID
    role: TeamRole = "Team Member"


class ProjectMemberOut(BaseModel):
    id: UUID
    research_activity_id: UUID
    scientist_id: UUID
    role: str
    scientist: ScientistSummary | None = None

    model_config = ConfigDict(from_attributes=True)


class RoleOption(BaseModel):
    role: TeamRole
    enabled: bool
    reason: str | None = None


class RoleOptionsOut(BaseModel):
    scientist_id: UUID
    options: list[RoleOption]
    note: str | None = None


class AuthorshipStat(BaseModel):
    year: int
    authorship_type: str
    count: int
