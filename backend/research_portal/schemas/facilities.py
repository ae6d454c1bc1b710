"""Pydantic schemas for buildings and rooms."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .common import not_null


class BuildingBase(BaseModel):
    name: str
    address: str | None = None
    description: str | None = None
    total_floors: int | None = Field(default=None, ge=1)
    max_occupancy: int | None = Field(default=None, ge=1)
    emergency_contact: str | None = None
    safety_notes: str | None = None


class BuildingCreate(BuildingBase):
    """Payload for registering a building."""


class BuildingUpdate(BaseModel):
    name: str | None = None
    address: str | None = None
    description: str | None = None
    total_floors: int | None = Field(default=None, ge=1)
    max_occupancy: int | None = Field(default=None, ge=1)
    emergency_contact: str | None = None
    safety_notes: str | None = None

    check_required = field_validator("name")(not_null)


class BuildingOut(BuildingBase):
    id: UUID
    room_count: int = 0
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class RoomBase(BaseModel):
    building_id: UUID
    room_number: str
    floor: int | None = Field(default=None, ge=1)
    room_type: str | None = None
    biosafety_level: str | None = None
    capacity: int | None = Field(default=None, ge=1)
    area: float | None = Field(default=None, gt=0)
    supervisor_id: UUID | None = None
    manager_id: UUID | None = None
    certifications: list[str] = Field(default_factory=list)
    available_ppe: list[str] = Field(default_factory=list)
    equipment: str | None = None
    special_features: str | None = None
    access_restrictions: str | None = None
    maintenance_notes: str | None = None


class RoomCreate(RoomBase):
    """Payload for registering a room."""


class RoomUpdate(BaseModel):
    room_number: str | None = None
    floor: int | None = Field(default=None, ge=1)
    room_type: str | None = None
    biosafety_level: str | None = None
    capacity: int | None = Field(default=None, ge=1)
    area: float | None = Field(default=None, gt=0)
    supervisor_id: UUID | None = None
    manager_id: UUID | None = None
    certifications: list[str] | None = None
    available_ppe: list[str] | None = None
    equipment: str | None = None
    special_features: str | None = None
    access_restrictions: str | None = None
    maintenance_notes: str | None = None

    check_required = field_validator("room_number")(not_null)


class RoomOut(RoomBase):
    id: UUID
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
