"""Buildings and rooms with their safety attributes."""

from __future__ import annotations

import logging
from typing import Iterable, Sequence
from uuid import UUID

from sqlalchemy.orm import Session

from .. import models, schemas

logger = logging.getLogger(__name__)


class FacilityError(RuntimeError):
    """Raised when a building or room change is invalid."""


class BuildingNotFound(FacilityError):
    pass


class RoomNotFound(FacilityError):
    pass


class FacilityConflict(FacilityError):
    """Raised on duplicate building names or room numbers."""


def normalize_set(values: Iterable[str] | None) -> list[str]:
    """Trimmed, de-duplicated and sorted labels; blanks are dropped."""

    if not values:
        return []
    return sorted({value.strip() for value in values if value and value.strip()})


def building_out(building: models.Building) -> schemas.BuildingOut:
    out = schemas.BuildingOut.model_validate(building)
    out.room_count = len(building.rooms)
    return out


def list_buildings(db: Session) -> Sequence[models.Building]:
    return db.query(models.Building).order_by(models.Building.name.asc()).all()


def get_building(db: Session, building_id: UUID) -> models.Building:
    building = db.get(models.Building, building_id)
    if not building:
        raise BuildingNotFound("Building not found")
    return building


def _ensure_building_name_free(db: Session, name: str, exclude: UUID | None = None) -> None:
    query = db.query(models.Building).filter(models.Building.name == name)
    if exclude:
        query = query.filter(models.Building.id != exclude)
    if query.first() is not None:
        raise FacilityConflict(f"Building '{name}' already exists")


def create_building(db: Session, payload: schemas.BuildingCreate) -> models.Building:
    _ensure_building_name_free(db, payload.name)
    building = models.Building(**payload.model_dump())
    db.add(building)
    db.flush()
    return building


def update_building(db: Session, building: models.Building, payload: schemas.BuildingUpdate) -> models.Building:
    data = payload.model_dump(exclude_unset=True)
    if data.get("name"):
        _ensure_building_name_free(db, data["name"], exclude=building.id)
    for key, value in data.items():
        setattr(building, key, value)
    db.flush()
    return building


def delete_building(db: Session, building: models.Building) -> None:
    if building.rooms:
        raise FacilityConflict("Cannot delete a building that still has rooms")
    db.delete(building)
    db.flush()


def list_rooms(db: Session, building_id: UUID | None = None) -> Sequence[models.Room]:
    query = db.query(models.Room)
    if building_id:
        query = query.filter(models.Room.building_id == building_id)
    return query.order_by(models.Room.room_number.asc()).all()


def get_room(db: Session, room_id: UUID) -> models.Room:
    room = db.get(models.Room, room_id)
    if not room:
        raise RoomNotFound("Room not found")
    return room


def _validate_room_fields(db: Session, data: dict) -> None:
    for field, label in (("supervisor_id", "Supervisor"), ("manager_id", "Manager")):
        scientist_id = data.get(field)
        if scientist_id and not db.get(models.Scientist, scientist_id):
            raise FacilityError(f"{label} must be an existing scientist")
    for field in ("certifications", "available_ppe"):
        if field in data:
            data[field] = normalize_set(data[field])


def _ensure_room_number_free(
    db: Session,
    building_id: UUID,
    room_number: str,
    exclude: UUID | None = None,
) -> None:
    query = db.query(models.Room).filter(
        models.Room.building_id == building_id,
        models.Room.room_number == room_number,
    )
    if exclude:
        query = query.filter(models.Room.id != exclude)
    if query.first() is not None:
        raise FacilityConflict(f"Room {room_number} already exists in this building")


def create_room(db: Session, payload: schemas.RoomCreate) -> models.Room:
    get_building(db, payload.building_id)
    data = payload.model_dump()
    data["room_number"] = data["room_number"].strip()
    _validate_room_fields(db, data)
    _ensure_room_number_free(db, payload.building_id, data["room_number"])
    room = models.Room(**data)
    db.add(room)
    db.flush()
    logger.info("Registered room %s in building %s", room.room_number, room.building_id)
    return room


def update_room(db: Session, room: models.Room, payload: schemas.RoomUpdate) -> models.Room:
    data = payload.model_dump(exclude_unset=True)
    if data.get("room_number"):
        data["room_number"] = data["room_number"].strip()
        _ensure_room_number_free(db, room.building_id, data["room_number"], exclude=room.id)
    _validate_room_fields(db, data)
    for key, value in data.items():
        setattr(room, key, value)
    db.flush()
    return room


def delete_room(db: Session, room: models.Room) -> None:
    db.delete(room)
    db.flush()
