from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..auth import get_current_user
from ..database import get_db
from ..services import facilities

# purpose: building and room registry used by biosafety records
# status: active
# depends_on: backend.research_portal.services.facilities

router = APIRouter(tags=["facilities"])


def _http_error(exc: facilities.FacilityError) -> HTTPException:
    if isinstance(exc, (facilities.BuildingNotFound, facilities.RoomNotFound)):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, facilities.FacilityConflict):
        code = status.HTTP_409_CONFLICT
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=str(exc))


@router.get("/api/buildings", response_model=list[schemas.BuildingOut])
def list_buildings(
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    return [facilities.building_out(b) for b in facilities.list_buildings(db)]


@router.post("/api/buildings", status_code=status.HTTP_201_CREATED, response_model=schemas.BuildingOut)
def create_building(
    payload: schemas.BuildingCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    try:
        building = facilities.create_building(db, payload)
        db.commit()
        db.refresh(building)
    except facilities.FacilityError as exc:
        db.rollback()
        raise _http_error(exc) from exc
    return facilities.building_out(building)


@router.get("/api/buildings/{building_id}", response_model=schemas.BuildingOut)
def get_building(
    building_id: UUID,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    try:
        return facilities.building_out(facilities.get_building(db, building_id))
    except facilities.FacilityError as exc:
        raise _http_error(exc) from exc


@router.put("/api/buildings/{building_id}", response_model=schemas.BuildingOut)
def update_building(
    building_id: UUID,
    payload: schemas.BuildingUpdate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    try:
        building = facilities.get_building(db, building_id)
        facilities.update_building(db, building, payload)
        db.commit()
        db.refresh(building)
    except facilities.FacilityError as exc:
        db.rollback()
        raise _http_error(exc) from exc
    return facilities.building_out(building)


@router.delete("/api/buildings/{building_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_building(
    building_id: UUID,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    try:
        facilities.delete_building(db, facilities.get_building(db, building_id))
        db.commit()
    except facilities.FacilityError as exc:
        db.rollback()
        raise _http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/api/rooms", response_model=list[schemas.RoomOut])
def list_rooms(
    building_id: UUID | None = None,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    return facilities.list_rooms(db, building_id)


@router.post("/api/rooms", status_code=status.HTTP_201_CREATED, response_model=schemas.RoomOut)
def create_room(
    payload: schemas.RoomCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    try:
        room = facilities.create_room(db, payload)
        db.commit()
        db.refresh(room)
    except facilities.FacilityError as exc:
        db.rollback()
        raise _http_error(exc) from exc
    return room


@router.get("/api/rooms/{room_id}", response_model=schemas.RoomOut)
def get_room(
    room_id: UUID,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    try:
        return facilities.get_room(db, room_id)
    except facilities.FacilityError as exc:
        raise _http_error(exc) from exc


@router.put("/api/rooms/{room_id}", response_model=schemas.RoomOut)
def update_room(
    room_id: UUID,
    payload: schemas.RoomUpdate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    try:
        room = facilities.get_room(db, room_id)
        facilities.update_room(db, room, payload)
        db.commit()
        db.refresh(room)
    except facilities.FacilityError as exc:
        db.rollback()
        raise _http_error(exc) from exc
    return room


@router.delete("/api/rooms/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_room(
    room_id: UUID,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    try:
        facilities.delete_room(db, facilities.get_room(db, room_id))
        db.commit()
    except facilities.FacilityError as exc:
        db.rollback()
        raise _http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
