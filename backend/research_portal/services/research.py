"""Scientist directory and research activity (SDR) records."""

from __future__ import annotations

from typing import Sequence
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.orm import Session

from .. import models, schemas


class ResearchRecordError(RuntimeError):
    pass


class RecordNotFound(ResearchRecordError):
    pass


class RecordConflict(ResearchRecordError):
    pass


def list_scientists(db: Session, search: str | None = None) -> Sequence[models.Scientist]:
    query = db.query(models.Scientist)
    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                models.Scientist.name.ilike(pattern),
                models.Scientist.email.ilike(pattern),
                models.Scientist.staff_id.ilike(pattern),
            )
        )
    return query.order_by(models.Scientist.name.asc()).all()


def get_scientist(db: Session, scientist_id: UUID) -> models.Scientist:
    scientist = db.get(models.Scientist, scientist_id)
    if not scientist:
        raise RecordNotFound("Scientist not found")
    return scientist


def _check_scientist_unique(db: Session, data: dict, exclude: UUID | None = None) -> None:
    for field in ("email", "staff_id"):
        value = data.get(field)
        if not value:
            continue
        query = db.query(models.Scientist).filter(getattr(models.Scientist, field) == value)
        if exclude:
            query = query.filter(models.Scientist.id != exclude)
        if query.first() is not None:
            raise RecordConflict(f"A scientist with this {field.replace('_', ' ')} already exists")


def create_scientist(db: Session, payload: schemas.ScientistCreate) -> models.Scientist:
    data = payload.model_dump()
    _check_scientist_unique(db, data)
    if data.get("supervisor_id"):
        get_scientist(db, data["supervisor_id"])
    scientist = models.Scientist(**data)
    db.add(scientist)
    db.flush()
    return scientist


def update_scientist(db: Session, scientist: models.Scientist, payload: schemas.ScientistUpdate) -> models.Scientist:
    data = payload.model_dump(exclude_unset=True)
    _check_scientist_unique(db, data, exclude=scientist.id)
    if data.get("supervisor_id"):
        if data["supervisor_id"] == scientist.id:
            raise ResearchRecordError("A scientist cannot supervise themselves")
        get_scientist(db, data["supervisor_id"])
    for key, value in data.items():
        setattr(scientist, key, value)
    db.flush()
    return scientist


def list_activities(db: Session, status: str | None = None) -> Sequence[models.ResearchActivity]:
    query = db.query(models.ResearchActivity)
    if status:
        query = query.filter(models.ResearchActivity.status == status)
    return query.order_by(models.ResearchActivity.sdr_number.asc()).all()


def get_activity(db: Session, activity_id: UUID) -> models.ResearchActivity:
    activity = db.get(models.ResearchActivity, activity_id)
    if not activity:
        raise RecordNotFound("Research activity not found")
    return activity


def _check_dates(start, end) -> None:
    if start and end and end < start:
        raise ResearchRecordError("End date cannot be before start date")


def create_activity(db: Session, payload: schemas.ResearchActivityCreate) -> models.ResearchActivity:
    if (
        db.query(models.ResearchActivity)
        .filter(models.ResearchActivity.sdr_number == payload.sdr_number)
        .first()
        is not None
    ):
        raise RecordConflict(f"SDR number {payload.sdr_number} already exists")
    _check_dates(payload.start_date, payload.end_date)
    activity = models.ResearchActivity(**payload.model_dump())
    db.add(activity)
    db.flush()
    return activity


def update_activity(
    db: Session,
    activity: models.ResearchActivity,
    payload: schemas.ResearchActivityUpdate,
) -> models.ResearchActivity:
    data = payload.model_dump(exclude_unset=True)
    _check_dates(data.get("start_date", activity.start_date), data.get("end_date", activity.end_date))
    for key, value in data.items():
        setattr(activity, key, value)
    db.flush()
    return activity


def delete_activity(db: Session, activity: models.ResearchActivity) -> None:
    linked = (
        db.query(models.Publication)
        .filter(models.Publication.research_activity_id == activity.id)
        .count()
    )
    if linked:
        raise RecordConflict("Cannot delete a research activity that still has publications")
    db.delete(activity)
    db.flush()
