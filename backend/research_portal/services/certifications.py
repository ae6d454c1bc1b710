"""Training certification status derivation and the scientist x module matrix."""

from __future__ import annotations

import calendar
import logging
from datetime import date
from typing import Sequence
from uuid import UUID

from sqlalchemy.orm import Session

from .. import audit, models, schemas

# purpose: derive certification freshness on read and record manual certifications
# status: active
# depends_on: backend.research_portal.models.Certification

logger = logging.getLogger(__name__)

EXPIRING_WINDOW_DAYS = 30

NEVER = "never"
EXPIRED = "expired"
EXPIRING = "expiring"
VALID = "valid"


class CertificationError(RuntimeError):
    """Base error for certification operations."""


class ModuleNotFound(CertificationError):
    """Raised when a certification module cannot be located."""


class ModuleConflict(CertificationError):
    """Raised when a module name is already taken."""


class ScientistNotFound(CertificationError):
    """Raised when the certified scientist does not exist."""


def derive_status(end_date: date | None, today: date | None = None) -> str:
    if end_date is None:
        return NEVER
    today = today or date.today()
    remaining = (end_date - today).days
    if remaining < 0:
        return EXPIRED
    if remaining <= EXPIRING_WINDOW_DAYS:
        return EXPIRING
    return VALID


def add_months(start: date, months: int) -> date:
    """Calendar month addition, clamping to the last day of the target month."""

    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def list_modules(db: Session, *, active_only: bool = False) -> Sequence[models.CertificationModule]:
    query = db.query(models.CertificationModule)
    if active_only:
        query = query.filter(models.CertificationModule.is_active.is_(True))
    return query.order_by(models.CertificationModule.name.asc()).all()


def get_module(db: Session, module_id: UUID) -> models.CertificationModule:
    module = db.get(models.CertificationModule, module_id)
    if not module:
        raise ModuleNotFound("Certification module not found")
    return module


def find_module_by_name(db: Session, name: str) -> models.CertificationModule | None:
    cleaned = name.strip().lower()
    for module in list_modules(db):
        if module.name.strip().lower() == cleaned:
            return module
    return None


def create_module(db: Session, payload: schemas.CertificationModuleCreate) -> models.CertificationModule:
    if find_module_by_name(db, payload.name) is not None:
        raise ModuleConflict(f"Certification module '{payload.name}' already exists")
    module = models.CertificationModule(**payload.model_dump())
    db.add(module)
    db.flush()
    return module


def to_out(certification: models.Certification, today: date | None = None) -> schemas.CertificationOut:
    return schemas.CertificationOut(
        id=certification.id,
        scientist_id=certification.scientist_id,
        module_id=certification.module_id,
        start_date=certification.start_date,
        end_date=certification.end_date,
        certificate_file_path=certification.certificate_file_path,
        report_file_path=certification.report_file_path,
        notes=certification.notes,
        status=derive_status(certification.end_date, today),
    )


def create_certification(
    db: Session,
    payload: schemas.CertificationCreate,
    *,
    actor_id: UUID | None = None,
) -> models.Certification:
    if not db.get(models.Scientist, payload.scientist_id):
        raise ScientistNotFound("Scientist not found")
    module = get_module(db, payload.module_id)
    data = payload.model_dump()
    if data["end_date"] is None:
        data["end_date"] = add_months(payload.start_date, module.expiration_months)
    certification = models.Certification(**data, uploaded_by=actor_id)
    db.add(certification)
    db.flush()
    audit.log_action(
        db,
        actor_id,
        "create_certification",
        "certification",
        certification.id,
        {"scientist_id": str(payload.scientist_id), "module": module.name},
        commit=False,
    )
    return certification


def list_certifications(db: Session, scientist_id: UUID | None = None) -> Sequence[models.Certification]:
    query = db.query(models.Certification)
    if scientist_id:
        query = query.filter(models.Certification.scientist_id == scientist_id)
    return query.order_by(models.Certification.start_date.desc()).all()


def _latest(certifications: Sequence[models.Certification]) -> models.Certification | None:
    if not certifications:
        return None
    return max(certifications, key=lambda c: (c.end_date or date.min, c.start_date))


def build_matrix(db: Session, today: date | None = None) -> list[schemas.MatrixCell]:
    """One cell per scientist and active module, keyed on the latest certification."""

    today = today or date.today()
    scientists = db.query(models.Scientist).order_by(models.Scientist.name.asc()).all()
    modules = list_modules(db, active_only=True)
    grouped: dict[tuple[UUID, UUID], list[models.Certification]] = {}
    for certification in db.query(models.Certification).all():
        grouped.setdefault((certification.scientist_id, certification.module_id), []).append(certification)

    cells: list[schemas.MatrixCell] = []
    for scientist in scientists:
        for module in modules:
            latest = _latest(grouped.get((scientist.id, module.id), []))
            end_date = latest.end_date if latest else None
            cells.append(
                schemas.MatrixCell(
                    scientist_id=scientist.id,
                    scientist_name=scientist.name,
                    job_title=scientist.title,
                    module_id=module.id,
                    module_name=module.name,
                    certification_id=latest.id if latest else None,
                    start_date=latest.start_date if latest else None,
                    end_date=end_date,
                    certificate_file_path=latest.certificate_file_path if latest else None,
                    report_file_path=latest.report_file_path if latest else None,
                    status=derive_status(end_date, today) if latest else NEVER,
                    days_until_expiry=(end_date - today).days if end_date else None,
                )
            )
    return cells
