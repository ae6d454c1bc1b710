"""Training certification API routes."""

from __future__ import annotations

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..auth import get_current_user
from ..database import get_db
from ..services import certificate_import, certifications

# purpose: certification matrix, module catalogue and OCR-backed bulk import
# status: active
# depends_on: backend.research_portal.services.certifications, backend.research_portal.services.certificate_import

router = APIRouter(tags=["certifications"])


@router.get("/api/certifications/matrix", response_model=list[schemas.MatrixCell])
def certification_matrix(
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    return certifications.build_matrix(db)


@router.get("/api/certifications", response_model=list[schemas.CertificationOut])
def list_certifications(
    scientist_id: UUID | None = None,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    today = date.today()
    return [certifications.to_out(c, today) for c in certifications.list_certifications(db, scientist_id)]


@router.post(
    "/api/certifications",
    status_code=status.HTTP_201_CREATED,
    response_model=schemas.CertificationOut,
)
def create_certification(
    payload: schemas.CertificationCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    try:
        certification = certifications.create_certification(db, payload, actor_id=user.id)
        db.commit()
        db.refresh(certification)
    except certifications.CertificationError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return certifications.to_out(certification)


@router.get("/api/certification-modules", response_model=list[schemas.CertificationModuleOut])
def list_modules(
    active: bool = False,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    return certifications.list_modules(db, active_only=active)


@router.post(
    "/api/certification-modules",
    status_code=status.HTTP_201_CREATED,
    response_model=schemas.CertificationModuleOut,
)
def create_module(
    payload: schemas.CertificationModuleCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    try:
        module = certifications.create_module(db, payload)
        db.commit()
        db.refresh(module)
    except certifications.ModuleConflict as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return module


@router.post("/api/certificates/process-batch", response_model=schemas.ProcessBatchOut)
def process_certificates(
    payload: schemas.ProcessBatchIn,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    result = certificate_import.process_batch(db, payload.file_urls, actor_id=user.id)
    db.commit()
    return result


@router.post("/api/certificates/confirm-batch", response_model=schemas.ConfirmBatchOut)
def confirm_certificates(
    payload: schemas.ConfirmBatchIn,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    result = certificate_import.confirm_batch(db, payload.certifications, actor_id=user.id)
    db.commit()
    return result


@router.get("/api/pdf-import-history", response_model=list[schemas.PdfImportHistoryOut])
def pdf_import_history(
    scientist_name: str | None = None,
    status_filter: str | None = Query(default=None, alias="status"),
    date_from: date | None = None,
    date_to: date | None = None,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    return certificate_import.list_history(
        db,
        scientist_name=scientist_name,
        status=status_filter,
        date_from=date_from,
        date_to=date_to,
    )
