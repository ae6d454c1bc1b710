"""Bulk import of CITI training certificates through an external OCR service."""

from __future__ import annotations

import logging
import os
import re
import time
from dataclasses import dataclass
from datetime import date, datetime, time as dt_time, timezone
from typing import Iterable, Sequence
from urllib.parse import unquote, urlparse
from uuid import UUID

import requests
from sqlalchemy import func
from sqlalchemy.orm import Session

from .. import models, schemas
from . import certifications

# purpose: turn uploaded completion reports into confirmed certification rows
# status: active
# depends_on: backend.research_portal.services.certifications

logger = logging.getLogger(__name__)

OCR_SERVICE_URL = os.getenv("OCR_SERVICE_URL", "http://localhost:8884/ocr")
OCR_TIMEOUT = float(os.getenv("OCR_TIMEOUT", "30"))
OCR_PROVIDER = "ocr_service"

DETECTED = "detected"
UNRECOGNIZED = "unrecognized"
OCR_FAILED = "ocr_failed"
ERROR = "error"

# import history rows only record processing, completed or failed
HISTORY_PROCESSING = "processing"
HISTORY_COMPLETED = "completed"
HISTORY_FAILED = "failed"
_HISTORY_STATUS = {DETECTED: HISTORY_COMPLETED}

_DATE_FORMATS = ("%d-%b-%Y", "%d %b %Y", "%b %d, %Y", "%B %d, %Y", "%Y-%m-%d", "%m/%d/%Y")

_FIELD_PATTERNS = {
    "name": re.compile(r"^Name:\s*(?P<value>.+?)(?:\s*\(ID:.*\))?\s*$", re.IGNORECASE | re.MULTILINE),
    "institution": re.compile(
        r"Institution Affiliation:\s*(?P<value>.+?)(?:\s*\(ID:.*\))?\s*$", re.IGNORECASE | re.MULTILINE
    ),
    "course_name": re.compile(r"(?:Course Learner Group|Course):\s*(?P<value>.+?)\s*$", re.IGNORECASE | re.MULTILINE),
    "record_id": re.compile(r"Record ID:\s*(?P<value>\S+)", re.IGNORECASE),
    "completion_date": re.compile(r"Completion Date:\s*(?P<value>.+?)\s*$", re.IGNORECASE | re.MULTILINE),
    "expiration_date": re.compile(r"Expiration Date:\s*(?P<value>.+?)\s*$", re.IGNORECASE | re.MULTILINE),
}


class CertificateImportError(RuntimeError):
    """Base error for certificate import operations."""


class OcrServiceError(CertificateImportError):
    """Raised when the OCR service cannot return text for a file."""


class CertificateParseError(CertificateImportError):
    """Raised when report text carries a field that cannot be interpreted."""


@dataclass(frozen=True)
class CitiReport:
    name: str | None = None
    institution: str | None = None
    course_name: str | None = None
    record_id: str | None = None
    completion_date: date | None = None
    expiration_date: date | None = None

    def as_dict(self) -> dict:
        return {
            "name": self.name,
            "institution": self.institution,
            "course_name": self.course_name,
            "record_id": self.record_id,
            "completion_date": self.completion_date.isoformat() if self.completion_date else None,
            "expiration_date": self.expiration_date.isoformat() if self.expiration_date else None,
        }


def extract_text(file_url: str) -> str:
    """Ask the OCR service for the text of ``file_url``."""

    try:
        r = requests.post(OCR_SERVICE_URL, json={"file_url": file_url}, timeout=OCR_TIMEOUT)
        r.raise_for_status()
        payload = r.json()
    except (requests.RequestException, ValueError) as exc:
        raise OcrServiceError(f"OCR request failed: {exc}") from exc
    text = payload.get("text") if isinstance(payload, dict) else None
    if not isinstance(text, str):
        raise OcrServiceError("OCR service returned no text")
    return text


def parse_report_date(value: str) -> date:
    cleaned = value.strip().rstrip(".")
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt).date()
        except ValueError:
            continue
    raise CertificateParseError(f"Unrecognized date: {value}")


def _clean_line(value: str) -> str:
    return value.strip().lstrip("•*-").strip()


def parse_citi_report(text: str) -> CitiReport:
    """Pull the completion report fields out of OCR text."""

    lines = "\n".join(_clean_line(line) for line in text.splitlines())
    found: dict[str, str] = {}
    for field, pattern in _FIELD_PATTERNS.items():
        match = pattern.search(lines)
        if match:
            found[field] = match.group("value").strip()
    return CitiReport(
        name=found.get("name"),
        institution=found.get("institution"),
        course_name=found.get("course_name"),
        record_id=found.get("record_id"),
        completion_date=parse_report_date(found["completion_date"]) if "completion_date" in found else None,
        expiration_date=parse_report_date(found["expiration_date"]) if "expiration_date" in found else None,
    )


def match_module(
    modules: Iterable[models.CertificationModule],
    course_name: str | None,
) -> models.CertificationModule | None:
    """Exact name match first, then containment in either direction."""

    if not course_name:
        return None
    course = course_name.strip().lower()
    candidates = list(modules)
    for module in candidates:
        if module.name.strip().lower() == course:
            return module
    for module in candidates:
        name = module.name.strip().lower()
        if name and (name in course or course in name):
            return module
    return None


def match_scientist(db: Session, name: str | None) -> models.Scientist | None:
    if not name:
        return None
    return (
        db.query(models.Scientist)
        .filter(func.lower(models.Scientist.name) == name.strip().lower())
        .first()
    )


def file_name_from_url(file_url: str) -> str:
    path = urlparse(file_url).path
    return unquote(path.rsplit("/", 1)[-1]) or file_url


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _process_one(
    db: Session,
    file_url: str,
    modules: Sequence[models.CertificationModule],
    actor_id: UUID | None,
) -> schemas.DetectedCertificate:
    file_name = file_name_from_url(file_url)
    history = models.PdfImportHistory(
        file_name=file_name,
        file_url=file_url,
        uploaded_by=actor_id,
        processing_status=HISTORY_PROCESSING,
        ocr_provider=OCR_PROVIDER,
    )
    db.add(history)
    db.flush()
    started = time.perf_counter()

    def finish(status: str, **fields) -> schemas.DetectedCertificate:
        history.processing_status = _HISTORY_STATUS.get(status, HISTORY_FAILED)
        history.processed_at = _utcnow()
        history.processing_time_ms = int((time.perf_counter() - started) * 1000)
        history.error_message = fields.get("error")
        db.flush()
        return schemas.DetectedCertificate(
            file_name=file_name,
            file_url=file_url,
            status=status,
            import_id=history.id,
            **fields,
        )

    try:
        text = extract_text(file_url)
    except OcrServiceError as exc:
        logger.warning("OCR failed for %s: %s", file_url, exc)
        return finish(OCR_FAILED, error=str(exc))
    history.extracted_text = text

    try:
        report = parse_citi_report(text)
    except CertificateParseError as exc:
        return finish(ERROR, extracted_text=text, error=str(exc))
    history.extracted_data = report.as_dict()

    if not report.course_name:
        return finish(UNRECOGNIZED, extracted_text=text, name=report.name, error="No CITI course found in document")

    module = match_module(modules, report.course_name)
    scientist = match_scientist(db, report.name)
    if scientist is not None:
        history.assigned_scientist_id = scientist.id
    return finish(
        DETECTED,
        extracted_text=text,
        name=report.name,
        course_name=report.course_name,
        module=schemas.CertificationModuleOut.model_validate(module) if module else None,
        is_new_module=module is None,
        scientist_id=scientist.id if scientist else None,
        completion_date=report.completion_date,
        expiration_date=report.expiration_date,
        record_id=report.record_id,
        institution=report.institution,
    )


def process_batch(
    db: Session,
    file_urls: Sequence[str],
    *,
    actor_id: UUID | None = None,
) -> schemas.ProcessBatchOut:
    modules = certifications.list_modules(db, active_only=True)
    results = [_process_one(db, url, modules, actor_id) for url in file_urls]
    detected = sum(1 for result in results if result.status == DETECTED)
    logger.info("Processed %d certificate files, %d detected", len(results), detected)
    return schemas.ProcessBatchOut(
        results=results,
        message=f"Processed {len(results)} files, detected {detected} certificates",
    )


def _confirm_one(
    db: Session,
    pending: schemas.PendingCertification,
    actor_id: UUID | None,
) -> schemas.ConfirmResult:
    missing = [
        label
        for label, value in (
            ("scientist", pending.scientist_id),
            ("module", pending.module_id),
            ("start date", pending.start_date),
        )
        if value is None
    ]
    if missing:
        return schemas.ConfirmResult(
            file_name=pending.file_name,
            success=False,
            error=f"Missing {', '.join(missing)}",
        )
    payload = schemas.CertificationCreate(
        scientist_id=pending.scientist_id,
        module_id=pending.module_id,
        start_date=pending.start_date,
        end_date=pending.end_date,
        certificate_file_path=pending.file_url,
        notes=pending.notes,
    )
    try:
        certification = certifications.create_certification(db, payload, actor_id=actor_id)
    except certifications.CertificationError as exc:
        return schemas.ConfirmResult(file_name=pending.file_name, success=False, error=str(exc))
    if pending.import_id:
        history = db.get(models.PdfImportHistory, pending.import_id)
        if history is not None:
            history.assigned_scientist_id = pending.scientist_id
            history.processing_status = HISTORY_COMPLETED
    return schemas.ConfirmResult(file_name=pending.file_name, success=True, certification_id=certification.id)


def confirm_batch(
    db: Session,
    pending: Sequence[schemas.PendingCertification],
    *,
    actor_id: UUID | None = None,
) -> schemas.ConfirmBatchOut:
    results = [_confirm_one(db, item, actor_id) for item in pending]
    db.flush()
    successful = sum(1 for result in results if result.success)
    return schemas.ConfirmBatchOut(
        results=results,
        summary=schemas.ConfirmSummary(successful=successful, failed=len(results) - successful),
    )


def list_history(
    db: Session,
    *,
    scientist_name: str | None = None,
    status: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
) -> Sequence[models.PdfImportHistory]:
    query = db.query(models.PdfImportHistory)
    if scientist_name:
        query = query.join(
            models.Scientist, models.Scientist.id == models.PdfImportHistory.assigned_scientist_id
        ).filter(models.Scientist.name.ilike(f"%{scientist_name}%"))
    if status:
        query = query.filter(models.PdfImportHistory.processing_status == status)
    if date_from:
        query = query.filter(models.PdfImportHistory.uploaded_at >= datetime.combine(date_from, dt_time.min))
    if date_to:
        query = query.filter(models.PdfImportHistory.uploaded_at <= datetime.combine(date_to, dt_time.max))
    return query.order_by(models.PdfImportHistory.uploaded_at.desc()).all()
