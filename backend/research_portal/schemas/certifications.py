"""Pydantic schemas for certification tracking and certificate imports."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

CertificationState = Literal["valid", "expiring", "expired", "never"]
DetectionStatus = Literal["detected", "unrecognized", "ocr_failed", "error"]


class CertificationModuleCreate(BaseModel):
    name: str
    description: str | None = None
    is_core: bool = False
    expiration_months: int = Field(default=36, ge=1)
    is_active: bool = True


class CertificationModuleOut(CertificationModuleCreate):
    id: UUID

    model_config = ConfigDict(from_attributes=True)


class CertificationCreate(BaseModel):
    scientist_id: UUID
    module_id: UUID
    start_date: date
    end_date: date | None = None
    certificate_file_path: str | None = None
    report_file_path: str | None = None
    notes: str | None = None


class CertificationOut(CertificationCreate):
    id: UUID
    status: CertificationState

    model_config = ConfigDict(from_attributes=True)


class MatrixCell(BaseModel):
    scientist_id: UUID
    scientist_name: str
    job_title: str | None = None
    module_id: UUID
    module_name: str
    certification_id: UUID | None = None
    start_date: date | None = None
    end_date: date | None = None
    certificate_file_path: str | None = None
    report_file_path: str | None = None
    status: CertificationState
    days_until_expiry: int | None = None


class ProcessBatchIn(BaseModel):
    file_urls: list[str] = Field(min_length=1)


class DetectedCertificate(BaseModel):
    file_name: str
    file_url: str
    status: DetectionStatus
    import_id: UUID | None = None
    extracted_text: str | None = None
    name: str | None = None
    course_name: str | None = None
    module: CertificationModuleOut | None = None
    is_new_module: bool = False
    scientist_id: UUID | None = None
    completion_date: date | None = None
    expiration_date: date | None = None
    record_id: str | None = None
    institution: str | None = None
    error: str | None = None


class ProcessBatchOut(BaseModel):
    results: list[DetectedCertificate]
    message: str


class PendingCertification(BaseModel):
    file_name: str | None = None
    file_url: str | None = None
    import_id: UUID | None = None
    scientist_id: UUID | None = None
    module_id: UUID | None = None
    start_date: date | None = None
    end_date: date | None = None
    notes: str | None = None


class ConfirmBatchIn(BaseModel):
    certifications: list[PendingCertification] = Field(min_length=1)


class ConfirmResult(BaseModel):
    file_name: str | None = None
    success: bool
    certification_id: UUID | None = None
    error: str | None = None


class ConfirmSummary(BaseModel):
    successful: int
    failed: int


class ConfirmBatchOut(BaseModel):
    results: list[ConfirmResult]
    summary: ConfirmSummary


class PdfImportHistoryOut(BaseModel):
    id: UUID
    file_name: str
    file_url: str
    uploaded_by: UUID | None = None
    assigned_scientist_id: UUID | None = None
    extracted_text: str | None = None
    extracted_data: dict[str, Any] = Field(default_factory=dict)
    processing_status: str
    ocr_provider: str | None = None
    error_message: str | None = None
    processing_time_ms: int | None = None
    uploaded_at: datetime
    processed_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
