"""Pydantic schemas consolidating backend API contracts."""

# purpose: aggregate request and response schemas for FastAPI surfaces and services
# status: active

from datetime import datetime
from typing import Optional, Any, Dict, Literal
from pydantic import BaseModel, EmailStr, ConfigDict
from uuid import UUID

from .certifications import (
    CertificationCreate,
    CertificationModuleCreate,
    CertificationModuleOut,
    CertificationOut,
    ConfirmBatchIn,
    ConfirmBatchOut,
    ConfirmResult,
    ConfirmSummary,
    DetectedCertificate,
    MatrixCell,
    PdfImportHistoryOut,
    PendingCertification,
    ProcessBatchIn,
    ProcessBatchOut,
)
from .facilities import (
    BuildingCreate,
    BuildingOut,
    BuildingUpdate,
    RoomCreate,
    RoomOut,
    RoomUpdate,
)
from .ibc import (
    IbcApplicationCreate,
    IbcApplicationOut,
    IbcApplicationUpdate,
    IbcBoardMemberCreate,
    IbcBoardMemberOut,
    IbcBoardMemberUpdate,
    IbcCommentOut,
    PersonnelOut,
    PiCommentIn,
    ReviewerFeedbackIn,
    ReviewerFeedbackOut,
    TransitionOptions,
)
from .publications import (
    AuthorshipRoleIn,
    FieldChangeOut,
    ManuscriptHistoryOut,
    PublicationAuthorCreate,
    PublicationAuthorOut,
    PublicationCreate,
    PublicationOut,
    PublicationStatusChange,
    PublicationUpdate,
)
from .research import (
    AuthorshipStat,
    ProjectMemberCreate,
    ProjectMemberOut,
    ResearchActivityCreate,
    ResearchActivityOut,
    ResearchActivityUpdate,
    RoleOption,
    RoleOptionsOut,
    ScientistCreate,
    ScientistOut,
    ScientistSummary,
    ScientistUpdate,
)


class UserCreate(BaseModel):
    email: EmailStr
    password: str
    full_name: Optional[str] = None


class UserOut(BaseModel):
    id: UUID
    email: EmailStr
    full_name: Optional[str]
    role: str = "user"
    is_admin: bool = False
    model_config = ConfigDict(from_attributes=True)


class UserUpdate(BaseModel):
    full_name: Optional[str] = None


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class AuditLogOut(BaseModel):
    id: UUID
    user_id: UUID | None = None
    action: str
    target_type: str | None = None
    target_id: UUID | None = None
    details: Dict[str, Any] = {}
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class AuditReportItem(BaseModel):
    action: str
    count: int


class RoleAssignment(BaseModel):
    role: Literal["user", "ibc_office", "admin"]
