import uuid
import sqlalchemy as sa
from sqlalchemy import (
    Column,
    String,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    JSON,
    Integer,
    Text,
    Float,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from .database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String, unique=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    full_name = Column(String)
    # user, ibc_office, admin
    role = Column(String, default="user", nullable=False)
    is_admin = Column(Boolean, default=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=_utcnow)


class Scientist(Base):
    __tablename__ = "scientists"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    first_name = Column(String)
    last_name = Column(String)
    title = Column(String)
    email = Column(String, unique=True, nullable=False)
    staff_id = Column(String, unique=True)
    department = Column(String)
    is_staff = Column(Boolean, default=False)
    supervisor_id = Column(UUID(as_uuid=True), ForeignKey("scientists.id"), nullable=True)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    memberships = relationship("ProjectMember", back_populates="scientist")
    certifications = relationship("Certification", back_populates="scientist")


class ResearchActivity(Base):
    __tablename__ = "research_activities"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    sdr_number = Column(String, unique=True, nullable=False)
    title = Column(String, nullable=False)
    short_title = Column(String)
    description = Column(Text)
    status = Column(String, default="planning", nullable=False)
    budget_source = Column(String)
    start_date = Column(Date)
    end_date = Column(Date)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    members = relationship(
        "ProjectMember",
        back_populates="research_activity",
        cascade="all, delete-orphan",
    )


class ProjectMember(Base):
    __tablename__ = "project_members"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    research_activity_id = Column(
        UUID(as_uuid=True), ForeignKey("research_activities.id"), nullable=False
    )
    scientist_id = Column(UUID(as_uuid=True), ForeignKey("scientists.id"), nullable=False)
    role = Column(String, nullable=False, default="Team Member")

    research_activity = relationship("ResearchActivity", back_populates="members")
    scientist = relationship("Scientist", back_populates="memberships")

    __table_args__ = (sa.UniqueConstraint("research_activity_id", "scientist_id"),)


class IbcApplication(Base):
    __tablename__ = "ibc_applications"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    ibc_number = Column(String, unique=True, nullable=False)
    title = Column(String, nullable=False)
    short_title = Column(String)
    description = Column(Text)
    principal_investigator_id = Column(
        UUID(as_uuid=True), ForeignKey("scientists.id"), nullable=False
    )
    biosafety_level = Column(String, nullable=False)
    risk_level = Column(String, default="low", nullable=False)
    status = Column(String, default="draft", nullable=False)
    submission_type = Column(String, default="initial", nullable=False)
    recombinant_dna = Column(Boolean, default=False)
    human_materials = Column(Boolean, default=False)
    animal_work = Column(Boolean, default=False)
    field_work = Column(Boolean, default=False)
    medical_surveillance = Column(Boolean, default=False)
    biological_agents = Column(JSON, default=list)
    review_comments = Column(JSON, default=list)
    reviewer_assignments = Column(JSON, default=list)
    protocol_team_members = Column(JSON, default=list)
    submission_date = Column(DateTime)
    vetted_date = Column(DateTime)
    under_review_date = Column(DateTime)
    approval_date = Column(DateTime)
    expiration_date = Column(Date)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    principal_investigator = relationship("Scientist")
    comments = relationship(
        "IbcApplicationComment",
        back_populates="application",
        cascade="all, delete-orphan",
        order_by="IbcApplicationComment.created_at",
    )


class IbcApplicationComment(Base):
    __tablename__ = "ibc_application_comments"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    application_id = Column(
        UUID(as_uuid=True), ForeignKey("ibc_applications.id", ondelete="CASCADE"), nullable=False
    )
    # office_comment, status_change, reviewer_feedback, pi_response
    comment_type = Column(String, nullable=False)
    author_type = Column(String, nullable=False)
    author_name = Column(String)
    comment = Column(Text, nullable=False)
    recommendation = Column(String)
    status_from = Column(String)
    status_to = Column(String)
    is_internal = Column(Boolean, default=False)
    created_at = Column(DateTime, default=_utcnow)

    application = relationship("IbcApplication", back_populates="comments")


class IbcBoardMember(Base):
    __tablename__ = "ibc_board_members"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    scientist_id = Column(UUID(as_uuid=True), ForeignKey("scientists.id"), nullable=False)
    role = Column(String, nullable=False, default="member")
    expertise = Column(JSON, default=list)
    is_active = Column(Boolean, default=True)
    appointment_date = Column(DateTime, default=_utcnow)
    term_end_date = Column(Date, nullable=False)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    scientist = relationship("Scientist")


class Publication(Base):
    __tablename__ = "publications"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    research_activity_id = Column(
        UUID(as_uuid=True), ForeignKey("research_activities.id"), nullable=True
    )
    title = Column(String, nullable=False)
    abstract = Column(Text)
    authors = Column(Text, default="")
    journal = Column(String)
    volume = Column(String)
    issue = Column(String)
    pages = Column(String)
    doi = Column(String)
    publication_date = Column(Date)
    publication_type = Column(String)
    status = Column(String, default="Concept")
    prepublication_url = Column(String)
    prepublication_site = Column(String)
    vetted_for_submission_by_ip_office = Column(Boolean, default=False)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    author_links = relationship(
        "PublicationAuthor",
        back_populates="publication",
        cascade="all, delete-orphan",
        order_by="PublicationAuthor.author_position",
    )
    history = relationship(
        "ManuscriptHistory",
        back_populates="publication",
        cascade="all, delete-orphan",
    )


class PublicationAuthor(Base):
    __tablename__ = "publication_authors"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    publication_id = Column(
        UUID(as_uuid=True), ForeignKey("publications.id", ondelete="CASCADE"), nullable=False
    )
    scientist_id = Column(UUID(as_uuid=True), ForeignKey("scientists.id"), nullable=False)
    authorship_type = Column(String, nullable=False)
    author_position = Column(Integer)

    publication = relationship("Publication", back_populates="author_links")
    scientist = relationship("Scientist")

    __table_args__ = (sa.UniqueConstraint("publication_id", "scientist_id"),)


class ManuscriptHistory(Base):
    __tablename__ = "manuscript_history"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    publication_id = Column(
        UUID(as_uuid=True), ForeignKey("publications.id", ondelete="CASCADE"), nullable=False
    )
    from_status = Column(String)
    to_status = Column(String)
    changed_field = Column(String)
    old_value = Column(Text)
    new_value = Column(Text)
    changed_by = Column(UUID(as_uuid=True), ForeignKey("users.id"))
    change_reason = Column(Text)
    created_at = Column(DateTime, default=_utcnow)

    publication = relationship("Publication", back_populates="history")


class Building(Base):
    __tablename__ = "buildings"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, unique=True, nullable=False)
    address = Column(String)
    description = Column(Text)
    total_floors = Column(Integer)
    max_occupancy = Column(Integer)
    emergency_contact = Column(String)
    safety_notes = Column(Text)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    rooms = relationship("Room", back_populates="building")


class Room(Base):
    __tablename__ = "rooms"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    building_id = Column(UUID(as_uuid=True), ForeignKey("buildings.id"), nullable=False)
    room_number = Column(String, nullable=False)
    floor = Column(Integer)
    room_type = Column(String)
    biosafety_level = Column(String)
    capacity = Column(Integer)
    area = Column(Float)
    supervisor_id = Column(UUID(as_uuid=True), ForeignKey("scientists.id"), nullable=True)
    manager_id = Column(UUID(as_uuid=True), ForeignKey("scientists.id"), nullable=True)
    certifications = Column(JSON, default=list)
    available_ppe = Column(JSON, default=list)
    equipment = Column(Text)
    special_features = Column(Text)
    access_restrictions = Column(Text)
    maintenance_notes = Column(Text)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    building = relationship("Building", back_populates="rooms")

    __table_args__ = (sa.UniqueConstraint("building_id", "room_number"),)


class CertificationModule(Base):
    __tablename__ = "certification_modules"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, unique=True, nullable=False)
    description = Column(Text)
    is_core = Column(Boolean, default=False)
    expiration_months = Column(Integer, default=36, nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=_utcnow)


class Certification(Base):
    __tablename__ = "certifications"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    scientist_id = Column(UUID(as_uuid=True), ForeignKey("scientists.id"), nullable=False)
    module_id = Column(UUID(as_uuid=True), ForeignKey("certification_modules.id"), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date)
    certificate_file_path = Column(String)
    report_file_path = Column(String)
    notes = Column(Text)
    uploaded_by = Column(UUID(as_uuid=True), ForeignKey("users.id"))
    created_at = Column(DateTime, default=_utcnow)

    scientist = relationship("Scientist", back_populates="certifications")
    module = relationship("CertificationModule")


class PdfImportHistory(Base):
    __tablename__ = "pdf_import_history"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    file_name = Column(String, nullable=False)
    file_url = Column(String, nullable=False)
    uploaded_by = Column(UUID(as_uuid=True), ForeignKey("users.id"))
    assigned_scientist_id = Column(UUID(as_uuid=True), ForeignKey("scientists.id"), nullable=True)
    extracted_text = Column(Text)
    extracted_data = Column(JSON, default=dict)
    # processing, completed, failed
    processing_status = Column(String, default="processing", nullable=False)
    ocr_provider = Column(String)
    error_message = Column(Text)
    processing_time_ms = Column(Integer)
    uploaded_at = Column(DateTime, default=_utcnow)
    processed_at = Column(DateTime)

    assigned_scientist = relationship("Scientist")


class AuditLog(Base):
    __tablename__ = "audit_logs"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"))
    action = Column(String, nullable=False)
    target_type = Column(String)
    target_id = Column(UUID(as_uuid=True))
    details = Column(JSON, default=dict)
    created_at = Column(DateTime, default=_utcnow)
