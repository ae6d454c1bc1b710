"""initial research compliance schema"""

from alembic import op
import sqlalchemy as sa
from typing import Sequence, Union

revision: str = '20250101_01'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column('id', sa.UUID(as_uuid=True), primary_key=True)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        _id(),
        sa.Column('email', sa.String(), nullable=False, unique=True),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('full_name', sa.String()),
        sa.Column('role', sa.String(), nullable=False, server_default='user'),
        sa.Column('is_admin', sa.Boolean(), server_default=sa.false()),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_table(
        'scientists',
        _id(),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('first_name', sa.String()),
        sa.Column('last_name', sa.String()),
        sa.Column('title', sa.String()),
        sa.Column('email', sa.String(), nullable=False, unique=True),
        sa.Column('staff_id', sa.String(), unique=True),
        sa.Column('department', sa.String()),
        sa.Column('is_staff', sa.Boolean(), server_default=sa.false()),
        sa.Column('supervisor_id', sa.UUID(as_uuid=True), sa.ForeignKey('scientists.id'), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        'research_activities',
        _id(),
        sa.Column('sdr_number', sa.String(), nullable=False, unique=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('short_title', sa.String()),
        sa.Column('description', sa.Text()),
        sa.Column('status', sa.String(), nullable=False, server_default='planning'),
        sa.Column('budget_source', sa.String()),
        sa.Column('start_date', sa.Date()),
        sa.Column('end_date', sa.Date()),
        *_timestamps(),
    )
    op.create_table(
        'project_members',
        _id(),
        sa.Column('research_activity_id', sa.UUID(as_uuid=True), sa.ForeignKey('research_activities.id'), nullable=False),
        sa.Column('scientist_id', sa.UUID(as_uuid=True), sa.ForeignKey('scientists.id'), nullable=False),
        sa.Column('role', sa.String(), nullable=False, server_default='Team Member'),
        sa.UniqueConstraint('research_activity_id', 'scientist_id'),
    )
    op.create_table(
        'ibc_applications',
        _id(),
        sa.Column('ibc_number', sa.String(), nullable=False, unique=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('short_title', sa.String()),
        sa.Column('description', sa.Text()),
        sa.Column('principal_investigator_id', sa.UUID(as_uuid=True), sa.ForeignKey('scientists.id'), nullable=False),
        sa.Column('biosafety_level', sa.String(), nullable=False),
        sa.Column('risk_level', sa.String(), nullable=False, server_default='low'),
        sa.Column('status', sa.String(), nullable=False, server_default='draft'),
        sa.Column('submission_type', sa.String(), nullable=False, server_default='initial'),
        sa.Column('recombinant_dna', sa.Boolean(), server_default=sa.false()),
        sa.Column('human_materials', sa.Boolean(), server_default=sa.false()),
        sa.Column('animal_work', sa.Boolean(), server_default=sa.false()),
        sa.Column('field_work', sa.Boolean(), server_default=sa.false()),
        sa.Column('medical_surveillance', sa.Boolean(), server_default=sa.false()),
        sa.Column('biological_agents', sa.JSON()),
        sa.Column('review_comments', sa.JSON()),
        sa.Column('reviewer_assignments', sa.JSON()),
        sa.Column('protocol_team_members', sa.JSON()),
        sa.Column('submission_date', sa.DateTime()),
        sa.Column('vetted_date', sa.DateTime()),
        sa.Column('under_review_date', sa.DateTime()),
        sa.Column('approval_date', sa.DateTime()),
        sa.Column('expiration_date', sa.Date()),
        *_timestamps(),
    )
    op.create_index('ix_ibc_applications_status', 'ibc_applications', ['status'])
    op.create_table(
        'ibc_application_comments',
        _id(),
        sa.Column(
            'application_id',
            sa.UUID(as_uuid=True),
            sa.ForeignKey('ibc_applications.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('comment_type', sa.String(), nullable=False),
        sa.Column('author_type', sa.String(), nullable=False),
        sa.Column('author_name', sa.String()),
        sa.Column('comment', sa.Text(), nullable=False),
        sa.Column('recommendation', sa.String()),
        sa.Column('status_from', sa.String()),
        sa.Column('status_to', sa.String()),
        sa.Column('is_internal', sa.Boolean(), server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_table(
        'ibc_board_members',
        _id(),
        sa.Column('scientist_id', sa.UUID(as_uuid=True), sa.ForeignKey('scientists.id'), nullable=False),
        sa.Column('role', sa.String(), nullable=False, server_default='member'),
        sa.Column('expertise', sa.JSON()),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true()),
        sa.Column('appointment_date', sa.DateTime()),
        sa.Column('term_end_date', sa.Date(), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        'publications',
        _id(),
        sa.Column('research_activity_id', sa.UUID(as_uuid=True), sa.ForeignKey('research_activities.id'), nullable=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('abstract', sa.Text()),
        sa.Column('authors', sa.Text(), server_default=''),
        sa.Column('journal', sa.String()),
        sa.Column('volume', sa.String()),
        sa.Column('issue', sa.String()),
        sa.Column('pages', sa.String()),
        sa.Column('doi', sa.String()),
        sa.Column('publication_date', sa.Date()),
        sa.Column('publication_type', sa.String()),
        sa.Column('status', sa.String(), server_default='Concept'),
        sa.Column('prepublication_url', sa.String()),
        sa.Column('prepublication_site', sa.String()),
        sa.Column('vetted_for_submission_by_ip_office', sa.Boolean(), server_default=sa.false()),
        *_timestamps(),
    )
    op.create_table(
        'publication_authors',
        _id(),
        sa.Column(
            'publication_id',
            sa.UUID(as_uuid=True),
            sa.ForeignKey('publications.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('scientist_id', sa.UUID(as_uuid=True), sa.ForeignKey('scientists.id'), nullable=False),
        sa.Column('authorship_type', sa.String(), nullable=False),
        sa.Column('author_position', sa.Integer()),
        sa.UniqueConstraint('publication_id', 'scientist_id'),
    )
    op.create_table(
        'manuscript_history',
        _id(),
        sa.Column(
            'publication_id',
            sa.UUID(as_uuid=True),
            sa.ForeignKey('publications.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('from_status', sa.String()),
        sa.Column('to_status', sa.String()),
        sa.Column('changed_field', sa.String()),
        sa.Column('old_value', sa.Text()),
        sa.Column('new_value', sa.Text()),
        sa.Column('changed_by', sa.UUID(as_uuid=True), sa.ForeignKey('users.id')),
        sa.Column('change_reason', sa.Text()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_manuscript_history_publication_id', 'manuscript_history', ['publication_id'])
    op.create_table(
        'buildings',
        _id(),
        sa.Column('name', sa.String(), nullable=False, unique=True),
        sa.Column('address', sa.String()),
        sa.Column('description', sa.Text()),
        sa.Column('total_floors', sa.Integer()),
        sa.Column('max_occupancy', sa.Integer()),
        sa.Column('emergency_contact', sa.String()),
        sa.Column('safety_notes', sa.Text()),
        *_timestamps(),
    )
    op.create_table(
        'rooms',
        _id(),
        sa.Column('building_id', sa.UUID(as_uuid=True), sa.ForeignKey('buildings.id'), nullable=False),
        sa.Column('room_number', sa.String(), nullable=False),
        sa.Column('floor', sa.Integer()),
        sa.Column('room_type', sa.String()),
        sa.Column('biosafety_level', sa.String()),
        sa.Column('capacity', sa.Integer()),
        sa.Column('area', sa.Float()),
        sa.Column('supervisor_id', sa.UUID(as_uuid=True), sa.ForeignKey('scientists.id'), nullable=True),
        sa.Column('manager_id', sa.UUID(as_uuid=True), sa.ForeignKey('scientists.id'), nullable=True),
        sa.Column('certifications', sa.JSON()),
        sa.Column('available_ppe', sa.JSON()),
        sa.Column('equipment', sa.Text()),
        sa.Column('special_features', sa.Text()),
        sa.Column('access_restrictions', sa.Text()),
        sa.Column('maintenance_notes', sa.Text()),
        *_timestamps(),
        sa.UniqueConstraint('building_id', 'room_number'),
    )
    op.create_table(
        'certification_modules',
        _id(),
        sa.Column('name', sa.String(), nullable=False, unique=True),
        sa.Column('description', sa.Text()),
        sa.Column('is_core', sa.Boolean(), server_default=sa.false()),
        sa.Column('expiration_months', sa.Integer(), nullable=False, server_default='36'),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_table(
        'certifications',
        _id(),
        sa.Column('scientist_id', sa.UUID(as_uuid=True), sa.ForeignKey('scientists.id'), nullable=False),
        sa.Column('module_id', sa.UUID(as_uuid=True), sa.ForeignKey('certification_modules.id'), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date()),
        sa.Column('certificate_file_path', sa.String()),
        sa.Column('report_file_path', sa.String()),
        sa.Column('notes', sa.Text()),
        sa.Column('uploaded_by', sa.UUID(as_uuid=True), sa.ForeignKey('users.id')),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_table(
        'pdf_import_history',
        _id(),
        sa.Column('file_name', sa.String(), nullable=False),
        sa.Column('file_url', sa.String(), nullable=False),
        sa.Column('uploaded_by', sa.UUID(as_uuid=True), sa.ForeignKey('users.id')),
        sa.Column('assigned_scientist_id', sa.UUID(as_uuid=True), sa.ForeignKey('scientists.id'), nullable=True),
        sa.Column('extracted_text', sa.Text()),
        sa.Column('extracted_data', sa.JSON()),
        sa.Column('processing_status', sa.String(), nullable=False, server_default='processing'),
        sa.Column('ocr_provider', sa.String()),
        sa.Column('error_message', sa.Text()),
        sa.Column('processing_time_ms', sa.Integer()),
        sa.Column('uploaded_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('processed_at', sa.DateTime()),
    )
    op.create_table(
        'audit_logs',
        _id(),
        sa.Column('user_id', sa.UUID(as_uuid=True), sa.ForeignKey('users.id')),
        sa.Column('action', sa.String(), nullable=False),
        sa.Column('target_type', sa.String()),
        sa.Column('target_id', sa.UUID(as_uuid=True)),
        sa.Column('details', sa.JSON()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_audit_logs_target', 'audit_logs', ['target_type', 'target_id'])


def downgrade() -> None:
    op.drop_index('ix_audit_logs_target', table_name='audit_logs')
    op.drop_table('audit_logs')
    op.drop_table('pdf_import_history')
    op.drop_table('certifications')
    op.drop_table('certification_modules')
    op.drop_table('rooms')
    op.drop_table('buildings')
    op.drop_index('ix_manuscript_history_publication_id', table_name='manuscript_history')
    op.drop_table('manuscript_history')
    op.drop_table('publication_authors')
    op.drop_table('publications')
    op.drop_table('ibc_board_members')
    op.drop_table('ibc_application_comments')
    op.drop_index('ix_ibc_applications_status', table_name='ibc_applications')
    op.drop_table('ibc_applications')
    op.drop_table('project_members')
    op.drop_table('research_activities')
    op.drop_table('scientists')
    op.drop_table('users')
