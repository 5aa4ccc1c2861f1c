"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates every table of the volunteer platform. users.hub_affiliation_id and
hubs.registered_by_id reference each other, so the users -> hubs foreign key
is added after both tables exist.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ENUM_TYPES = (
    'userrole', 'gender', 'membershipstatus', 'volunteerstatus', 'durationtype',
    'organizationtype', 'hubstatus', 'requestcategory', 'requeststatus', 'requestpriority',
    'placementstatus', 'projectstatus', 'activitytype', 'activitystatus',
    'trainingcategory', 'traininglevel', 'trainingstatus', 'registrationtype',
    'registrationstatus', 'evaluationtype', 'evaluationstatus', 'recognitiontype',
    'paymenttype', 'paymentmethod', 'paymentstatus', 'communicationchannel',
    'communicationstatus', 'idcardtype', 'idcardstatus', 'formtype', 'fieldtype',
)


def _timestamps():
    return [
        sa.Column('created', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), index=True),
        sa.Column('updated', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), onupdate=sa.func.now()),
    ]


def _user_fk(name, ondelete='SET NULL', nullable=True, index=False):
    return sa.Column(name, sa.String(15), sa.ForeignKey('users.id', ondelete=ondelete), nullable=nullable, index=index)


def upgrade() -> None:
    op.create_table(
        'membership_types',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='ETB'),
        sa.Column('duration', sa.Integer(), nullable=False),
        sa.Column('duration_type', sa.Enum('month', 'year', name='durationtype'), nullable=False, server_default='year'),
        sa.Column('benefits', sa.JSON(), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=True, server_default=sa.true(), index=True),
        sa.Column('order', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps(),
    )

    op.create_table(
        'users',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('email', sa.String(255), nullable=False, unique=True, index=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('role', sa.Enum('volunteer', 'member', 'admin', 'hub_coordinator', 'evaluator', name='userrole'), nullable=False, server_default='volunteer', index=True),
        sa.Column('phone', sa.String(50), nullable=False, server_default=''),
        sa.Column('alternative_phone', sa.String(50), nullable=True),
        sa.Column('date_of_birth', sa.Date(), nullable=True, index=True),
        sa.Column('gender', sa.Enum('male', 'female', 'other', 'prefer_not_to_say', name='gender'), nullable=True),
        sa.Column('address', sa.JSON(), nullable=True),
        sa.Column('identification', sa.JSON(), nullable=True),
        sa.Column('profile', sa.JSON(), nullable=True),
        sa.Column('social_media', sa.JSON(), nullable=True),
        sa.Column('preferences', sa.JSON(), nullable=True),
        sa.Column('membership_status', sa.Enum('none', 'active', 'expired', 'suspended', name='membershipstatus'), nullable=False, server_default='none'),
        sa.Column('membership_expiry', sa.DateTime(timezone=True), nullable=True),
        sa.Column('membership_type_id', sa.String(15), sa.ForeignKey('membership_types.id', ondelete='SET NULL'), nullable=True),
        sa.Column('volunteer_status', sa.Enum('active', 'inactive', 'on_leave', 'suspended', name='volunteerstatus'), nullable=False, server_default='active', index=True),
        sa.Column('total_hours', sa.Float(), nullable=False, server_default='0'),
        sa.Column('activities_completed', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('donations_made', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('trainings_completed', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('recognitions_received', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('verified', sa.Boolean(), nullable=True, server_default=sa.false()),
        sa.Column('verified_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('hub_affiliation_id', sa.String(15), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'hubs',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('organization_type', sa.Enum('ngo', 'government', 'private', 'academic', 'other', name='organizationtype'), nullable=False),
        sa.Column('email', sa.String(255), nullable=False, unique=True, index=True),
        sa.Column('phone', sa.String(50), nullable=False),
        sa.Column('address', sa.JSON(), nullable=True),
        sa.Column('region', sa.String(100), nullable=True, index=True),
        sa.Column('contact_person', sa.JSON(), nullable=True),
        sa.Column('status', sa.Enum('pending', 'approved', 'suspended', 'rejected', name='hubstatus'), nullable=False, server_default='pending', index=True),
        sa.Column('verified', sa.Boolean(), nullable=True, server_default=sa.false()),
        sa.Column('registration_date', sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('website', sa.String(500), nullable=True),
        sa.Column('social_media', sa.JSON(), nullable=True),
        sa.Column('capacity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('active_volunteers', sa.Integer(), nullable=False, server_default='0'),
        _user_fk('registered_by_id'),
        *_timestamps(),
    )
    op.create_foreign_key(
        'fk_users_hub_affiliation_id_hubs', 'users', 'hubs',
        ['hub_affiliation_id'], ['id'], ondelete='SET NULL'
    )

    op.create_table(
        'volunteer_requests',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('hub_id', sa.String(15), sa.ForeignKey('hubs.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('title', sa.String(300), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.Enum('health', 'education', 'disaster', 'community', 'technology', 'other', name='requestcategory'), nullable=True, index=True),
        sa.Column('required_skills', sa.JSON(), nullable=True),
        sa.Column('criteria', sa.JSON(), nullable=True),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('location', sa.JSON(), nullable=True),
        sa.Column('region', sa.String(100), nullable=True, index=True),
        sa.Column('number_of_volunteers', sa.Integer(), nullable=False),
        sa.Column('current_volunteers', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', sa.Enum('open', 'filled', 'closed', 'cancelled', name='requeststatus'), nullable=False, server_default='open', index=True),
        _user_fk('filled_by_id'),
        sa.Column('filled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('priority', sa.Enum('low', 'medium', 'high', 'urgent', name='requestpriority'), nullable=False, server_default='medium'),
        sa.Column('compensation', sa.JSON(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'placements',
        sa.Column('id', sa.String(15), primary_key=True),
        _user_fk('volunteer_id', ondelete='CASCADE', nullable=False, index=True),
        sa.Column('hub_id', sa.String(15), sa.ForeignKey('hubs.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('request_id', sa.String(15), sa.ForeignKey('volunteer_requests.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('status', sa.Enum('pending', 'approved', 'active', 'completed', 'terminated', 'declined', name='placementstatus'), nullable=False, server_default='pending', index=True),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('expected_end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('role', sa.String(200), nullable=True),
        sa.Column('responsibilities', sa.JSON(), nullable=True),
        _user_fk('supervisor_id'),
        sa.Column('performance', sa.JSON(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'events',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('title', sa.String(300), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('location', sa.String(300), nullable=True),
        sa.Column('start_at', sa.DateTime(timezone=True), nullable=True, index=True),
        sa.Column('end_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('capacity', sa.Integer(), nullable=True),
        _user_fk('created_by_id'),
        *_timestamps(),
    )

    op.create_table(
        'projects',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('summary', sa.Text(), nullable=True),
        sa.Column('status', sa.Enum('planning', 'active', 'paused', 'completed', name='projectstatus'), nullable=False, server_default='planning'),
        sa.Column('leads', sa.JSON(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'activities',
        sa.Column('id', sa.String(15), primary_key=True),
        _user_fk('user_id', ondelete='CASCADE', nullable=False, index=True),
        sa.Column('type', sa.Enum('volunteer', 'training', 'meeting', 'event', 'placement', 'evaluation', 'other', name='activitytype'), nullable=False, index=True),
        sa.Column('title', sa.String(300), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('location', sa.String(300), nullable=True),
        sa.Column('hub_id', sa.String(15), sa.ForeignKey('hubs.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('event_id', sa.String(15), sa.ForeignKey('events.id', ondelete='SET NULL'), nullable=True),
        sa.Column('project_id', sa.String(15), sa.ForeignKey('projects.id', ondelete='SET NULL'), nullable=True),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=True, index=True),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('hours', sa.Float(), nullable=True),
        sa.Column('status', sa.Enum('scheduled', 'in_progress', 'completed', 'cancelled', name='activitystatus'), nullable=False, server_default='scheduled', index=True),
        sa.Column('verified', sa.Boolean(), nullable=True, server_default=sa.false()),
        _user_fk('verified_by_id'),
        sa.Column('stats_credited', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('attachments', sa.JSON(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'trainings',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('title', sa.String(300), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.Enum('first_aid', 'disaster_response', 'leadership', 'technical', 'soft_skills', 'other', name='trainingcategory'), nullable=True, index=True),
        sa.Column('level', sa.Enum('beginner', 'intermediate', 'advanced', name='traininglevel'), nullable=False, server_default='beginner'),
        _user_fk('instructor_id'),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=True, index=True),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('duration', sa.Float(), nullable=True),
        sa.Column('location', sa.String(300), nullable=True),
        sa.Column('max_participants', sa.Integer(), nullable=True),
        sa.Column('current_participants', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', sa.Enum('scheduled', 'ongoing', 'completed', 'cancelled', name='trainingstatus'), nullable=False, server_default='scheduled', index=True),
        sa.Column('materials', sa.JSON(), nullable=True),
        sa.Column('prerequisites', sa.JSON(), nullable=True),
        sa.Column('certification', sa.JSON(), nullable=True),
        sa.Column('cost', sa.JSON(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'registrations',
        sa.Column('id', sa.String(15), primary_key=True),
        _user_fk('user_id', ondelete='CASCADE', nullable=False, index=True),
        sa.Column('type', sa.Enum('event', 'project', 'training', name='registrationtype'), nullable=False, index=True),
        sa.Column('ref_id', sa.String(15), nullable=False, index=True),
        sa.Column('status', sa.Enum('pending', 'confirmed', 'cancelled', 'completed', name='registrationstatus'), nullable=False, server_default='pending', index=True),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'type', 'ref_id', name='uq_registrations_user_type_ref'),
    )

    op.create_table(
        'evaluations',
        sa.Column('id', sa.String(15), primary_key=True),
        _user_fk('user_id', ondelete='CASCADE', nullable=False, index=True),
        _user_fk('evaluator_id', ondelete='CASCADE', nullable=False, index=True),
        sa.Column('type', sa.Enum('performance', 'placement', 'training', 'volunteer_request', 'periodic', name='evaluationtype'), nullable=False),
        sa.Column('related_to', sa.JSON(), nullable=True),
        sa.Column('ratings', sa.JSON(), nullable=True),
        sa.Column('comments', sa.Text(), nullable=True),
        sa.Column('strengths', sa.JSON(), nullable=True),
        sa.Column('areas_for_improvement', sa.JSON(), nullable=True),
        sa.Column('recommendations', sa.Text(), nullable=True),
        sa.Column('status', sa.Enum('draft', 'submitted', 'reviewed', name='evaluationstatus'), nullable=False, server_default='draft'),
        *_timestamps(),
    )

    op.create_table(
        'recognitions',
        sa.Column('id', sa.String(15), primary_key=True),
        _user_fk('user_id', ondelete='CASCADE', nullable=False, index=True),
        sa.Column('type', sa.Enum('volunteer_of_month', 'outstanding_contribution', 'long_service', 'achievement', 'award', 'badge', name='recognitiontype'), nullable=False, index=True),
        sa.Column('title', sa.String(300), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(100), nullable=True),
        _user_fk('issued_by_id'),
        sa.Column('issued_date', sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now(), index=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('featured', sa.Boolean(), nullable=True, server_default=sa.false(), index=True),
        sa.Column('image', sa.String(500), nullable=True),
        sa.Column('metrics', sa.JSON(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'payments',
        sa.Column('id', sa.String(15), primary_key=True),
        _user_fk('user_id', index=True),
        sa.Column('type', sa.Enum('donation', 'membership_fee', 'event_fee', 'training_fee', 'other', name='paymenttype'), nullable=False, index=True),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='ETB'),
        sa.Column('method', sa.Enum('mobile_money', 'bank_transfer', 'card', 'cash', 'other', name='paymentmethod'), nullable=False),
        sa.Column('transaction_id', sa.String(100), nullable=False, unique=True, index=True),
        sa.Column('status', sa.Enum('pending', 'processing', 'completed', 'failed', 'refunded', name='paymentstatus'), nullable=False, server_default='pending', index=True),
        sa.Column('payment_provider', sa.String(100), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('receipt', sa.String(500), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('related_to', sa.JSON(), nullable=True),
        sa.Column('processed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('failure_reason', sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'communications',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('type', sa.Enum('email', 'sms', 'push', 'telegram', 'facebook', 'whatsapp', name='communicationchannel'), nullable=False),
        sa.Column('subject', sa.String(300), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('recipients', sa.JSON(), nullable=True),
        sa.Column('status', sa.Enum('draft', 'scheduled', 'sending', 'sent', 'failed', name='communicationstatus'), nullable=False, server_default='draft', index=True),
        sa.Column('scheduled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('sent_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('sent_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('failed_count', sa.Integer(), nullable=False, server_default='0'),
        _user_fk('created_by_id'),
        sa.Column('attachments', sa.JSON(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'id_cards',
        sa.Column('id', sa.String(15), primary_key=True),
        _user_fk('user_id', ondelete='CASCADE', nullable=False, index=True),
        sa.Column('card_number', sa.String(50), nullable=False, unique=True, index=True),
        sa.Column('type', sa.Enum('volunteer', 'member', 'staff', name='idcardtype'), nullable=False),
        sa.Column('status', sa.Enum('active', 'expired', 'revoked', name='idcardstatus'), nullable=False, server_default='active', index=True),
        sa.Column('issued_date', sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
        sa.Column('expiry_date', sa.DateTime(timezone=True), nullable=True),
        _user_fk('issued_by_id'),
        sa.Column('photo', sa.Text(), nullable=True),
        sa.Column('qr_code', sa.Text(), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('print_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_printed_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'form_fields',
        sa.Column('id', sa.String(15), primary_key=True),
        sa.Column('form_type', sa.Enum('volunteer', 'member', 'hub', name='formtype'), nullable=False, index=True),
        sa.Column('field_key', sa.String(100), nullable=False),
        sa.Column('field_type', sa.Enum('text', 'email', 'tel', 'number', 'date', 'select', 'textarea', 'checkbox', 'radio', 'file', name='fieldtype'), nullable=False),
        sa.Column('label', sa.String(300), nullable=False),
        sa.Column('placeholder', sa.String(300), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('required', sa.Boolean(), nullable=True, server_default=sa.false()),
        sa.Column('options', sa.JSON(), nullable=True),
        sa.Column('validation', sa.JSON(), nullable=True),
        sa.Column('default_value', sa.JSON(), nullable=True),
        sa.Column('order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('section', sa.String(100), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True, server_default=sa.true(), index=True),
        sa.Column('admin_only', sa.Boolean(), nullable=True, server_default=sa.false()),
        _user_fk('created_by_id'),
        _user_fk('updated_by_id'),
        *_timestamps(),
        sa.UniqueConstraint('form_type', 'field_key', name='uq_form_fields_form_type_field_key'),
    )


def downgrade() -> None:
    for table in (
        'form_fields', 'id_cards', 'communications', 'payments', 'recognitions',
        'evaluations', 'registrations', 'trainings', 'activities', 'projects',
        'events', 'placements', 'volunteer_requests',
    ):
        op.drop_table(table)
    op.drop_constraint('fk_users_hub_affiliation_id_hubs', 'users', type_='foreignkey')
    op.drop_table('hubs')
    op.drop_table('users')
    op.drop_table('membership_types')
    # Drop enum types
    for enum_name in ENUM_TYPES:
        op.execute(f'DROP TYPE IF EXISTS {enum_name}')
