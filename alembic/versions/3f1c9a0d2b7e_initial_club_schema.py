"""initial_club_schema

Revision ID: 3f1c9a0d2b7e
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3f1c9a0d2b7e'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


# Named enum types are created once up front; several are shared between tables.
member_role = postgresql.ENUM('player', 'admin', name='member_role_enum', create_type=False)
member_status = postgresql.ENUM(
    'active', 'disabled', 'removed', name='member_status_enum', create_type=False
)
member_type = postgresql.ENUM('standard', 'student', name='member_type_enum', create_type=False)
registration_status = postgresql.ENUM(
    'pending',
    'pending_parent_approval',
    'pending_admin_approval',
    'approved',
    'rejected',
    'rejected_by_parent',
    name='registration_status_enum',
    create_type=False,
)
rejection_reason = postgresql.ENUM(
    'incorrect_info',
    'incomplete',
    'wrong_group',
    'duplicate',
    'other',
    name='rejection_reason_enum',
    create_type=False,
)
parent_request_status = postgresql.ENUM(
    'pending', 'approved', 'rejected', name='parent_request_status_enum', create_type=False
)
kid_status = postgresql.ENUM('active', 'inactive', name='kid_status_enum', create_type=False)
event_type = postgresql.ENUM(
    'net_practice',
    'league_match',
    'family_event',
    'membership_fee',
    name='event_type_enum',
    create_type=False,
)
event_status = postgresql.ENUM(
    'scheduled', 'cancelled', name='event_status_enum', create_type=False
)
subject_type = postgresql.ENUM('adult', 'kid', name='subject_type_enum', create_type=False)
attending_choice = postgresql.ENUM(
    'YES', 'NO', name='attending_choice_enum', create_type=False
)
attendance_source = postgresql.ENUM(
    'rsvp', 'admin', 'participation', 'payment',
    name='attendance_source_enum',
    create_type=False,
)
payment_status = postgresql.ENUM(
    'UNPAID', 'PENDING', 'PAID', 'REJECTED', name='payment_status_enum', create_type=False
)
record_status = postgresql.ENUM(
    'active', 'inactive', name='record_status_enum', create_type=False
)
participation_status = postgresql.ENUM(
    'pending', 'approved', 'rejected', name='participation_status_enum', create_type=False
)

ENUM_TYPES = (
    member_role,
    member_status,
    member_type,
    registration_status,
    rejection_reason,
    parent_request_status,
    kid_status,
    event_type,
    event_status,
    subject_type,
    attending_choice,
    attendance_source,
    payment_status,
    record_status,
    participation_status,
)


def _timestamp(name: str, nullable: bool = True) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=nullable)


def upgrade() -> None:
    """Upgrade schema - members, registration, kids, events and attendance."""
    bind = op.get_bind()
    for enum_type in ENUM_TYPES:
        enum_type.create(bind, checkfirst=True)

    op.create_table(
        'members',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('picture_url', sa.String(), nullable=True),
        sa.Column('role', member_role, server_default='player', nullable=False),
        sa.Column('status', member_status, server_default='active', nullable=False),
        sa.Column('gender', sa.String(), nullable=True),
        sa.Column('group', sa.String(), nullable=True),
        sa.Column('groups', sa.JSON(), nullable=True),
        sa.Column('member_type', member_type, nullable=True),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('year_of_birth', sa.Integer(), nullable=True),
        sa.Column('month_of_birth', sa.Integer(), nullable=True),
        sa.Column('profile_completed', sa.Boolean(), nullable=True),
        sa.Column('has_payment_manager', sa.Boolean(), nullable=True),
        sa.Column('payment_manager_id', sa.String(), nullable=True),
        sa.Column('payment_manager_name', sa.String(), nullable=True),
        sa.Column('kid_ids', sa.JSON(), nullable=True),
        sa.Column('linked_youth_ids', sa.JSON(), nullable=True),
        sa.Column('active_profile_id', sa.String(), nullable=True),
        sa.Column('last_login_profile', sa.String(), nullable=True),
        sa.Column('approval', sa.JSON(), nullable=True),
        sa.Column('admin_history', sa.JSON(), nullable=True),
        sa.Column('status_history', sa.JSON(), nullable=True),
        _timestamp('status_updated_at'),
        sa.Column('status_updated_by', sa.String(), nullable=True),
        sa.Column('status_reason', sa.String(), nullable=True),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        _timestamp('last_login_at'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_members_email', 'members', ['email'], unique=True)
    op.create_index('ix_members_status', 'members', ['status'])

    op.create_table(
        'registration_requests',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('picture_url', sa.String(), nullable=True),
        sa.Column('status', registration_status, server_default='pending', nullable=False),
        sa.Column('group', sa.String(), nullable=True),
        sa.Column('groups', sa.JSON(), nullable=True),
        sa.Column('gender', sa.String(), nullable=True),
        sa.Column('member_type', member_type, nullable=True),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('year_of_birth', sa.Integer(), nullable=True),
        sa.Column('month_of_birth', sa.Integer(), nullable=True),
        _timestamp('consent_given_at'),
        sa.Column('has_payment_manager', sa.Boolean(), nullable=True),
        sa.Column('payment_manager_id', sa.String(), nullable=True),
        sa.Column('payment_manager_name', sa.String(), nullable=True),
        sa.Column('parent_request_id', sa.String(), nullable=True),
        _timestamp('parent_approved_at'),
        sa.Column('parent_approved_by', sa.String(), nullable=True),
        _timestamp('parent_rejected_at'),
        sa.Column('parent_rejected_by', sa.String(), nullable=True),
        sa.Column('resubmission_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('rejection_reason', rejection_reason, nullable=True),
        sa.Column('rejection_notes', sa.Text(), nullable=True),
        _timestamp('rejected_at'),
        sa.Column('rejected_by', sa.String(), nullable=True),
        sa.Column('can_resubmit', sa.Boolean(), nullable=True),
        sa.Column('rejection_history', sa.JSON(), nullable=True),
        sa.Column('last_rejection_reason', sa.String(), nullable=True),
        _timestamp('last_rejection_at'),
        _timestamp('resubmitted_at'),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'ix_registration_requests_email', 'registration_requests', ['email']
    )
    op.create_index(
        'ix_registration_requests_status', 'registration_requests', ['status']
    )

    op.create_table(
        'parent_requests',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('parent_id', sa.String(), nullable=False),
        sa.Column('youth_id', sa.String(), nullable=False),
        sa.Column('youth_name', sa.String(), nullable=False),
        sa.Column('youth_email', sa.String(), nullable=False),
        sa.Column('youth_groups', sa.JSON(), nullable=True),
        sa.Column('status', parent_request_status, server_default='pending', nullable=False),
        _timestamp('resolved_at'),
        sa.Column('resolved_by', sa.String(), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        _timestamp('created_at'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_parent_requests_parent_id', 'parent_requests', ['parent_id'])
    op.create_index('ix_parent_requests_youth_id', 'parent_requests', ['youth_id'])

    op.create_table(
        'kid_profiles',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('parent_id', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('year_of_birth', sa.Integer(), nullable=False),
        sa.Column('month_of_birth', sa.Integer(), nullable=True),
        sa.Column('age', sa.Integer(), nullable=True),
        sa.Column('parent_emails', sa.JSON(), nullable=True),
        sa.Column('linked_parents', sa.JSON(), nullable=True),
        sa.Column('status', kid_status, server_default='active', nullable=False),
        _timestamp('status_updated_at'),
        sa.Column('status_updated_by', sa.String(), nullable=True),
        sa.Column('created_by', sa.String(), nullable=True),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_kid_profiles_parent_id', 'kid_profiles', ['parent_id'])

    op.create_table(
        'events',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('location', sa.String(), nullable=True),
        sa.Column('event_type', event_type, nullable=False),
        sa.Column('target_groups', sa.JSON(), nullable=True),
        sa.Column('group', sa.String(), nullable=True),
        sa.Column('kids_event', sa.Boolean(), nullable=True),
        sa.Column('fee_pence', sa.Integer(), server_default='0', nullable=False),
        _timestamp('starts_at', nullable=False),
        sa.Column('attendance_cutoff_hours', sa.Integer(), nullable=True),
        sa.Column('status', event_status, server_default='scheduled', nullable=False),
        _timestamp('cancelled_at'),
        sa.Column('cancelled_by', sa.String(), nullable=True),
        sa.Column('created_by', sa.String(), nullable=False),
        sa.Column('updated_by', sa.String(), nullable=True),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_events_starts_at', 'events', ['starts_at'])

    op.create_table(
        'attendance_records',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('event_id', sa.String(), nullable=False),
        sa.Column('subject_id', sa.String(), nullable=False),
        sa.Column('subject_type', subject_type, nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('category', sa.String(), nullable=True),
        sa.Column('groups', sa.JSON(), nullable=True),
        sa.Column('attending', attending_choice, nullable=True),
        sa.Column('attended', sa.Boolean(), nullable=True),
        _timestamp('attended_confirmed_at'),
        sa.Column('attended_confirmed_by', sa.String(), nullable=True),
        sa.Column('source', attendance_source, nullable=True),
        sa.Column('fee_due_pence', sa.Integer(), server_default='0', nullable=False),
        sa.Column('payment_status', payment_status, server_default='UNPAID', nullable=False),
        _timestamp('paid_updated_at'),
        sa.Column('paid_by', sa.String(), nullable=True),
        _timestamp('confirmed_at'),
        sa.Column('confirmed_by', sa.String(), nullable=True),
        _timestamp('rejected_at'),
        sa.Column('rejected_by', sa.String(), nullable=True),
        sa.Column('record_status', record_status, server_default='active', nullable=False),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('event_id', 'subject_id', name='uq_attendance_event_subject'),
    )
    op.create_index('ix_attendance_records_event_id', 'attendance_records', ['event_id'])
    op.create_index(
        'ix_attendance_records_subject_id', 'attendance_records', ['subject_id']
    )

    op.create_table(
        'participation_requests',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('event_id', sa.String(), nullable=False),
        sa.Column('subject_id', sa.String(), nullable=False),
        sa.Column('subject_type', subject_type, nullable=False),
        sa.Column('subject_name', sa.String(), nullable=False),
        sa.Column('requester_id', sa.String(), nullable=False),
        sa.Column('status', participation_status, server_default='pending', nullable=False),
        _timestamp('resolved_at'),
        sa.Column('resolved_by', sa.String(), nullable=True),
        _timestamp('created_at'),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'ix_participation_requests_event_id', 'participation_requests', ['event_id']
    )
    op.create_index(
        'ix_participation_requests_status', 'participation_requests', ['status']
    )


def downgrade() -> None:
    """Downgrade schema - drop everything created above."""
    op.drop_table('participation_requests')
    op.drop_table('attendance_records')
    op.drop_table('events')
    op.drop_table('kid_profiles')
    op.drop_table('parent_requests')
    op.drop_table('registration_requests')
    op.drop_table('members')

    bind = op.get_bind()
    for enum_type in reversed(ENUM_TYPES):
        enum_type.drop(bind, checkfirst=True)
