"""Baseline migration - centers, rosters, daily operations, billing, consent

Revision ID: 0001_baseline
Revises:
Create Date: 2026-10-19

Creates every table of the childcare platform.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '0001_baseline'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _id() -> sa.Column:
    return sa.Column('id', sa.String(36), primary_key=True)


def _created_at() -> sa.Column:
    return sa.Column('created_at', sa.DateTime(timezone=True), nullable=False)


def upgrade() -> None:
    """Create all tables."""

    # ==========================================================================
    # Tenants & users
    # ==========================================================================
    op.create_table(
        'centers',
        _id(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('address', sa.String(500)),
        sa.Column('phone', sa.String(50)),
        sa.Column('email', sa.String(255)),
        sa.Column('timezone', sa.String(50), nullable=False),
        _created_at(),
    )

    op.create_table(
        'users',
        _id(),
        sa.Column('center_id', sa.String(36), sa.ForeignKey('centers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('role', sa.String(20), nullable=False),
        sa.Column('first_name', sa.String(100)),
        sa.Column('last_name', sa.String(100)),
        sa.Column('avatar_url', sa.String(500)),
        _created_at(),
    )
    op.create_index('idx_users_center_id', 'users', ['center_id'])

    # ==========================================================================
    # Rosters
    # ==========================================================================
    op.create_table(
        'classrooms',
        _id(),
        sa.Column('center_id', sa.String(36), sa.ForeignKey('centers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('age_group', sa.String(50)),
        _created_at(),
    )
    op.create_index('idx_classrooms_center_id', 'classrooms', ['center_id'])

    op.create_table(
        'classroom_staff',
        sa.Column('classroom_id', sa.String(36), sa.ForeignKey('classrooms.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
    )

    op.create_table(
        'children',
        _id(),
        sa.Column('center_id', sa.String(36), sa.ForeignKey('centers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('classroom_id', sa.String(36), sa.ForeignKey('classrooms.id', ondelete='SET NULL')),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('dob', sa.Date()),
        sa.Column('avatar_url', sa.Text()),
        sa.Column('allergies', JSON_TYPE, nullable=False),
        sa.Column('notes', sa.Text()),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('enrollment_status', sa.String(20), nullable=False),
        _created_at(),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('idx_children_center_id', 'children', ['center_id'])
    op.create_index('idx_children_classroom_id', 'children', ['classroom_id'])

    op.create_table(
        'guardians',
        _id(),
        sa.Column('child_id', sa.String(36), sa.ForeignKey('children.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('relation', sa.String(100), nullable=False),
        sa.Column('phone', sa.String(50)),
        sa.Column('email', sa.String(255)),
        sa.Column('avatar_url', sa.Text()),
        _created_at(),
    )
    op.create_index('idx_guardians_child_id', 'guardians', ['child_id'])

    # ==========================================================================
    # Daily operations
    # ==========================================================================
    op.create_table(
        'activities',
        _id(),
        sa.Column('child_id', sa.String(36), sa.ForeignKey('children.id', ondelete='CASCADE'), nullable=False),
        sa.Column('author_id', sa.String(36), sa.ForeignKey('users.id', ondelete='SET NULL')),
        sa.Column('type', sa.String(20), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('media_url', sa.Text()),
        sa.Column('metadata', JSON_TYPE),
        _created_at(),
    )
    op.create_index('idx_activities_child_created', 'activities', ['child_id', 'created_at'])

    op.create_table(
        'attendance',
        _id(),
        sa.Column('child_id', sa.String(36), sa.ForeignKey('children.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('check_in_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('check_out_time', sa.DateTime(timezone=True)),
        sa.Column('checked_in_by', sa.String(36), sa.ForeignKey('users.id', ondelete='SET NULL')),
        sa.Column('checked_out_by', sa.String(36), sa.ForeignKey('users.id', ondelete='SET NULL')),
        sa.Column('signature_url', sa.Text()),
        sa.Column('notes', sa.Text()),
    )
    op.create_index('idx_attendance_child_date', 'attendance', ['child_id', 'date'])

    op.create_table(
        'messages',
        _id(),
        sa.Column('center_id', sa.String(36), sa.ForeignKey('centers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('sender_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('recipient_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('child_id', sa.String(36), sa.ForeignKey('children.id', ondelete='SET NULL')),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        _created_at(),
    )
    op.create_index('idx_messages_sender', 'messages', ['sender_id'])
    op.create_index('idx_messages_recipient', 'messages', ['recipient_id'])

    # ==========================================================================
    # Billing & consent
    # ==========================================================================
    op.create_table(
        'invoices',
        _id(),
        sa.Column('child_id', sa.String(36), sa.ForeignKey('children.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('due_date', sa.Date()),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('paid_at', sa.DateTime(timezone=True)),
        _created_at(),
    )
    op.create_index('idx_invoices_child_id', 'invoices', ['child_id'])

    op.create_table(
        'consent_templates',
        _id(),
        sa.Column('center_id', sa.String(36), sa.ForeignKey('centers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('is_required', sa.Boolean(), nullable=False),
        _created_at(),
    )
    op.create_index('idx_consent_templates_center_id', 'consent_templates', ['center_id'])

    op.create_table(
        'signed_consent_forms',
        _id(),
        sa.Column('child_id', sa.String(36), sa.ForeignKey('children.id', ondelete='CASCADE'), nullable=False),
        sa.Column('template_id', sa.String(36), sa.ForeignKey('consent_templates.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('signer_name', sa.String(255)),
        sa.Column('signed_at', sa.DateTime(timezone=True)),
        sa.UniqueConstraint('child_id', 'template_id', name='uq_signed_consent_child_template'),
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table('signed_consent_forms')
    op.drop_table('consent_templates')
    op.drop_table('invoices')
    op.drop_table('messages')
    op.drop_table('attendance')
    op.drop_table('activities')
    op.drop_table('guardians')
    op.drop_table('children')
    op.drop_table('classroom_staff')
    op.drop_table('classrooms')
    op.drop_table('users')
    op.drop_table('centers')
