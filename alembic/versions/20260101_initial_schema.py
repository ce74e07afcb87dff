"""initial studio schema

Revision ID: 20260101_initial_schema
Revises:
Create Date: 2026-01-01
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20260101_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _id():
    return sa.Column('id', sa.String(25), primary_key=True, index=True)


def _user_fk(name, nullable=False, index=True):
    return sa.Column(name, sa.String(25), sa.ForeignKey('users.id'), nullable=nullable, index=index)


def upgrade() -> None:
    op.create_table(
        'users',
        _id(),
        sa.Column('email', sa.String(255), nullable=False, unique=True, index=True),
        sa.Column('clerk_id', sa.String(255), nullable=True, unique=True, index=True),
        sa.Column('first_name', sa.String(100), nullable=True),
        sa.Column('last_name', sa.String(100), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('role', sa.String(20), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'membership_types',
        _id(),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('duration_days', sa.Integer(), nullable=False),
        sa.Column('credit_amount', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('duration_days > 0', name='ck_membership_types_duration_positive'),
        sa.CheckConstraint('credit_amount >= 0', name='ck_membership_types_credit_amount_non_negative'),
    )

    op.create_table(
        'memberships',
        _id(),
        _user_fk('user_id'),
        sa.Column('membership_type_id', sa.String(25), sa.ForeignKey('membership_types.id'), nullable=False),
        sa.Column('start_date', sa.DateTime(), nullable=False),
        sa.Column('end_date', sa.DateTime(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'credits',
        _id(),
        _user_fk('user_id'),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('remaining_amount', sa.Integer(), nullable=False),
        sa.Column('expiry_date', sa.DateTime(), nullable=True),
        sa.Column('source', sa.String(20), nullable=False),
        sa.Column('source_id', sa.String(25), nullable=True),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('amount > 0', name='ck_credits_amount_positive'),
        sa.CheckConstraint(
            'remaining_amount >= 0 AND remaining_amount <= amount',
            name='ck_credits_remaining_within_amount'
        ),
    )
    op.create_index('ix_credits_user_status_expiry', 'credits', ['user_id', 'status', 'expiry_date'])

    op.create_table(
        'credit_logs',
        _id(),
        sa.Column('credit_id', sa.String(25), sa.ForeignKey('credits.id'), nullable=False, index=True),
        _user_fk('user_id'),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('operation', sa.String(20), nullable=False),
        sa.Column('related_entity_type', sa.String(20), nullable=True),
        sa.Column('related_entity_id', sa.String(25), nullable=True),
        sa.Column('booking_id', sa.String(25), nullable=True, index=True),
        sa.Column('actor_id', sa.String(25), nullable=True),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_credit_logs_related', 'credit_logs', ['related_entity_type', 'related_entity_id'])

    op.create_table(
        'credit_packages',
        _id(),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('credits', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('validity_days', sa.Integer(), nullable=False),
        sa.Column('is_best_value', sa.Boolean(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('credits > 0', name='ck_credit_packages_credits_positive'),
        sa.CheckConstraint('validity_days > 0', name='ck_credit_packages_validity_positive'),
    )

    op.create_table(
        'service_types',
        _id(),
        sa.Column('name', sa.String(100), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('credit_cost', sa.Integer(), nullable=False),
        sa.Column('default_capacity', sa.Integer(), nullable=False),
        sa.Column('is_private', sa.Boolean(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'scheduled_classes',
        _id(),
        sa.Column('name', sa.String(150), nullable=False),
        sa.Column('service_type_id', sa.String(25), sa.ForeignKey('service_types.id'), nullable=True),
        _user_fk('instructor_id', nullable=True, index=False),
        sa.Column('starts_at', sa.DateTime(), nullable=False),
        sa.Column('ends_at', sa.DateTime(), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('booked_count', sa.Integer(), nullable=False),
        sa.Column('credit_cost', sa.Integer(), nullable=False),
        sa.Column('location', sa.String(150), nullable=True),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('capacity > 0', name='ck_scheduled_classes_capacity_positive'),
        sa.CheckConstraint(
            'booked_count >= 0 AND booked_count <= capacity',
            name='ck_scheduled_classes_booked_within_capacity'
        ),
        sa.CheckConstraint('credit_cost >= 0', name='ck_scheduled_classes_credit_cost_non_negative'),
        sa.CheckConstraint('ends_at > starts_at', name='ck_scheduled_classes_ends_after_start'),
    )
    op.create_index('ix_scheduled_classes_status_start', 'scheduled_classes', ['status', 'starts_at'])

    op.create_table(
        'private_sessions',
        _id(),
        _user_fk('trainer_id'),
        _user_fk('client_id', nullable=True),
        sa.Column('service_type_id', sa.String(25), sa.ForeignKey('service_types.id'), nullable=True),
        sa.Column('starts_at', sa.DateTime(), nullable=False),
        sa.Column('ends_at', sa.DateTime(), nullable=False),
        sa.Column('credit_cost', sa.Integer(), nullable=False),
        sa.Column('location', sa.String(150), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('credit_cost >= 0', name='ck_private_sessions_credit_cost_non_negative'),
        sa.CheckConstraint('ends_at > starts_at', name='ck_private_sessions_ends_after_start'),
    )
    op.create_index('ix_private_sessions_status_start', 'private_sessions', ['status', 'starts_at'])

    op.create_table(
        'bookings',
        _id(),
        _user_fk('user_id'),
        sa.Column('bookable_type', sa.String(20), nullable=False),
        sa.Column('entity_id', sa.String(25), nullable=False, index=True),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('booking_type', sa.String(20), nullable=False),
        sa.Column('credit_amount', sa.Integer(), nullable=False),
        sa.Column('refunded', sa.Boolean(), nullable=False),
        sa.Column('session_name', sa.String(150), nullable=True),
        sa.Column('starts_at', sa.DateTime(), nullable=False),
        sa.Column('ends_at', sa.DateTime(), nullable=False),
        _user_fk('created_by', nullable=True, index=False),
        sa.Column('cancellation_reason', sa.Text(), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_bookings_created_at', 'bookings', ['created_at'])
    # At most one live booking per user per class/session
    op.create_index(
        'uq_bookings_active_user_entity',
        'bookings',
        ['user_id', 'bookable_type', 'entity_id'],
        unique=True,
        postgresql_where=sa.text("status <> 'CANCELLED'"),
        sqlite_where=sa.text("status <> 'CANCELLED'"),
    )

    op.create_table(
        'home_user_onboarding',
        _id(),
        sa.Column('user_id', sa.String(25), sa.ForeignKey('users.id'), nullable=False, unique=True, index=True),
        sa.Column('parq_status', sa.String(30), nullable=False),
        sa.Column('parq_completed_at', sa.DateTime(), nullable=True),
        sa.Column('parq_responses', sa.JSON(), nullable=True),
        sa.Column('requires_medical_clearance', sa.Boolean(), nullable=False),
        _user_fk('medical_cleared_by', nullable=True, index=False),
        sa.Column('medical_cleared_at', sa.DateTime(), nullable=True),
        sa.Column('medical_clearance_notes', sa.Text(), nullable=True),
        sa.Column('posture_status', sa.String(30), nullable=False),
        sa.Column('posture_completed_at', sa.DateTime(), nullable=True),
        sa.Column('safety_video_status', sa.String(30), nullable=False),
        sa.Column('safety_video_completed_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'home_user_posture_assessment',
        _id(),
        sa.Column('user_id', sa.String(25), sa.ForeignKey('users.id'), nullable=False, unique=True, index=True),
        sa.Column('front_image_url', sa.Text(), nullable=True),
        sa.Column('side_image_url', sa.Text(), nullable=True),
        sa.Column('anterior_squat_video_url', sa.Text(), nullable=True),
        sa.Column('posterior_squat_video_url', sa.Text(), nullable=True),
        sa.Column('side_squat_video_url', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('analysis_notes', sa.Text(), nullable=True),
        sa.Column('training_plan', sa.Text(), nullable=True),
        _user_fk('analysed_by', nullable=True, index=False),
        sa.Column('analysed_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'user_safety_video_logs',
        _id(),
        _user_fk('user_id'),
        sa.Column('video_id', sa.String(100), nullable=False),
        sa.Column('watched_seconds', sa.Integer(), nullable=False),
        sa.Column('total_seconds', sa.Integer(), nullable=False),
        sa.Column('percentage_watched', sa.Float(), nullable=False),
        sa.Column('completed', sa.Boolean(), nullable=False),
        sa.Column('watched_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'client_messages',
        _id(),
        _user_fk('recipient_id'),
        _user_fk('sender_id', index=False),
        sa.Column('sender_name', sa.String(200), nullable=True),
        sa.Column('sender_role', sa.String(20), nullable=True),
        sa.Column('subject', sa.String(200), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('message_type', sa.String(50), nullable=False),
        sa.Column('priority', sa.String(10), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('read_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_client_messages_recipient_read', 'client_messages', ['recipient_id', 'is_read'])

    op.create_table(
        'user_notifications',
        _id(),
        _user_fk('user_id'),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('action_url', sa.String(500), nullable=True),
        sa.Column('data', sa.JSON(), nullable=True),
        sa.Column('read_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'system_configurations',
        _id(),
        sa.Column('key', sa.String(50), nullable=False, index=True),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('value', sa.JSON(), nullable=False),
        sa.Column('preset_id', sa.String(50), nullable=True),
        _user_fk('updated_by', nullable=True, index=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('key', 'version', name='uq_system_configurations_key_version'),
    )

    op.create_table(
        'daily_motivation_quotes',
        _id(),
        _user_fk('user_id'),
        sa.Column('quote', sa.Text(), nullable=False),
        sa.Column('author', sa.String(200), nullable=True),
        sa.Column('category', sa.String(50), nullable=True),
        sa.Column('personalization_reason', sa.Text(), nullable=True),
        sa.Column('wellness_tip', sa.Text(), nullable=True),
        sa.Column('date_generated', sa.Date(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('user_id', 'date_generated', name='uq_daily_motivation_quotes_user_date'),
    )


def downgrade() -> None:
    op.drop_table('daily_motivation_quotes')
    op.drop_table('system_configurations')
    op.drop_table('user_notifications')
    op.drop_index('ix_client_messages_recipient_read', table_name='client_messages')
    op.drop_table('client_messages')
    op.drop_table('user_safety_video_logs')
    op.drop_table('home_user_posture_assessment')
    op.drop_table('home_user_onboarding')
    op.drop_index('uq_bookings_active_user_entity', table_name='bookings')
    op.drop_index('ix_bookings_created_at', table_name='bookings')
    op.drop_table('bookings')
    op.drop_index('ix_private_sessions_status_start', table_name='private_sessions')
    op.drop_table('private_sessions')
    op.drop_index('ix_scheduled_classes_status_start', table_name='scheduled_classes')
    op.drop_table('scheduled_classes')
    op.drop_table('service_types')
    op.drop_table('credit_packages')
    op.drop_index('ix_credit_logs_related', table_name='credit_logs')
    op.drop_table('credit_logs')
    op.drop_index('ix_credits_user_status_expiry', table_name='credits')
    op.drop_table('credits')
    op.drop_table('memberships')
    op.drop_table('membership_types')
    op.drop_table('users')
