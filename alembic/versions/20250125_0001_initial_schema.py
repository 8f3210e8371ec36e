"""initial schema: profiles, catalog, bookings, transactions, reviews

Revision ID: 20250125_0001
Revises:
Create Date: 2025-01-25
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = '20250125_0001'
down_revision = None
branch_labels = None
depends_on = None

USER_TYPES = ('teacher', 'student', 'admin')
DIFFICULTY_LEVELS = ('beginner', 'intermediate', 'advanced')
BOOKING_STATUSES = ('pending', 'confirmed', 'completed', 'cancelled')
PAYMENT_STATUSES = ('pending', 'completed', 'failed', 'refunded')


def _timestamps(updated=True):
    cols = [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]
    if updated:
        cols.append(
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())
        )
    return cols


def upgrade() -> None:
    op.create_table(
        'profiles',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(100), nullable=False),
        sa.Column('avatar_url', sa.Text, nullable=True),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('user_type', sa.Enum(*USER_TYPES, name='user_type_enum'), nullable=False, server_default='student'),
        sa.Column('bio', sa.Text, nullable=True),
        sa.Column('experience_years', sa.Integer, nullable=False, server_default='0'),
        sa.Column('hourly_rate', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('is_verified', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('rating', sa.Numeric(3, 2), nullable=False, server_default='0'),
        sa.Column('total_students', sa.Integer, nullable=False, server_default='0'),
        sa.Column('total_lessons', sa.Integer, nullable=False, server_default='0'),
        *_timestamps(),
    )
    op.create_index('ix_profiles_email', 'profiles', ['email'], unique=True)
    op.create_index('ix_profiles_user_type', 'profiles', ['user_type'])
    op.create_index('ix_profiles_is_verified', 'profiles', ['is_verified'])
    op.create_index('ix_profiles_rating', 'profiles', ['rating'])

    op.create_table(
        'subjects',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False, unique=True),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('icon_name', sa.String(50), nullable=True),
        *_timestamps(updated=False),
    )

    op.create_table(
        'lessons',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('teacher_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('subject_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('subjects.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text, nullable=False),
        sa.Column('duration_minutes', sa.Integer, nullable=False, server_default='60'),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('max_students', sa.Integer, nullable=False, server_default='1'),
        sa.Column('difficulty_level', sa.Enum(*DIFFICULTY_LEVELS, name='difficulty_level_enum'),
                  nullable=False, server_default='beginner'),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index('ix_lessons_teacher_id', 'lessons', ['teacher_id'])
    op.create_index('ix_lessons_subject_id', 'lessons', ['subject_id'])
    op.create_index('ix_lessons_is_active', 'lessons', ['is_active'])

    op.create_table(
        'lesson_materials',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('lesson_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('lessons.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('file_url', sa.Text, nullable=True),
        sa.Column('file_type', sa.String(50), nullable=True),
        *_timestamps(updated=False),
    )
    op.create_index('ix_lesson_materials_lesson_id', 'lesson_materials', ['lesson_id'])

    op.create_table(
        'bookings',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('lesson_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('lessons.id', ondelete='CASCADE'), nullable=False),
        sa.Column('student_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('teacher_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('scheduled_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', sa.Enum(*BOOKING_STATUSES, name='booking_status_enum'),
                  nullable=False, server_default='pending'),
        sa.Column('meeting_link', sa.Text, nullable=True),
        sa.Column('notes', sa.Text, nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_bookings_lesson_id', 'bookings', ['lesson_id'])
    op.create_index('ix_bookings_student_id', 'bookings', ['student_id'])
    op.create_index('ix_bookings_teacher_id', 'bookings', ['teacher_id'])
    op.create_index('ix_bookings_scheduled_at', 'bookings', ['scheduled_at'])
    op.create_index('ix_bookings_status', 'bookings', ['status'])

    op.create_table(
        'transactions',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('booking_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('bookings.id', ondelete='CASCADE'), nullable=False),
        sa.Column('student_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('teacher_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('total_amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('platform_commission', sa.Numeric(10, 2), nullable=False),
        sa.Column('teacher_amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('payment_status', sa.Enum(*PAYMENT_STATUSES, name='payment_status_enum'),
                  nullable=False, server_default='pending'),
        sa.Column('payment_method', sa.String(50), nullable=True),
        sa.Column('transaction_ref', sa.String(100), nullable=True),
        *_timestamps(updated=False),
    )
    op.create_index('ix_transactions_booking_id', 'transactions', ['booking_id'], unique=True)
    op.create_index('ix_transactions_student_id', 'transactions', ['student_id'])
    op.create_index('ix_transactions_teacher_id', 'transactions', ['teacher_id'])
    op.create_index('ix_transactions_payment_status', 'transactions', ['payment_status'])

    op.create_table(
        'reviews',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('booking_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('bookings.id', ondelete='CASCADE'), nullable=False),
        sa.Column('student_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('teacher_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('rating', sa.Integer, nullable=False),
        sa.Column('comment', sa.Text, nullable=True),
        *_timestamps(updated=False),
        sa.CheckConstraint('rating >= 1 AND rating <= 5', name='ck_reviews_rating_range'),
    )
    op.create_index('ix_reviews_booking_id', 'reviews', ['booking_id'], unique=True)
    op.create_index('ix_reviews_student_id', 'reviews', ['student_id'])
    op.create_index('ix_reviews_teacher_id', 'reviews', ['teacher_id'])


def downgrade() -> None:
    op.drop_table('reviews')
    op.drop_table('transactions')
    op.drop_table('bookings')
    op.drop_table('lesson_materials')
    op.drop_table('lessons')
    op.drop_table('subjects')
    op.drop_table('profiles')

    bind = op.get_bind()
    for enum_name in (
        'payment_status_enum',
        'booking_status_enum',
        'difficulty_level_enum',
        'user_type_enum',
    ):
        sa.Enum(name=enum_name).drop(bind, checkfirst=True)
