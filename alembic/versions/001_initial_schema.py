"""Initial schema: users, profiles, skills, offerings, bookings, reviews

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-18
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('role', sa.String(32), nullable=False, server_default='mentee'),
        sa.Column('status', sa.String(32), nullable=False, server_default='pending'),
        sa.Column('email_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('last_login_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_status'), 'users', ['status'], unique=False)

    op.create_table(
        'profiles',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('display_name', sa.String(100), nullable=False),
        sa.Column('avatar_url', sa.String(500), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('languages', sa.JSON(), nullable=True),
        sa.Column('timezone', sa.String(64), nullable=False, server_default='UTC'),
        sa.Column('country', sa.String(100), nullable=True),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('website', sa.String(500), nullable=True),
        sa.Column('social_links', sa.JSON(), nullable=True),
        sa.Column('rating', sa.Float(), nullable=False, server_default='0'),
        sa.Column('total_reviews', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
        sa.CheckConstraint('rating >= 0', name='ck_profiles_rating'),
        sa.CheckConstraint('total_reviews >= 0', name='ck_profiles_total_reviews')
    )
    op.create_index(op.f('ix_profiles_id'), 'profiles', ['id'], unique=False)

    op.create_table(
        'mentor_profiles',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('headline', sa.String(200), nullable=True),
        sa.Column('hourly_rate_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('experience_years', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('intro_video_url', sa.String(500), nullable=True),
        sa.Column('is_public', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('specializations', sa.JSON(), nullable=True),
        sa.Column('response_time_hours', sa.Integer(), nullable=False, server_default='24'),
        sa.Column('total_sessions', sa.Integer(), nullable=False, server_default='0'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
        sa.CheckConstraint('hourly_rate_cents >= 0', name='ck_mentor_profiles_rate'),
        sa.CheckConstraint('experience_years >= 0', name='ck_mentor_profiles_experience')
    )
    op.create_index(op.f('ix_mentor_profiles_id'), 'mentor_profiles', ['id'], unique=False)

    op.create_table(
        'match_preferences',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('goals', sa.JSON(), nullable=True),
        sa.Column('preferred_languages', sa.JSON(), nullable=True),
        sa.Column('budget_cents', sa.Integer(), nullable=True),
        sa.Column('time_commitment', sa.String(100), nullable=True),
        sa.Column('preferred_mentoring_style', sa.String(100), nullable=True),
        sa.Column('current_role', sa.String(200), nullable=True),
        sa.Column('skills_to_develop', sa.JSON(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id')
    )
    op.create_index(op.f('ix_match_preferences_id'), 'match_preferences', ['id'], unique=False)

    op.create_table(
        'skills',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('slug', sa.String(100), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('category', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_skills_id'), 'skills', ['id'], unique=False)
    op.create_index(op.f('ix_skills_slug'), 'skills', ['slug'], unique=True)
    op.create_index(op.f('ix_skills_category'), 'skills', ['category'], unique=False)

    op.create_table(
        'user_skills',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('skill_id', sa.Integer(), nullable=False),
        sa.Column('level', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('years_of_experience', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('verified_by', sa.Integer(), nullable=True),
        sa.Column('verified_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['skill_id'], ['skills.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['verified_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'skill_id', name='uq_user_skills_user_skill'),
        sa.CheckConstraint('level BETWEEN 1 AND 5', name='ck_user_skills_level'),
        sa.CheckConstraint('years_of_experience >= 0', name='ck_user_skills_years')
    )
    op.create_index(op.f('ix_user_skills_id'), 'user_skills', ['id'], unique=False)
    op.create_index(op.f('ix_user_skills_user_id'), 'user_skills', ['user_id'], unique=False)
    op.create_index(op.f('ix_user_skills_skill_id'), 'user_skills', ['skill_id'], unique=False)

    op.create_table(
        'offerings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('mentor_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('type', sa.String(32), nullable=False, server_default='one_on_one'),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('price_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('currency', sa.String(3), nullable=False, server_default='USD'),
        sa.Column('max_participants', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('tags', sa.JSON(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.ForeignKeyConstraint(['mentor_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('duration_minutes BETWEEN 15 AND 480', name='ck_offerings_duration'),
        sa.CheckConstraint('price_cents >= 0', name='ck_offerings_price'),
        sa.CheckConstraint('max_participants >= 1', name='ck_offerings_participants')
    )
    op.create_index(op.f('ix_offerings_id'), 'offerings', ['id'], unique=False)
    op.create_index(op.f('ix_offerings_mentor_id'), 'offerings', ['mentor_id'], unique=False)
    op.create_index(op.f('ix_offerings_is_active'), 'offerings', ['is_active'], unique=False)

    op.create_table(
        'offering_skills',
        sa.Column('offering_id', sa.Integer(), nullable=False),
        sa.Column('skill_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['offering_id'], ['offerings.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['skill_id'], ['skills.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('offering_id', 'skill_id')
    )

    op.create_table(
        'bookings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('offering_id', sa.Integer(), nullable=True),
        sa.Column('mentor_id', sa.Integer(), nullable=False),
        sa.Column('mentee_id', sa.Integer(), nullable=False),
        sa.Column('starts_at', sa.DateTime(), nullable=False),
        sa.Column('ends_at', sa.DateTime(), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(32), nullable=False, server_default='pending'),
        sa.Column('price_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('currency', sa.String(3), nullable=False, server_default='USD'),
        sa.Column('meeting_url', sa.String(500), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('cancellation_reason', sa.String(500), nullable=True),
        sa.Column('cancelled_by', sa.Integer(), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['offering_id'], ['offerings.id']),
        sa.ForeignKeyConstraint(['mentor_id'], ['users.id']),
        sa.ForeignKeyConstraint(['mentee_id'], ['users.id']),
        sa.ForeignKeyConstraint(['cancelled_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('ends_at > starts_at', name='ck_bookings_time_range'),
        sa.CheckConstraint('price_cents >= 0', name='ck_bookings_price'),
        sa.CheckConstraint('mentor_id <> mentee_id', name='ck_bookings_distinct_parties')
    )
    op.create_index(op.f('ix_bookings_id'), 'bookings', ['id'], unique=False)
    op.create_index(op.f('ix_bookings_offering_id'), 'bookings', ['offering_id'], unique=False)
    op.create_index(op.f('ix_bookings_mentee_id'), 'bookings', ['mentee_id'], unique=False)
    op.create_index(op.f('ix_bookings_status'), 'bookings', ['status'], unique=False)
    op.create_index('ix_bookings_mentor_starts', 'bookings', ['mentor_id', 'starts_at'], unique=False)

    # PostgreSQL rejects overlapping active bookings of one mentor at the store level
    if op.get_bind().dialect.name == 'postgresql':
        op.execute('CREATE EXTENSION IF NOT EXISTS btree_gist')
        op.execute(
            "ALTER TABLE bookings ADD CONSTRAINT ex_bookings_mentor_overlap "
            "EXCLUDE USING gist (mentor_id WITH =, tsrange(starts_at, ends_at) WITH &&) "
            "WHERE (status IN ('pending', 'confirmed'))"
        )

    op.create_table(
        'reviews',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('booking_id', sa.Integer(), nullable=False),
        sa.Column('rater_id', sa.Integer(), nullable=False),
        sa.Column('ratee_id', sa.Integer(), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('comment', sa.Text(), nullable=True),
        sa.Column('moderated_at', sa.DateTime(), nullable=True),
        sa.Column('moderated_by', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['booking_id'], ['bookings.id']),
        sa.ForeignKeyConstraint(['rater_id'], ['users.id']),
        sa.ForeignKeyConstraint(['ratee_id'], ['users.id']),
        sa.ForeignKeyConstraint(['moderated_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('booking_id', 'rater_id', name='uq_reviews_booking_rater'),
        sa.CheckConstraint('rating BETWEEN 1 AND 5', name='ck_reviews_rating'),
        sa.CheckConstraint('rater_id <> ratee_id', name='ck_reviews_distinct_parties')
    )
    op.create_index(op.f('ix_reviews_id'), 'reviews', ['id'], unique=False)
    op.create_index(op.f('ix_reviews_booking_id'), 'reviews', ['booking_id'], unique=False)
    op.create_index(op.f('ix_reviews_rater_id'), 'reviews', ['rater_id'], unique=False)
    op.create_index(op.f('ix_reviews_ratee_id'), 'reviews', ['ratee_id'], unique=False)


def downgrade() -> None:
    op.drop_table('reviews')
    op.drop_table('bookings')
    op.drop_table('offering_skills')
    op.drop_table('offerings')
    op.drop_table('user_skills')
    op.drop_table('skills')
    op.drop_table('match_preferences')
    op.drop_table('mentor_profiles')
    op.drop_table('profiles')
    op.drop_table('users')
