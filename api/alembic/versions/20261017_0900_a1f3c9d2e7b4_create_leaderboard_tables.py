"""create_leaderboard_tables

Revision ID: a1f3c9d2e7b4
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'a1f3c9d2e7b4'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'leaderboard_periods',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('start_time', sa.DateTime(), nullable=False, unique=True),
        sa.Column('end_time', sa.DateTime(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('rewards_distributed_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index(op.f('ix_leaderboard_periods_status'), 'leaderboard_periods', ['status'], unique=False)
    op.create_index('idx_leaderboard_periods_window', 'leaderboard_periods', ['start_time', 'end_time'], unique=False)
    # Single active period
    op.create_index(
        'uq_leaderboard_periods_single_active',
        'leaderboard_periods',
        ['status'],
        unique=True,
        postgresql_where=sa.text("status = 'active'"),
    )

    op.create_table(
        'engagement_events',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('subject_user_id', sa.Uuid(), nullable=False),
        sa.Column('action_type', sa.String(length=20), nullable=False),
        sa.Column('content_type', sa.String(length=20), nullable=False),
        sa.Column('content_id', sa.Uuid(), nullable=False),
        sa.Column('period_id', sa.Uuid(), sa.ForeignKey('leaderboard_periods.id', ondelete='CASCADE'), nullable=False),
        sa.Column('points_delta', sa.Float(), nullable=False),
        sa.Column('reverses_event_id', sa.Uuid(), sa.ForeignKey('engagement_events.id'), nullable=True, unique=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index(op.f('ix_engagement_events_user_id'), 'engagement_events', ['user_id'], unique=False)
    op.create_index(op.f('ix_engagement_events_subject_user_id'), 'engagement_events', ['subject_user_id'], unique=False)
    op.create_index(op.f('ix_engagement_events_period_id'), 'engagement_events', ['period_id'], unique=False)
    op.create_index(
        'idx_engagement_events_lookup',
        'engagement_events',
        ['period_id', 'user_id', 'action_type', 'content_type', 'content_id'],
        unique=False,
    )
    op.create_index('idx_engagement_events_subject_period', 'engagement_events', ['subject_user_id', 'period_id'], unique=False)

    op.create_table(
        'user_point_totals',
        sa.Column('user_id', sa.Uuid(), primary_key=True),
        sa.Column('period_id', sa.Uuid(), sa.ForeignKey('leaderboard_periods.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('total_points', sa.Float(), nullable=False),
        sa.Column('entered_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('idx_user_point_totals_leaderboard', 'user_point_totals', ['period_id', 'total_points'], unique=False)

    op.create_table(
        'leaderboard_rankings',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('period_id', sa.Uuid(), sa.ForeignKey('leaderboard_periods.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('rank_position', sa.Integer(), nullable=False),
        sa.Column('tier', sa.String(length=50), nullable=False),
        sa.Column('total_points', sa.Float(), nullable=False),
        sa.Column('last_updated', sa.DateTime(), nullable=False),
        sa.CheckConstraint('rank_position >= 1 AND rank_position <= 50', name='ck_leaderboard_rankings_position'),
    )
    op.create_index(op.f('ix_leaderboard_rankings_period_id'), 'leaderboard_rankings', ['period_id'], unique=False)
    op.create_index(op.f('ix_leaderboard_rankings_user_id'), 'leaderboard_rankings', ['user_id'], unique=False)
    op.create_index('uq_leaderboard_rankings_period_user', 'leaderboard_rankings', ['period_id', 'user_id'], unique=True)
    op.create_index('uq_leaderboard_rankings_period_position', 'leaderboard_rankings', ['period_id', 'rank_position'], unique=True)

    op.create_table(
        'user_rewards',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('period_id', sa.Uuid(), sa.ForeignKey('leaderboard_periods.id', ondelete='CASCADE'), nullable=False),
        sa.Column('reward_type', sa.String(length=30), nullable=False),
        sa.Column('rank_achieved', sa.Integer(), nullable=False),
        sa.Column('tier', sa.String(length=50), nullable=False),
        sa.Column('title_text', sa.String(length=100), nullable=True),
        sa.Column('badge_icon', sa.String(length=100), nullable=True),
        sa.Column('earned_at', sa.DateTime(), nullable=False),
    )
    op.create_index(op.f('ix_user_rewards_user_id'), 'user_rewards', ['user_id'], unique=False)
    op.create_index('uq_user_rewards_user_period', 'user_rewards', ['user_id', 'period_id'], unique=True)
    op.create_index('idx_user_rewards_period_rank', 'user_rewards', ['period_id', 'rank_achieved'], unique=False)

    op.create_table(
        'profiles',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('username', sa.String(length=100), nullable=True),
        sa.Column('avatar_url', sa.String(length=500), nullable=True),
        sa.Column('current_tier', sa.String(length=50), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index(op.f('ix_profiles_current_tier'), 'profiles', ['current_tier'], unique=False)


def downgrade() -> None:
    op.drop_table('profiles')
    op.drop_table('user_rewards')
    op.drop_table('leaderboard_rankings')
    op.drop_table('user_point_totals')
    op.drop_table('engagement_events')
    op.drop_table('leaderboard_periods')
