"""initial lifting schema

Revision ID: 001
Revises: 
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'exercise',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('weight_increment', sa.Float(), server_default='5.0', nullable=False),
        sa.Column('is_custom', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        'plan',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('duration_weeks', sa.Integer(), server_default='6', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        'plan_day',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('plan_id', sa.Uuid(), sa.ForeignKey('plan.id', ondelete='CASCADE'), nullable=False),
        sa.Column('day_of_week', sa.Integer(), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('sort_order', sa.Integer(), server_default='0', nullable=False),
        sa.CheckConstraint('day_of_week BETWEEN 0 AND 6', name='ck_plan_day_day_of_week'),
    )
    op.create_index('ix_plan_day_plan_id', 'plan_day', ['plan_id'])

    op.create_table(
        'plan_day_exercise',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('plan_day_id', sa.Uuid(), sa.ForeignKey('plan_day.id', ondelete='CASCADE'), nullable=False),
        sa.Column('exercise_id', sa.Uuid(), sa.ForeignKey('exercise.id'), nullable=False),
        sa.Column('sets', sa.Integer(), server_default='2', nullable=False),
        sa.Column('reps', sa.Integer(), server_default='8', nullable=False),
        sa.Column('weight', sa.Float(), server_default='0', nullable=False),
        sa.Column('rest_seconds', sa.Integer(), server_default='60', nullable=False),
        sa.Column('sort_order', sa.Integer(), server_default='0', nullable=False),
        sa.Column('min_reps', sa.Integer(), server_default='8', nullable=False),
        sa.Column('max_reps', sa.Integer(), server_default='12', nullable=False),
    )
    op.create_index('ix_plan_day_exercise_plan_day_id', 'plan_day_exercise', ['plan_day_id'])
    op.create_index('ix_plan_day_exercise_exercise_id', 'plan_day_exercise', ['exercise_id'])

    op.create_table(
        'mesocycle',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('plan_id', sa.Uuid(), sa.ForeignKey('plan.id'), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('current_week', sa.Integer(), server_default='1', nullable=False),
        sa.Column('status', sa.Text(), server_default='pending', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_mesocycle_plan_id', 'mesocycle', ['plan_id'])
    op.create_index('ix_mesocycle_status', 'mesocycle', ['status'])

    op.create_table(
        'workout',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('mesocycle_id', sa.Uuid(), sa.ForeignKey('mesocycle.id', ondelete='CASCADE'), nullable=False),
        sa.Column('plan_day_id', sa.Uuid(), sa.ForeignKey('plan_day.id'), nullable=False),
        sa.Column('week_number', sa.Integer(), nullable=False),
        sa.Column('scheduled_date', sa.Date(), nullable=False),
        sa.Column('status', sa.Text(), server_default='pending', nullable=False),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_workout_mesocycle_week', 'workout', ['mesocycle_id', 'week_number'])
    op.create_index('ix_workout_scheduled_date', 'workout', ['scheduled_date'])
    op.create_index('ix_workout_plan_day', 'workout', ['plan_day_id'])

    op.create_table(
        'workout_set',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('workout_id', sa.Uuid(), sa.ForeignKey('workout.id', ondelete='CASCADE'), nullable=False),
        sa.Column('exercise_id', sa.Uuid(), sa.ForeignKey('exercise.id'), nullable=False),
        sa.Column('set_number', sa.Integer(), nullable=False),
        sa.Column('target_reps', sa.Integer(), nullable=False),
        sa.Column('target_weight', sa.Float(), nullable=False),
        sa.Column('actual_reps', sa.Integer(), nullable=True),
        sa.Column('actual_weight', sa.Float(), nullable=True),
        sa.Column('status', sa.Text(), server_default='pending', nullable=False),
    )
    op.create_index('ix_workout_set_workout_exercise', 'workout_set', ['workout_id', 'exercise_id'])
    op.create_index('ix_workout_set_exercise_status', 'workout_set', ['exercise_id', 'status'])


def downgrade() -> None:
    op.drop_table('workout_set')
    op.drop_table('workout')
    op.drop_table('mesocycle')
    op.drop_table('plan_day_exercise')
    op.drop_table('plan_day')
    op.drop_table('plan')
    op.drop_table('exercise')
