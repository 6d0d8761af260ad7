"""initial_schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2024-11-01 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _soft_delete_columns():
    return [
        sa.Column('deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('deleted_reason', sa.Text(), nullable=True),
        sa.Column('deleted_by', sa.String(length=64), nullable=True),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        'participant',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=11), nullable=False, server_default='participant'),
        sa.Column('preferred_name', sa.String(length=100), nullable=False, server_default=''),
        sa.Column('status', sa.String(length=8), nullable=False, server_default='active'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_participant_email', 'participant', ['email'], unique=True)

    op.create_table(
        'month_log',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('participant_id', sa.String(length=64), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('month', sa.Integer(), nullable=False),
        sa.Column('meals_required', sa.Integer(), nullable=False, server_default='4'),
        sa.Column('minutes_required', sa.Integer(), nullable=False, server_default='720'),
        sa.Column('meals_earned', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('minutes_earned', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_complete', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('computed_payment_date', sa.Date(), nullable=False),
        sa.Column('payment_status', sa.String(length=7), nullable=False, server_default='Not due'),
        sa.Column('payment_marked_at', sa.DateTime(), nullable=True),
        sa.Column('payment_marked_by', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['participant_id'], ['participant.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('participant_id', 'year', 'month', name='uq_month_log_participant_month'),
    )
    op.create_index('ix_month_log_participant_id', 'month_log', ['participant_id'])

    op.create_table(
        'shabbaton',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('date', sa.DateTime(), nullable=False),
        sa.Column('default_meals', sa.Integer(), nullable=False, server_default='3'),
        sa.Column('default_minutes', sa.Integer(), nullable=False, server_default='180'),
        sa.Column('attendance_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'meal_log',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('participant_id', sa.String(length=64), nullable=False),
        sa.Column('occurred_at', sa.DateTime(), nullable=False),
        sa.Column('applied_year', sa.Integer(), nullable=False),
        sa.Column('applied_month', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(length=9), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('source', sa.String(length=16), nullable=False),
        sa.Column('shabbaton_id', sa.Integer(), nullable=True),
        sa.Column('created_by', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        *_soft_delete_columns(),
        sa.ForeignKeyConstraint(['participant_id'], ['participant.id']),
        sa.ForeignKeyConstraint(['shabbaton_id'], ['shabbaton.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_meal_log_participant_id', 'meal_log', ['participant_id'])
    op.create_index('ix_meal_log_shabbaton_id', 'meal_log', ['shabbaton_id'])
    op.create_index('ix_meal_log_applied', 'meal_log', ['participant_id', 'applied_year', 'applied_month'])

    op.create_table(
        'learning_session',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('participant_id', sa.String(length=64), nullable=False),
        sa.Column('started_at', sa.DateTime(), nullable=False),
        sa.Column('minutes', sa.Integer(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('applied_year', sa.Integer(), nullable=False),
        sa.Column('applied_month', sa.Integer(), nullable=False),
        sa.Column('source', sa.String(length=11), nullable=False),
        sa.Column('shabbaton_id', sa.Integer(), nullable=True),
        sa.Column('created_by', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        *_soft_delete_columns(),
        sa.ForeignKeyConstraint(['participant_id'], ['participant.id']),
        sa.ForeignKeyConstraint(['shabbaton_id'], ['shabbaton.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_learning_session_participant_id', 'learning_session', ['participant_id'])
    op.create_index('ix_learning_session_shabbaton_id', 'learning_session', ['shabbaton_id'])
    op.create_index('ix_learning_session_applied', 'learning_session', ['participant_id', 'applied_year', 'applied_month'])

    op.create_table(
        'attendance',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('participant_id', sa.String(length=64), nullable=False),
        sa.Column('shabbaton_id', sa.Integer(), nullable=False),
        sa.Column('applied_year', sa.Integer(), nullable=False),
        sa.Column('applied_month', sa.Integer(), nullable=False),
        sa.Column('granted_meals', sa.Integer(), nullable=False),
        sa.Column('granted_minutes', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=9), nullable=False, server_default='Pending'),
        sa.Column('marked_by', sa.String(length=64), nullable=True),
        sa.Column('marked_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['participant_id'], ['participant.id']),
        sa.ForeignKeyConstraint(['shabbaton_id'], ['shabbaton.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('participant_id', 'shabbaton_id', name='uq_attendance_participant_shabbaton'),
    )
    op.create_index('ix_attendance_participant_id', 'attendance', ['participant_id'])
    op.create_index('ix_attendance_shabbaton_id', 'attendance', ['shabbaton_id'])

    op.create_table(
        'uws_rsvp',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('participant_id', sa.String(length=64), nullable=False),
        sa.Column('week_date', sa.Date(), nullable=False),
        sa.Column('attending', sa.Boolean(), nullable=False),
        sa.Column('rsvp_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['participant_id'], ['participant.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('participant_id', 'week_date', name='uq_uws_rsvp_participant_week'),
    )
    op.create_index('ix_uws_rsvp_participant_id', 'uws_rsvp', ['participant_id'])
    op.create_index('ix_uws_rsvp_week_date', 'uws_rsvp', ['week_date'])


def downgrade() -> None:
    op.drop_table('uws_rsvp')
    op.drop_table('attendance')
    op.drop_table('learning_session')
    op.drop_table('meal_log')
    op.drop_table('shabbaton')
    op.drop_table('month_log')
    op.drop_index('ix_participant_email', table_name='participant')
    op.drop_table('participant')
