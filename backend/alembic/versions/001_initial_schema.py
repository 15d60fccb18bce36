"""Create users, day schedules, items, shares and invites

Revision ID: 001_initial_schema
Revises:
Create Date: 2025-09-01

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('external_id', sa.String(255), nullable=False),
        sa.Column('email', sa.String(320), nullable=True),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('avatar_url', sa.String(1024), nullable=True),
        sa.Column('public_slug', sa.String(64), nullable=True),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_external_id', 'users', ['external_id'], unique=True)
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_public_slug', 'users', ['public_slug'], unique=True)

    op.create_table(
        'day_schedules',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('owner_id', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('title', sa.String(255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('owner_id', 'date', name='uq_day_schedules_owner_date')
    )
    op.create_index('ix_day_schedules_owner_id', 'day_schedules', ['owner_id'])

    op.create_table(
        'schedule_items',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('schedule_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('emoji', sa.String(32), nullable=True),
        sa.Column('color', sa.String(32), nullable=True),
        sa.Column('location', sa.String(500), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('kind', sa.String(16), nullable=False, server_default='GENERAL'),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('departure_place', sa.String(500), nullable=True),
        sa.Column('arrival_place', sa.String(500), nullable=True),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
        sa.ForeignKeyConstraint(['schedule_id'], ['day_schedules.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_schedule_items_schedule_id', 'schedule_items', ['schedule_id'])
    op.create_index('ix_schedule_items_start_time', 'schedule_items', ['start_time'])

    op.create_table(
        'schedule_shares',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('schedule_id', sa.Integer(), nullable=False),
        sa.Column('shared_with_user_id', sa.Integer(), nullable=False),
        sa.Column('can_edit', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
        sa.ForeignKeyConstraint(['schedule_id'], ['day_schedules.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['shared_with_user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('schedule_id', 'shared_with_user_id', name='uq_schedule_shares_schedule_user')
    )
    op.create_index('ix_schedule_shares_schedule_id', 'schedule_shares', ['schedule_id'])
    op.create_index('ix_schedule_shares_shared_with_user_id', 'schedule_shares', ['shared_with_user_id'])

    op.create_table(
        'schedule_share_invites',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('schedule_id', sa.Integer(), nullable=False),
        sa.Column('token', sa.String(128), nullable=False),
        sa.Column('invited_email', sa.String(320), nullable=True),
        sa.Column('can_edit', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('redeemed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('redeemed_by_user_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['schedule_id'], ['day_schedules.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['redeemed_by_user_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_schedule_share_invites_schedule_id', 'schedule_share_invites', ['schedule_id'])
    op.create_index('ix_schedule_share_invites_token', 'schedule_share_invites', ['token'], unique=True)


def downgrade() -> None:
    op.drop_index('ix_schedule_share_invites_token', table_name='schedule_share_invites')
    op.drop_index('ix_schedule_share_invites_schedule_id', table_name='schedule_share_invites')
    op.drop_table('schedule_share_invites')
    op.drop_index('ix_schedule_shares_shared_with_user_id', table_name='schedule_shares')
    op.drop_index('ix_schedule_shares_schedule_id', table_name='schedule_shares')
    op.drop_table('schedule_shares')
    op.drop_index('ix_schedule_items_start_time', table_name='schedule_items')
    op.drop_index('ix_schedule_items_schedule_id', table_name='schedule_items')
    op.drop_table('schedule_items')
    op.drop_index('ix_day_schedules_owner_id', table_name='day_schedules')
    op.drop_table('day_schedules')
    op.drop_index('ix_users_public_slug', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_index('ix_users_external_id', table_name='users')
    op.drop_table('users')
