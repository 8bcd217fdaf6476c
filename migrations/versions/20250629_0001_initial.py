"""initial: usr.engineering_units, usr.users, dpm.data_points

Revision ID: 20250629_0001
Revises:
Create Date: 2025-06-29 14:16:12

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20250629_0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'engineering_units',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('code', sa.String(length=50), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code'),
        schema='usr'
    )
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=256), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('department', sa.String(length=100), nullable=True),
        sa.Column('job_title', sa.String(length=100), nullable=True),
        sa.Column('role', sa.Enum('ADMIN', 'ENGINEER', 'GENERAL_USER', name='userrole'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('two_factor_enabled', sa.Boolean(), nullable=False),
        sa.Column('access_failed_count', sa.Integer(), nullable=False),
        sa.Column('lockout_end', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('unit_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('last_login_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['unit_id'], ['usr.engineering_units.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
        schema='usr'
    )
    op.create_table(
        'data_points',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('parameter_name', sa.String(length=100), nullable=False),
        sa.Column('value', sa.Numeric(precision=18, scale=4), nullable=False),
        sa.Column('unit', sa.String(length=20), nullable=False),
        sa.Column('notes', sa.String(length=500), nullable=True),
        sa.Column('timestamp', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('min_value', sa.Numeric(precision=18, scale=4), nullable=True),
        sa.Column('max_value', sa.Numeric(precision=18, scale=4), nullable=True),
        sa.Column('is_valid', sa.Boolean(), nullable=False),
        sa.Column('validation_message', sa.String(length=200), nullable=True),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('unit_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['usr.users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['unit_id'], ['usr.engineering_units.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        schema='dpm'
    )
    op.create_index(op.f('ix_dpm_data_points_parameter_name'), 'data_points', ['parameter_name'], unique=False, schema='dpm')
    op.create_index(op.f('ix_dpm_data_points_timestamp'), 'data_points', ['timestamp'], unique=False, schema='dpm')
    op.create_index(op.f('ix_dpm_data_points_user_id'), 'data_points', ['user_id'], unique=False, schema='dpm')
    op.create_index(op.f('ix_dpm_data_points_unit_id'), 'data_points', ['unit_id'], unique=False, schema='dpm')


def downgrade() -> None:
    op.drop_index(op.f('ix_dpm_data_points_unit_id'), table_name='data_points', schema='dpm')
    op.drop_index(op.f('ix_dpm_data_points_user_id'), table_name='data_points', schema='dpm')
    op.drop_index(op.f('ix_dpm_data_points_timestamp'), table_name='data_points', schema='dpm')
    op.drop_index(op.f('ix_dpm_data_points_parameter_name'), table_name='data_points', schema='dpm')
    op.drop_table('data_points', schema='dpm')
    op.drop_table('users', schema='usr')
    op.drop_table('engineering_units', schema='usr')
    sa.Enum(name='userrole').drop(op.get_bind(), checkfirst=True)
