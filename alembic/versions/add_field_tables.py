"""add fields and field reservations

Revision ID: 8e2b5c7d4a16
Revises: 3c1f0a9d2b7e
Create Date: 2024-02-14 19:03:27

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8e2b5c7d4a16'
down_revision: Union[str, Sequence[str], None] = '3c1f0a9d2b7e'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'fields',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('association_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('reservation_rules', sa.JSON(), nullable=True),
        sa.Column('latitude', sa.Numeric(9, 6), nullable=False),
        sa.Column('longitude', sa.Numeric(9, 6), nullable=False),
        sa.Column('deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['association_id'], ['associations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_fields_association_id', 'fields', ['association_id'])

    op.create_table(
        'field_reservations',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('field_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('start_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['field_id'], ['fields.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.CheckConstraint('start_at < end_at', name='ck_field_reservations_time_range'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'ix_field_reservations_field_id_start_at', 'field_reservations', ['field_id', 'start_at']
    )
    op.create_index('ix_field_reservations_user_id', 'field_reservations', ['user_id'])


def downgrade() -> None:
    op.drop_index('ix_field_reservations_user_id', table_name='field_reservations')
    op.drop_index('ix_field_reservations_field_id_start_at', table_name='field_reservations')
    op.drop_table('field_reservations')
    op.drop_index('ix_fields_association_id', table_name='fields')
    op.drop_table('fields')
