"""create hood tables

Revision ID: 3c1f0a9d2b7e
Revises:
Create Date: 2024-01-02 10:12:41

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1f0a9d2b7e'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('birthday', sa.Date(), nullable=False),
        sa.Column('address', sa.String(length=255), nullable=False),
        sa.Column('activity', sa.String(length=120), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('personal_phone', sa.String(length=30), nullable=True),
        sa.Column('commercial_phone', sa.String(length=30), nullable=True),
        sa.Column('uses_whatsapp', sa.Boolean(), nullable=False),
        sa.Column('identities', sa.Text(), nullable=True),
        sa.Column('profile_url', sa.String(length=2048), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'associations',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('neighborhood', sa.String(length=120), nullable=False),
        sa.Column('country', sa.String(length=80), nullable=False),
        sa.Column('state', sa.String(length=80), nullable=False),
        sa.Column('address', sa.String(length=255), nullable=False),
        sa.Column('identity', sa.String(length=80), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'user_associations',
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('association_id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['association_id'], ['associations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('user_id', 'association_id'),
    )
    op.create_index('ix_user_associations_association_id', 'user_associations', ['association_id'])

    op.create_table(
        'association_admins',
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('association_id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ['user_id', 'association_id'],
            ['user_associations.user_id', 'user_associations.association_id'],
            ondelete='CASCADE',
            name='fk_association_admins_membership',
        ),
        sa.PrimaryKeyConstraint('user_id', 'association_id'),
    )

    op.create_table(
        'association_treasurers',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('association_id', sa.Uuid(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ['user_id', 'association_id'],
            ['user_associations.user_id', 'user_associations.association_id'],
            ondelete='CASCADE',
            name='fk_association_treasurers_membership',
        ),
        sa.CheckConstraint(
            'end_date IS NULL OR start_date <= end_date',
            name='ck_association_treasurers_date_range',
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_association_treasurers_association_id', 'association_treasurers', ['association_id'])

    # 협회당 열린 임기(end_date IS NULL)는 하나만 허용
    op.create_index(
        'uq_association_treasurers_open_term',
        'association_treasurers',
        ['association_id'],
        unique=True,
        postgresql_where=sa.text('end_date IS NULL'),
        sqlite_where=sa.text('end_date IS NULL'),
    )

    op.create_table(
        'transactions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('association_id', sa.Uuid(), nullable=False),
        sa.Column('creator_id', sa.Uuid(), nullable=False),
        sa.Column('details', sa.Text(), nullable=False),
        sa.Column('amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('reference_date', sa.Date(), nullable=False),
        sa.Column('deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['association_id'], ['associations.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['creator_id'], ['users.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_transactions_association_id', 'transactions', ['association_id'])
    op.create_index('ix_transactions_creator_id', 'transactions', ['creator_id'])
    op.create_index('ix_transactions_deleted', 'transactions', ['deleted'])


def downgrade() -> None:
    op.drop_index('ix_transactions_deleted', table_name='transactions')
    op.drop_index('ix_transactions_creator_id', table_name='transactions')
    op.drop_index('ix_transactions_association_id', table_name='transactions')
    op.drop_table('transactions')
    op.drop_index('uq_association_treasurers_open_term', table_name='association_treasurers')
    op.drop_index('ix_association_treasurers_association_id', table_name='association_treasurers')
    op.drop_table('association_treasurers')
    op.drop_table('association_admins')
    op.drop_index('ix_user_associations_association_id', table_name='user_associations')
    op.drop_table('user_associations')
    op.drop_table('associations')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
