"""initial schema

Revision ID: b7c1d2e3f4a5
Revises:
Create Date: 2026-10-17 00:00:00.000000

Creates the four tables:
- products: catalog keyed by unique grams, stock kept non-negative
- purchases_lettuce / purchases_other: append-only purchase logs, one per channel
- users: credentials and role
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'b7c1d2e3f4a5'
down_revision = None
branch_labels = None
depends_on = None

PURCHASE_TABLES = ('purchases_lettuce', 'purchases_other')


def upgrade():
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('grams', sa.Integer(), nullable=False),
        sa.Column('price', sa.Float(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('quantity >= 0', name='ck_products_quantity_non_negative'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_products_grams', 'products', ['grams'], unique=True)

    # Same columns for both channels; grams is a value reference, not a foreign key
    for table in PURCHASE_TABLES:
        op.create_table(
            table,
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('grams', sa.Integer(), nullable=False),
            sa.Column('quantity', sa.Integer(), nullable=False),
            sa.Column('totalCost', sa.JSON(), nullable=False),
            sa.Column('purchaseDate', sa.Text(), nullable=False),
            sa.PrimaryKeyConstraint('id'),
            sqlite_autoincrement=True
        )
        op.create_index(f'ix_{table}_grams', table, ['grams'], unique=False)

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=80), nullable=False),
        sa.Column('password', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)


def downgrade():
    op.drop_index('ix_users_username', table_name='users')
    op.drop_table('users')
    for table in reversed(PURCHASE_TABLES):
        op.drop_index(f'ix_{table}_grams', table_name=table)
        op.drop_table(table)
    op.drop_index('ix_products_grams', table_name='products')
    op.drop_table('products')
