"""initial ledger schema

Revision ID: b7c1e2d3f4a5
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates the batch ledger schema:
- products: catalog rows the ledger reads shelf life from
- stock: receipt batches (receive/expiry date, remaining quantity)
- transactions_log: append-only audit trail, one row per ledger mutation
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'b7c1e2d3f4a5'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # ============================================================================
    # products: catalog
    # ============================================================================
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('price_cents', sa.Integer(), nullable=True),
        sa.Column('image_url', sa.String(length=512), nullable=True),
        sa.Column('category_name', sa.String(length=120), nullable=False),
        sa.Column('shelf_life_days', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name', name='uq_products_name'),
        sa.CheckConstraint('shelf_life_days >= 0', name='ck_products_shelf_life_nonnegative'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_products_category_name', 'products', ['category_name', 'name'])

    # ============================================================================
    # stock: receipt batches, FIFO by (receive_date, id)
    # ============================================================================
    op.create_table(
        'stock',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('receive_date', sa.Date(), nullable=False),
        sa.Column('expiry_date', sa.Date(), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='CASCADE'),
        sa.CheckConstraint('quantity >= 0', name='ck_stock_quantity_nonnegative'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_stock_product_id', 'stock', ['product_id'])
    op.create_index('ix_stock_expiry_date', 'stock', ['expiry_date'])
    op.create_index('ix_stock_product_fifo', 'stock', ['product_id', 'receive_date', 'id'])

    # ============================================================================
    # transactions_log: append-only audit trail
    # ============================================================================
    op.create_table(
        'transactions_log',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('action_type', sa.String(length=32), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=True),
        sa.Column('actor_name', sa.String(length=255), nullable=False),
        sa.Column('action_date', sa.DateTime(), nullable=False),
        sa.Column('extra_info', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='SET NULL'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_transactions_log_action_type', 'transactions_log', ['action_type'])
    op.create_index('ix_txlog_action_date', 'transactions_log', ['action_date', 'id'])
    op.create_index('ix_txlog_product_action', 'transactions_log', ['product_id', 'action_type'])


def downgrade():
    op.drop_index('ix_txlog_product_action', table_name='transactions_log')
    op.drop_index('ix_txlog_action_date', table_name='transactions_log')
    op.drop_index('ix_transactions_log_action_type', table_name='transactions_log')
    op.drop_table('transactions_log')

    op.drop_index('ix_stock_product_fifo', table_name='stock')
    op.drop_index('ix_stock_expiry_date', table_name='stock')
    op.drop_index('ix_stock_product_id', table_name='stock')
    op.drop_table('stock')

    op.drop_index('ix_products_category_name', table_name='products')
    op.drop_table('products')
