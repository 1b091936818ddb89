"""create_catalog_tables

Revision ID: 0001
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create products and deals with their lookup indexes."""
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('sku', sa.String(), nullable=False, comment='{brand}-{category}-{model}-{suffix} stock keeping unit'),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False, comment="Currency code (e.g., 'DZD')"),
        sa.Column('category', sa.String(), nullable=False),
        sa.Column('department', sa.String(), nullable=False),
        sa.Column('image', sa.String(), nullable=True),
        sa.Column('stock', sa.Integer(), nullable=False),
        sa.Column('rating', sa.Float(), nullable=False),
        sa.Column('brand', sa.String(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_products_sku', 'products', ['sku'], unique=True)
    op.create_index('ix_products_price', 'products', ['price'])
    op.create_index('ix_products_category', 'products', ['category'])
    op.create_index('ix_products_department', 'products', ['department'])
    op.create_index('ix_products_brand', 'products', ['brand'])
    op.create_index('ix_products_is_active', 'products', ['is_active'])

    op.create_table(
        'deals',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('variant_sku', sa.String(), nullable=False),
        sa.Column('department', sa.String(), nullable=False),
        sa.Column('thumbnail', sa.String(), nullable=True),
        sa.Column('image', sa.String(), nullable=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('short_description', sa.String(), nullable=True),
        sa.Column('price', sa.Integer(), nullable=False, comment='Discounted price'),
        sa.Column('original_price', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('discount', sa.Integer(), nullable=False, comment='Discount percentage'),
        sa.Column('rating', sa.Float(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('last_updated', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_deals_product_id', 'deals', ['product_id'])
    op.create_index('ix_deals_department', 'deals', ['department'])
    op.create_index('ix_deals_is_active', 'deals', ['is_active'])
    op.create_index('deal_dates_idx', 'deals', ['start_date', 'end_date'])

    # Full-text search over product copy
    if op.get_bind().dialect.name == 'postgresql':
        op.execute(
            "CREATE INDEX idx_products_search ON products "
            "USING gin (to_tsvector('english', title || ' ' || coalesce(description, '')))"
        )


def downgrade() -> None:
    """Drop both catalog tables."""
    if op.get_bind().dialect.name == 'postgresql':
        op.execute("DROP INDEX IF EXISTS idx_products_search")

    op.drop_index('deal_dates_idx', table_name='deals')
    op.drop_index('ix_deals_is_active', table_name='deals')
    op.drop_index('ix_deals_department', table_name='deals')
    op.drop_index('ix_deals_product_id', table_name='deals')
    op.drop_table('deals')

    op.drop_index('ix_products_is_active', table_name='products')
    op.drop_index('ix_products_brand', table_name='products')
    op.drop_index('ix_products_department', table_name='products')
    op.drop_index('ix_products_category', table_name='products')
    op.drop_index('ix_products_price', table_name='products')
    op.drop_index('ix_products_sku', table_name='products')
    op.drop_table('products')
