"""initial catalog schema

Revision ID: 7c1e4b2a9d10
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '7c1e4b2a9d10'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    ]


def _created_index(table):
    op.create_index(f'ix_{table}_created_at', table, ['created_at'])


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    _created_index('users')

    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('category_name', sa.String(length=120), nullable=False),
        sa.Column('category_image', sa.String(length=512), nullable=True),
        sa.Column('status', sa.SmallInteger(), nullable=False),
        sa.Column('is_listing', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('category_name'),
    )
    op.create_index('ix_categories_is_listing', 'categories', ['is_listing'])
    _created_index('categories')

    op.create_table(
        'sub_categories',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('sub_category_name', sa.String(length=120), nullable=False),
        sa.Column('sub_category_image', sa.String(length=512), nullable=True),
        sa.Column('category_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.SmallInteger(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_sub_categories_category_id', 'sub_categories', ['category_id'])
    _created_index('sub_categories')

    op.create_table(
        'inner_categories',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('inner_category_name', sa.String(length=120), nullable=False),
        sa.Column('category_id', sa.Integer(), nullable=False),
        sa.Column('sub_category_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.SmallInteger(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id']),
        sa.ForeignKeyConstraint(['sub_category_id'], ['sub_categories.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_inner_categories_category_id', 'inner_categories', ['category_id'])
    op.create_index(
        'ix_inner_categories_sub_category_id', 'inner_categories', ['sub_category_id']
    )
    _created_index('inner_categories')

    op.create_table(
        'brands',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('brand_name', sa.String(length=120), nullable=False),
        sa.Column('brand_image', sa.String(length=512), nullable=False),
        sa.Column('is_popular', sa.Boolean(), nullable=False),
        sa.Column('status', sa.SmallInteger(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    _created_index('brands')

    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('product_name', sa.String(length=255), nullable=False),
        sa.Column('product_image', sa.String(length=512), nullable=True),
        sa.Column('category_id', sa.Integer(), nullable=True),
        sa.Column('sub_category_id', sa.Integer(), nullable=True),
        sa.Column('inner_category_id', sa.Integer(), nullable=True),
        sa.Column('brand_id', sa.Integer(), nullable=True),
        sa.Column('features', sa.JSON(), nullable=True),
        sa.Column('advantages', sa.JSON(), nullable=True),
        sa.Column('status', sa.SmallInteger(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['brand_id'], ['brands.id']),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id']),
        sa.ForeignKeyConstraint(['inner_category_id'], ['inner_categories.id']),
        sa.ForeignKeyConstraint(['sub_category_id'], ['sub_categories.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_products_category_id', 'products', ['category_id'])
    op.create_index('ix_products_brand_id', 'products', ['brand_id'])
    op.create_index('ix_products_status', 'products', ['status'])
    op.create_index(
        'ix_product_category_chain',
        'products',
        ['category_id', 'sub_category_id', 'inner_category_id'],
    )
    _created_index('products')

    op.create_table(
        'product_categories',
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('category_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id']),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('product_id', 'category_id'),
    )
    op.create_index(
        'ix_product_categories_category_id', 'product_categories', ['category_id']
    )

    op.create_table(
        'product_variations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.SmallInteger(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['product_id'], ['products.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_product_variations_product_id', 'product_variations', ['product_id'])
    _created_index('product_variations')

    op.create_table(
        'product_variation_options',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('product_variation_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.SmallInteger(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['product_id'], ['products.id']),
        sa.ForeignKeyConstraint(['product_variation_id'], ['product_variations.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'ix_product_variation_options_product_id', 'product_variation_options', ['product_id']
    )
    op.create_index(
        'ix_product_variation_options_product_variation_id',
        'product_variation_options',
        ['product_variation_id'],
    )
    _created_index('product_variation_options')

    op.create_table(
        'product_skus',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('sku', sa.String(length=100), nullable=False),
        sa.Column('product_sku_name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('thumbnail_image', sa.String(length=512), nullable=True),
        sa.Column('sku_images', sa.JSON(), nullable=True),
        sa.Column('mrp', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('price', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('is_new', sa.Boolean(), nullable=False),
        sa.Column('single_order_limit', sa.Integer(), nullable=False),
        sa.Column('is_out_of_stock', sa.Boolean(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.SmallInteger(), nullable=False),
        sa.Column('variation_signature', sa.String(length=512), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['product_id'], ['products.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('product_id', 'sku', name='uq_sku_code'),
        sa.UniqueConstraint('product_id', 'variation_signature', name='uq_sku_signature'),
    )
    op.create_index('ix_product_skus_product_id', 'product_skus', ['product_id'])
    _created_index('product_skus')

    op.create_table(
        'product_variation_configurations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('product_sku_id', sa.Integer(), nullable=False),
        sa.Column('product_variation_id', sa.Integer(), nullable=False),
        sa.Column('product_variation_option_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.SmallInteger(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['product_id'], ['products.id']),
        sa.ForeignKeyConstraint(['product_sku_id'], ['product_skus.id']),
        sa.ForeignKeyConstraint(['product_variation_id'], ['product_variations.id']),
        sa.ForeignKeyConstraint(
            ['product_variation_option_id'], ['product_variation_options.id']
        ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('product_sku_id', 'product_variation_id', name='uq_config_axis'),
    )
    op.create_index(
        'ix_product_variation_configurations_product_id',
        'product_variation_configurations',
        ['product_id'],
    )
    op.create_index(
        'ix_product_variation_configurations_product_sku_id',
        'product_variation_configurations',
        ['product_sku_id'],
    )
    _created_index('product_variation_configurations')

    op.create_table(
        'banners',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('banner_title', sa.String(length=255), nullable=False),
        sa.Column('banner_sub_title', sa.String(length=255), nullable=True),
        sa.Column('banner_image', sa.String(length=512), nullable=False),
        sa.Column('connected_category_id', sa.Integer(), nullable=True),
        sa.Column('status', sa.SmallInteger(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    _created_index('banners')

    op.create_table(
        'blogs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('blog_title', sa.String(length=255), nullable=False),
        sa.Column('blog_thumbnail', sa.String(length=512), nullable=False),
        sa.Column('blog_sec_title', sa.String(length=255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('sec_description', sa.Text(), nullable=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('place', sa.String(length=255), nullable=True),
        sa.Column('other_images', sa.JSON(), nullable=True),
        sa.Column('status', sa.SmallInteger(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    _created_index('blogs')

    op.create_table(
        'carousel',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=True),
        sa.Column('sub_title', sa.String(length=255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('desktop_file', sa.String(length=512), nullable=False),
        sa.Column('mobile_file', sa.String(length=512), nullable=True),
        sa.Column('status', sa.SmallInteger(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    _created_index('carousel')


def downgrade():
    for table in (
        'carousel',
        'blogs',
        'banners',
        'product_variation_configurations',
        'product_skus',
        'product_variation_options',
        'product_variations',
        'product_categories',
        'products',
        'brands',
        'inner_categories',
        'sub_categories',
        'categories',
        'users',
    ):
        op.drop_table(table)
