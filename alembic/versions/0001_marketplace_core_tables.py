"""create marketplace core tables

Revision ID: 0001_marketplace_core
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_marketplace_core'
down_revision = None
branch_labels = None
depends_on = None

LIVE_OFFER_PREDICATE = sa.text("status IN ('pending', 'accepted')")


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('photo_url', sa.String(), nullable=True),
        sa.Column('role', sa.String(), nullable=False, server_default='buyer'),
        sa.Column('is_fraud', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])

    op.create_table(
        'properties',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('agent_email', sa.String(), nullable=False),
        sa.Column('agent_name', sa.String(), nullable=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('location', sa.String(), nullable=False),
        sa.Column('image', sa.String(), nullable=True),
        sa.Column('price_min', sa.Numeric(14, 2), nullable=True),
        sa.Column('price_max', sa.Numeric(14, 2), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default='pending'),
        sa.Column('advertised', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_properties_agent_email', 'properties', ['agent_email'])
    op.create_index('ix_properties_status', 'properties', ['status'])
    op.create_index('idx_property_agent_status', 'properties', ['agent_email', 'status'])
    op.create_index('idx_property_advertised_status', 'properties', ['advertised', 'status'])

    op.create_table(
        'offers',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('property_id', sa.String(), nullable=False),
        sa.Column('property_title', sa.String(), nullable=True),
        sa.Column('property_location', sa.String(), nullable=True),
        sa.Column('agent_email', sa.String(), nullable=False),
        sa.Column('buyer_email', sa.String(), nullable=False),
        sa.Column('buyer_name', sa.String(), nullable=True),
        sa.Column('offered_amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('status', sa.String(), nullable=False, server_default='pending'),
        sa.Column('transaction_id', sa.String(), nullable=True, unique=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_offers_property_id', 'offers', ['property_id'])
    op.create_index('ix_offers_agent_email', 'offers', ['agent_email'])
    op.create_index('ix_offers_buyer_email', 'offers', ['buyer_email'])
    op.create_index('ix_offers_status', 'offers', ['status'])
    op.create_index('idx_offer_property_status', 'offers', ['property_id', 'status'])
    op.create_index(
        'uq_offer_live_property_buyer',
        'offers',
        ['property_id', 'buyer_email'],
        unique=True,
        postgresql_where=LIVE_OFFER_PREDICATE,
        sqlite_where=LIVE_OFFER_PREDICATE,
    )

    op.create_table(
        'sale_records',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('offer_id', sa.String(), nullable=False, unique=True),
        sa.Column('transaction_id', sa.String(), nullable=False, unique=True),
        sa.Column('property_id', sa.String(), nullable=False, unique=True),
        sa.Column('property_title', sa.String(), nullable=True),
        sa.Column('property_location', sa.String(), nullable=True),
        sa.Column('sold_price', sa.Numeric(14, 2), nullable=False),
        sa.Column('buyer_email', sa.String(), nullable=False),
        sa.Column('buyer_name', sa.String(), nullable=True),
        sa.Column('agent_email', sa.String(), nullable=False),
        sa.Column('sold_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_sale_records_buyer_email', 'sale_records', ['buyer_email'])
    op.create_index('ix_sale_records_agent_email', 'sale_records', ['agent_email'])

    op.create_table(
        'reviews',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('property_id', sa.String(), nullable=False),
        sa.Column('property_title', sa.String(), nullable=True),
        sa.Column('reviewer_email', sa.String(), nullable=False),
        sa.Column('reviewer_name', sa.String(), nullable=True),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('comment', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_reviews_property_id', 'reviews', ['property_id'])
    op.create_index('ix_reviews_reviewer_email', 'reviews', ['reviewer_email'])

    op.create_table(
        'reports',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('property_id', sa.String(), nullable=False),
        sa.Column('property_title', sa.String(), nullable=True),
        sa.Column('reporter_email', sa.String(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_reports_property_id', 'reports', ['property_id'])


def downgrade() -> None:
    op.drop_table('reports')
    op.drop_table('reviews')
    op.drop_table('sale_records')
    op.drop_table('offers')
    op.drop_table('properties')
    op.drop_table('users')
