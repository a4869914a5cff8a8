"""one settled offer per property

Revision ID: 0002_offer_settled_property
Revises: 0001_marketplace_core
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0002_offer_settled_property'
down_revision = '0001_marketplace_core'
branch_labels = None
depends_on = None

SETTLED_OFFER_PREDICATE = sa.text("transaction_id IS NOT NULL")


def upgrade() -> None:
    op.create_index(
        'uq_offer_settled_property',
        'offers',
        ['property_id'],
        unique=True,
        postgresql_where=SETTLED_OFFER_PREDICATE,
        sqlite_where=SETTLED_OFFER_PREDICATE,
    )


def downgrade() -> None:
    op.drop_index('uq_offer_settled_property', table_name='offers')
