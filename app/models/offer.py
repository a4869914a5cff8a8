from sqlalchemy import Column, String, Numeric, DateTime, Index, text
from sqlalchemy.sql import func
from app.database.connection import Base


OFFER_PENDING = "pending"
OFFER_ACCEPTED = "accepted"
OFFER_REJECTED = "rejected"

# A live offer still competes for the property
LIVE_OFFER_STATUSES = (OFFER_PENDING, OFFER_ACCEPTED)

_LIVE_PREDICATE = text("status IN ('pending', 'accepted')")
_SETTLED_PREDICATE = text("transaction_id IS NOT NULL")


class Offer(Base):
    __tablename__ = "offers"

    id = Column(String, primary_key=True)
    # No foreign key: offers are kept as an audit trail after the listing is removed
    property_id = Column(String, nullable=False, index=True)
    property_title = Column(String, nullable=True)
    property_location = Column(String, nullable=True)
    agent_email = Column(String, nullable=False, index=True)
    buyer_email = Column(String, nullable=False, index=True)
    buyer_name = Column(String, nullable=True)
    offered_amount = Column(Numeric(14, 2), nullable=False)
    status = Column(String, nullable=False, default=OFFER_PENDING, index=True)  # 'pending', 'accepted', 'rejected'
    transaction_id = Column(String, nullable=True, unique=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        # At most one live offer per (property, buyer), enforced by the datastore
        Index(
            'uq_offer_live_property_buyer',
            'property_id',
            'buyer_email',
            unique=True,
            postgresql_where=_LIVE_PREDICATE,
            sqlite_where=_LIVE_PREDICATE,
        ),
        # A listing is claimed by the first offer that gets a transaction id attached
        Index(
            'uq_offer_settled_property',
            'property_id',
            unique=True,
            postgresql_where=_SETTLED_PREDICATE,
            sqlite_where=_SETTLED_PREDICATE,
        ),
        Index('idx_offer_property_status', 'property_id', 'status'),
    )
