from sqlalchemy import Column, String, Numeric, DateTime
from sqlalchemy.sql import func
from app.database.connection import Base


class SaleRecord(Base):
    """Immutable record of a settled sale. One per offer, per transaction and per property."""
    __tablename__ = "sale_records"

    id = Column(String, primary_key=True)
    offer_id = Column(String, nullable=False, unique=True)
    transaction_id = Column(String, nullable=False, unique=True)
    property_id = Column(String, nullable=False, unique=True)
    property_title = Column(String, nullable=True)
    property_location = Column(String, nullable=True)
    sold_price = Column(Numeric(14, 2), nullable=False)
    buyer_email = Column(String, nullable=False, index=True)
    buyer_name = Column(String, nullable=True)
    agent_email = Column(String, nullable=False, index=True)
    sold_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
