from sqlalchemy import Column, String, Boolean, Numeric, DateTime, Index
from sqlalchemy.sql import func
from app.database.connection import Base


STATUS_PENDING = "pending"
STATUS_VERIFIED = "verified"
STATUS_REJECTED = "rejected"
STATUS_SOLD = "sold"

# Only these statuses are visible in public search
SEARCHABLE_STATUSES = (STATUS_VERIFIED, STATUS_SOLD)


class Property(Base):
    __tablename__ = "properties"

    id = Column(String, primary_key=True)
    agent_email = Column(String, nullable=False, index=True)
    agent_name = Column(String, nullable=True)
    title = Column(String, nullable=False)
    location = Column(String, nullable=False)
    image = Column(String, nullable=True)
    price_min = Column(Numeric(14, 2), nullable=True)
    price_max = Column(Numeric(14, 2), nullable=True)
    status = Column(String, nullable=False, default=STATUS_PENDING, index=True)  # 'pending', 'verified', 'rejected', 'sold'
    advertised = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index('idx_property_agent_status', 'agent_email', 'status'),
        Index('idx_property_advertised_status', 'advertised', 'status'),
    )
