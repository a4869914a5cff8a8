from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.sql import func
from app.database.connection import Base


class Report(Base):
    __tablename__ = "reports"

    id = Column(String, primary_key=True)
    property_id = Column(String, nullable=False, index=True)
    property_title = Column(String, nullable=True)
    reporter_email = Column(String, nullable=False)
    reason = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
