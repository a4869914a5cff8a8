from sqlalchemy import Column, String, Integer, Text, DateTime
from sqlalchemy.sql import func
from app.database.connection import Base


class Review(Base):
    __tablename__ = "reviews"

    id = Column(String, primary_key=True)
    property_id = Column(String, nullable=False, index=True)
    property_title = Column(String, nullable=True)
    reviewer_email = Column(String, nullable=False, index=True)
    reviewer_name = Column(String, nullable=True)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
