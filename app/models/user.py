from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.sql import func
from app.database.connection import Base


ROLE_BUYER = "buyer"
ROLE_AGENT = "agent"
ROLE_ADMIN = "admin"
ROLES = (ROLE_BUYER, ROLE_AGENT, ROLE_ADMIN)


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True)
    email = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=True)
    photo_url = Column(String, nullable=True)
    role = Column(String, nullable=False, default=ROLE_BUYER, index=True)  # 'buyer', 'agent', 'admin'
    is_fraud = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
