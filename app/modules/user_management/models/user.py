from sqlalchemy import Boolean, Column, String, DateTime
from sqlalchemy.sql import func

from app.db.session import Base

class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, index=True)
    username = Column(String, unique=True, index=True)
    name = Column(String)
    email = Column(String, unique=True, index=True, nullable=True)
    image = Column(String, nullable=True)  # Avatar URL, hosted elsewhere
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=func.now())
