from sqlalchemy import Column, String, DateTime, Text, Integer, ForeignKey
from sqlalchemy.sql import func

from app.db.session import Base

class Post(Base):
    __tablename__ = "posts"

    id = Column(String, primary_key=True, index=True)
    content = Column(Text, nullable=False)
    image = Column(String, nullable=True)
    author_id = Column(String, ForeignKey("users.id"), index=True, nullable=False)

    # Denormalized counters, recomputed from the live rows on every mutation
    like_count = Column(Integer, nullable=False, default=0)
    comment_count = Column(Integer, nullable=False, default=0)
    repost_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
