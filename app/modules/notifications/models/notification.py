from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey, Text
from sqlalchemy.sql import func

from app.db.session import Base

class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.id"), index=True)  # Recipient, the post author
    actor_id = Column(String, ForeignKey("users.id"), nullable=True)  # The user who triggered the notification
    type = Column(String)  # LIKE, REPOST, COMMENT
    content = Column(Text)
    related_id = Column(String, ForeignKey("posts.id", ondelete="CASCADE"), nullable=True)  # ID of the post
    is_read = Column(Boolean, default=False)
    created_at = Column(DateTime, default=func.now())
