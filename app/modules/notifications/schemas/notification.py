from typing import Optional
from datetime import datetime
from enum import Enum
from pydantic import BaseModel

class NotificationType(str, Enum):
    LIKE = "LIKE"
    REPOST = "REPOST"
    COMMENT = "COMMENT"

class NotificationInDBBase(BaseModel):
    id: str
    user_id: str
    actor_id: Optional[str] = None
    type: NotificationType
    content: str
    related_id: Optional[str] = None
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True

class Notification(NotificationInDBBase):
    """Notification model returned to client"""
    pass
