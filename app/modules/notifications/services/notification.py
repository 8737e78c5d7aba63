from typing import List
from sqlalchemy.orm import Session

from app.modules.notifications.models.notification import Notification

def get_user_notifications(db: Session, user_id: str, skip: int = 0, limit: int = 50, unread_only: bool = False) -> List[Notification]:
    """Get notifications for a user, most recent first"""
    query = db.query(Notification).filter(Notification.user_id == user_id)

    if unread_only:
        query = query.filter(Notification.is_read.is_(False))

    return query.order_by(Notification.created_at.desc()).offset(skip).limit(limit).all()

def mark_all_as_read(db: Session, user_id: str) -> int:
    """Mark all notifications as read for a user"""
    result = db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.is_read.is_(False)
    ).update({"is_read": True}, synchronize_session=False)

    db.commit()

    return result
