from typing import Any, List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.deps import require_user_id
from app.modules.notifications.schemas.notification import Notification as NotificationSchema
from app.modules.notifications.services.notification import get_user_notifications, mark_all_as_read

router = APIRouter()

@router.get("", response_model=List[NotificationSchema])
def read_notifications(
    db: Session = Depends(get_db),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    unread_only: bool = False,
    user_id: str = Depends(require_user_id),
) -> Any:
    """Get user's notifications, most recent first"""
    return get_user_notifications(db, user_id, skip, limit, unread_only)

@router.put("/mark-all-read", response_model=dict)
def mark_all_notifications_as_read(
    *,
    db: Session = Depends(get_db),
    user_id: str = Depends(require_user_id),
) -> Any:
    """Mark all of the user's notifications as read"""
    count = mark_all_as_read(db, user_id)

    return {
        "message": f"Marked {count} notifications as read",
        "count": count
    }
