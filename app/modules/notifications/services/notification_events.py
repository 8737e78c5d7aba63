"""
Notification events service.
Builds the notification rows that accompany a newly created reaction or
comment. Nothing here commits: the caller adds the primary row and the
notification to the same session and commits them together.
"""
import uuid
import logging
from sqlalchemy.orm import Session

from app.modules.notifications.models.notification import Notification
from app.modules.notifications.schemas.notification import NotificationType
from app.modules.posts.models.post import Post
from app.modules.user_management.services.user import get_display_name

logger = logging.getLogger(__name__)

_MESSAGES = {
    NotificationType.LIKE: "{actor} liked your post",
    NotificationType.REPOST: "{actor} reposted your post",
    NotificationType.COMMENT: "{actor} commented on your post",
}

def add_post_notification(db: Session, post: Post, actor_id: str, type: NotificationType) -> Notification:
    """
    Stage a notification for the author of a post.

    Args:
        db: Database session holding the open transaction
        post: The post the event happened on
        actor_id: ID of the user who liked, reposted or commented
        type: Kind of event

    Returns:
        The pending Notification, flushed with the caller's commit
    """
    type = NotificationType(type)
    notification = Notification(
        id=str(uuid.uuid4()),
        user_id=post.author_id,
        actor_id=actor_id,
        type=type.value,
        content=_MESSAGES[type].format(actor=get_display_name(db, actor_id)),
        related_id=post.id,
    )
    db.add(notification)
    logger.debug(f"Staged {type.value} notification for user {post.author_id} from user {actor_id}")
    return notification
