from typing import Optional
import uuid
import logging
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import NotFoundError, UnauthenticatedError, ValidationError
from app.core.revalidation import InvalidationBus, ViewInvalidated, post_path
from app.modules.posts.comments.models.comment import Comment
from app.modules.posts.comments.schemas.comment import COMMENT_MAX_LENGTH, CommentPreview
from app.modules.posts.services.post import lock_post, recount_comments
from app.modules.notifications.schemas.notification import NotificationType
from app.modules.notifications.services.notification_events import add_post_notification
from app.modules.user_management.services.user import get_user

logger = logging.getLogger(__name__)

def get_latest_comment(db: Session, post_id: str) -> Optional[Comment]:
    """Get the latest comment for a post"""
    return (
        db.query(Comment)
        .filter(Comment.post_id == post_id)
        .order_by(Comment.created_at.desc(), Comment.id.desc())
        .first()
    )

def build_comment_preview(db: Session, comment: Comment, length: int = None) -> CommentPreview:
    """Comment preview for a post card, content cut to `length` characters"""
    length = length or settings.COMMENT_PREVIEW_LENGTH
    author = get_user(db, comment.author_id)
    truncated = len(comment.content) > length
    return CommentPreview(
        id=comment.id,
        author_id=comment.author_id,
        author_name=author.name if author else None,
        author_image=author.image if author else None,
        content=f"{comment.content[:length]}..." if truncated else comment.content,
        truncated=truncated,
    )

def add_comment(
    db: Session,
    user_id: str,
    post_id: str,
    content: str,
    bus: Optional[InvalidationBus] = None,
) -> Comment:
    """
    Create a comment and the COMMENT notification for the post author
    in one transaction. Comments are append-only; every call adds one.
    """
    if not user_id:
        raise UnauthenticatedError()
    if not post_id:
        raise ValidationError("postId must be a non-empty identifier")
    if content is None or not 1 <= len(content) <= COMMENT_MAX_LENGTH:
        raise ValidationError(f"Comment must be between 1 and {COMMENT_MAX_LENGTH} characters")

    comment = Comment(
        id=str(uuid.uuid4()),
        post_id=post_id,
        author_id=user_id,
        content=content,
    )
    post = lock_post(db, post_id)
    if not post:
        db.rollback()
        raise NotFoundError("Post not found")

    try:
        db.add(comment)
        db.flush()
        add_post_notification(db, post, user_id, NotificationType.COMMENT)
        recount_comments(db, post_id)
        db.commit()
    except Exception as e:
        logger.error(f"Error creating comment on post {post_id}: {e}")
        db.rollback()
        raise

    db.refresh(comment)
    logger.info(f"User {user_id} commented on post {post_id}")

    if bus:
        bus.publish(ViewInvalidated(post_path(post_id)))
    return comment
