from typing import Optional
import uuid
import logging
from sqlalchemy.orm import Session
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from app.core.errors import ForbiddenError, UnauthenticatedError, ValidationError
from app.core.revalidation import FEED_PATH, InvalidationBus, ViewInvalidated, post_path
from app.modules.posts.models.post import Post
from app.modules.posts.schemas.post import POST_MAX_LENGTH
from app.modules.posts.comments.models.comment import Comment
from app.modules.posts.reactions.models.reaction import Reaction
from app.modules.posts.reactions.schemas.reaction import ReactionKind
from app.modules.notifications.models.notification import Notification

logger = logging.getLogger(__name__)

_REACTION_COUNT_COLUMNS = {
    ReactionKind.LIKE: Post.like_count,
    ReactionKind.REPOST: Post.repost_count,
}

def get_post(db: Session, post_id: str) -> Optional[Post]:
    """Get post by ID"""
    return db.query(Post).filter(Post.id == post_id).first()

def lock_post(db: Session, post_id: str) -> Optional[Post]:
    """Re-read a post inside the current transaction, holding its row lock where supported"""
    return (
        db.query(Post)
        .filter(Post.id == post_id)
        .populate_existing()
        .with_for_update()
        .first()
    )

def recount_reactions(db: Session, post_id: str, kind: ReactionKind) -> None:
    """Set the denormalized reaction counter from the live rows"""
    live = (
        db.query(func.count(Reaction.id))
        .filter(Reaction.post_id == post_id, Reaction.kind == ReactionKind(kind).value)
        .scalar_subquery()
    )
    db.query(Post).filter(Post.id == post_id).update(
        {_REACTION_COUNT_COLUMNS[ReactionKind(kind)]: live}, synchronize_session=False
    )

def recount_comments(db: Session, post_id: str) -> None:
    """Set the denormalized comment counter from the live rows"""
    live = db.query(func.count(Comment.id)).filter(Comment.post_id == post_id).scalar_subquery()
    db.query(Post).filter(Post.id == post_id).update(
        {Post.comment_count: live}, synchronize_session=False
    )

def create_post(db: Session, user_id: str, content: str, image: Optional[str] = None,
                bus: Optional[InvalidationBus] = None) -> Post:
    """Create new post"""
    if not user_id:
        raise UnauthenticatedError()
    if not content or len(content) > POST_MAX_LENGTH:
        raise ValidationError(f"Post content must be between 1 and {POST_MAX_LENGTH} characters")

    logger.info(f"Creating post for author ID: {user_id}")
    post = Post(
        id=str(uuid.uuid4()),
        author_id=user_id,
        content=content,
        image=image,
    )
    try:
        db.add(post)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(post)

    if bus:
        bus.publish(ViewInvalidated(FEED_PATH))
    return post

def delete_post(db: Session, user_id: str, post_id: str, bus: Optional[InvalidationBus] = None) -> None:
    """
    Delete a post owned by user_id, along with its reactions, comments
    and notifications, in one transaction.

    A missing post and a post owned by someone else fail identically so
    non-owners cannot tell whether it exists.
    """
    if not user_id:
        raise UnauthenticatedError()

    post = db.query(Post).filter(Post.id == post_id, Post.author_id == user_id).first()
    if not post:
        raise ForbiddenError("Post not found or you are not the author")

    logger.info(f"Deleting post with ID: {post_id}")
    try:
        db.query(Notification).filter(Notification.related_id == post_id).delete(synchronize_session=False)
        db.query(Reaction).filter(Reaction.post_id == post_id).delete(synchronize_session=False)
        db.query(Comment).filter(Comment.post_id == post_id).delete(synchronize_session=False)
        db.delete(post)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    if bus:
        bus.publish(ViewInvalidated(post_path(post_id)))
        bus.publish(ViewInvalidated(FEED_PATH))
