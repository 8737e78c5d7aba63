"""
Like and repost toggling.

A toggle deletes the user's reaction when it exists and creates it otherwise.
Creation is written together with the notification for the post author in one
transaction. The unique constraint on (author_id, post_id, kind) decides races
between concurrent toggles: a losing insert is rolled back, the state re-read,
and the toggle retried once before a ConflictError surfaces.
"""
from typing import Optional, Set
import uuid
import logging
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from app.core.errors import ConflictError, NotFoundError, UnauthenticatedError, ValidationError
from app.core.revalidation import InvalidationBus, ViewInvalidated, post_path
from app.modules.posts.models.post import Post
from app.modules.posts.reactions.models.reaction import Reaction
from app.modules.posts.reactions.schemas.reaction import ReactionKind, ReactionState, ToggleResult
from app.modules.posts.services.post import get_post, lock_post, recount_reactions
from app.modules.notifications.schemas.notification import NotificationType
from app.modules.notifications.services.notification_events import add_post_notification

logger = logging.getLogger(__name__)

MAX_TOGGLE_ATTEMPTS = 2

REACTION_UNIQUE_CONSTRAINT = "uq_reaction_author_post_kind"

def _is_duplicate_reaction(error: IntegrityError) -> bool:
    """True when the insert lost the race on the one-reaction-per-kind constraint"""
    # PostgreSQL names the constraint, SQLite names the columns
    message = str(error.orig)
    return REACTION_UNIQUE_CONSTRAINT in message or "UNIQUE constraint failed: reactions." in message

def get_reaction(db: Session, user_id: str, post_id: str, kind: ReactionKind) -> Optional[Reaction]:
    """Get reaction by user ID, post ID and kind"""
    return (
        db.query(Reaction)
        .filter(
            Reaction.author_id == user_id,
            Reaction.post_id == post_id,
            Reaction.kind == ReactionKind(kind).value,
        )
        .first()
    )

def get_user_reaction_kinds(db: Session, user_id: str, post_id: str) -> Set[ReactionKind]:
    """Kinds of reaction a user currently has on a post"""
    rows = (
        db.query(Reaction.kind)
        .filter(Reaction.author_id == user_id, Reaction.post_id == post_id)
        .all()
    )
    return {ReactionKind(kind) for (kind,) in rows}

def _count_for(post: Post, kind: ReactionKind) -> int:
    return post.like_count if kind == ReactionKind.LIKE else post.repost_count

def _remove_reaction(db: Session, reaction: Reaction, post_id: str, kind: ReactionKind) -> None:
    post = lock_post(db, post_id)
    if not post:
        db.rollback()
        raise NotFoundError("Post not found")

    deleted = (
        db.query(Reaction)
        .filter(Reaction.id == reaction.id)
        .delete(synchronize_session=False)
    )
    if not deleted:
        logger.info(f"{kind.value} on post {post_id} was already removed by a concurrent request")
    recount_reactions(db, post_id, kind)
    db.commit()

def _add_reaction(db: Session, user_id: str, post_id: str, kind: ReactionKind) -> None:
    # The post may have been deleted since the first lookup
    post = lock_post(db, post_id)
    if not post:
        db.rollback()
        raise NotFoundError("Post not found")

    db.add(Reaction(
        id=str(uuid.uuid4()),
        kind=kind.value,
        author_id=user_id,
        post_id=post_id,
    ))
    db.flush()
    add_post_notification(db, post, user_id, NotificationType(kind.value))
    recount_reactions(db, post_id, kind)
    db.commit()

def _apply_toggle(db: Session, user_id: str, post_id: str, kind: ReactionKind) -> ReactionState:
    try:
        reaction = get_reaction(db, user_id, post_id, kind)
        if reaction:
            _remove_reaction(db, reaction, post_id, kind)
            return ReactionState.REMOVED
        _add_reaction(db, user_id, post_id, kind)
        return ReactionState.ADDED
    except Exception:
        db.rollback()
        raise

def toggle_reaction(
    db: Session,
    user_id: str,
    post_id: str,
    kind: ReactionKind,
    bus: Optional[InvalidationBus] = None,
) -> ToggleResult:
    """
    Flip the user's LIKE or REPOST on a post.

    Returns the resulting state ("added" or "removed") with the reconciled
    count. Exactly one notification is written per "added" transition and
    none per "removed" transition.
    """
    if not user_id:
        raise UnauthenticatedError()
    if not post_id:
        raise ValidationError("postId must be a non-empty identifier")
    try:
        kind = ReactionKind(kind)
    except ValueError as e:
        raise ValidationError(f"Unsupported reaction kind: {kind}") from e

    if not get_post(db, post_id):
        raise NotFoundError("Post not found")

    state = None
    for attempt in range(1, MAX_TOGGLE_ATTEMPTS + 1):
        try:
            state = _apply_toggle(db, user_id, post_id, kind)
            break
        except IntegrityError as e:
            # _apply_toggle already rolled back
            if not _is_duplicate_reaction(e):
                logger.error(f"Toggle {kind.value} by user {user_id} on post {post_id} failed: {e.orig}")
                raise
            if get_reaction(db, user_id, post_id, kind):
                logger.info(f"Concurrent {kind.value} by user {user_id} on post {post_id} already applied")
                state = ReactionState.ADDED
                break
            logger.warning(f"Toggle {kind.value} on post {post_id} hit a constraint violation (attempt {attempt}): {e.orig}")

    if state is None:
        raise ConflictError(f"Could not apply {kind.value.lower()} on post {post_id}, please retry")

    post = get_post(db, post_id)
    if not post:
        raise NotFoundError("Post not found")

    logger.info(f"User {user_id} {state.value} {kind.value} on post {post_id}")
    if bus:
        bus.publish(ViewInvalidated(post_path(post_id)))

    return ToggleResult(state=state, post_id=post_id, kind=kind, count=_count_for(post, kind))
