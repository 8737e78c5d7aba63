from typing import Optional
from datetime import datetime
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.core.revalidation import post_path
from app.modules.posts.schemas.post import PostCard, PostCounts
from app.modules.posts.services.post import get_post
from app.modules.posts.comments.services.comment import build_comment_preview, get_latest_comment
from app.modules.posts.reactions.schemas.reaction import ReactionKind
from app.modules.posts.reactions.services.reaction import get_user_reaction_kinds
from app.modules.user_management.services.user import get_user, to_post_author
from app.utils.dates import format_post_date

def get_post_card(db: Session, post_id: str, viewer_id: Optional[str] = None,
                  now: Optional[datetime] = None) -> PostCard:
    """Assemble the post card: author, body, top comment preview, counters and viewer state"""
    post = get_post(db, post_id)
    if not post:
        raise NotFoundError("Post not found")

    latest_comment = get_latest_comment(db, post_id)
    reacted = get_user_reaction_kinds(db, viewer_id, post_id) if viewer_id else set()

    return PostCard(
        id=post.id,
        author=to_post_author(get_user(db, post.author_id), post.author_id),
        content=post.content,
        image=post.image,
        created_at=post.created_at,
        created_display=format_post_date(post.created_at, now=now),
        top_comment=build_comment_preview(db, latest_comment) if latest_comment else None,
        counts=PostCounts(
            likes=post.like_count or 0,
            comments=post.comment_count or 0,
            reposts=post.repost_count or 0,
        ),
        is_liked=ReactionKind.LIKE in reacted,
        is_reposted=ReactionKind.REPOST in reacted,
        is_owner=viewer_id is not None and viewer_id == post.author_id,
        share_path=post_path(post.id),
    )
