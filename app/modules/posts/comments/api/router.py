from typing import Any

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.core.revalidation import InvalidationBus
from app.db.session import get_db
from app.deps import get_invalidation_bus, require_user_id
from app.modules.posts.services.post import get_post
from app.modules.posts.comments.schemas.comment import Comment as CommentSchema, CommentCreate, CommentPreview
from app.modules.posts.comments.services.comment import add_comment, build_comment_preview, get_latest_comment

router = APIRouter()

@router.post("", response_model=CommentSchema, status_code=status.HTTP_201_CREATED)
def create_new_comment(
    *,
    db: Session = Depends(get_db),
    post_id: str = Path(..., min_length=1, description="The ID of the post to comment on"),
    comment_in: CommentCreate,
    user_id: str = Depends(require_user_id),
    bus: InvalidationBus = Depends(get_invalidation_bus),
) -> Any:
    """Create new comment on a post"""
    return add_comment(db, user_id, post_id, comment_in.content, bus=bus)

@router.get("/latest", response_model=CommentPreview)
def read_latest_comment(
    *,
    db: Session = Depends(get_db),
    post_id: str = Path(..., min_length=1, description="The ID of the post"),
) -> Any:
    """Get the preview of the latest comment for a post"""
    if not get_post(db, post_id):
        raise NotFoundError("Post not found")

    latest_comment = get_latest_comment(db, post_id)
    if not latest_comment:
        raise NotFoundError("No comments found for this post")
    return build_comment_preview(db, latest_comment)
