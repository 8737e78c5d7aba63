from typing import Any, Optional
import logging

from fastapi import APIRouter, Depends, Path, Response, status
from sqlalchemy.orm import Session

from app.core.revalidation import InvalidationBus, RenderCache, post_path
from app.db.session import get_db
from app.deps import get_invalidation_bus, get_render_cache, get_viewer_id, require_user_id
from app.modules.posts.schemas.post import Post as PostSchema, PostCard, PostCreate
from app.modules.posts.services.post import create_post, delete_post
from app.modules.posts.services.post_card import get_post_card
from app.utils.dates import format_post_date

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("", response_model=PostSchema, status_code=status.HTTP_201_CREATED)
def create_new_post(
    *,
    db: Session = Depends(get_db),
    post_in: PostCreate,
    user_id: str = Depends(require_user_id),
    bus: InvalidationBus = Depends(get_invalidation_bus),
) -> Any:
    """
    Create new post. The image, if any, is an already hosted URL.
    """
    return create_post(db, user_id, post_in.content, post_in.image, bus=bus)

@router.get("/{post_id}", response_model=PostCard)
def read_post_card(
    *,
    db: Session = Depends(get_db),
    post_id: str = Path(..., min_length=1, description="The ID of the post to render"),
    viewer_id: Optional[str] = Depends(get_viewer_id),
    cache: RenderCache = Depends(get_render_cache),
) -> Any:
    """
    Get the rendered post card for the current viewer.
    """
    path = post_path(post_id)
    card = cache.get(path, viewer_id)
    if card is None:
        logger.debug(f"Rendering post card {post_id} for viewer {viewer_id}")
        card = get_post_card(db, post_id, viewer_id)
        cache.set(path, viewer_id, card)
    # The relative date moves with the clock, cached or not
    return card.model_copy(update={"created_display": format_post_date(card.created_at)})

@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_post_by_id(
    *,
    db: Session = Depends(get_db),
    post_id: str = Path(..., min_length=1, description="The ID of the post to delete"),
    user_id: str = Depends(require_user_id),
    bus: InvalidationBus = Depends(get_invalidation_bus),
) -> Response:
    """
    Delete a post and all associated data. This is a cascading delete
    that removes the post's reactions, comments and notifications.
    """
    delete_post(db, user_id, post_id, bus=bus)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
