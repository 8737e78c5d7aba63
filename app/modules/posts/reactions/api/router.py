from typing import Any

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from app.core.revalidation import InvalidationBus
from app.db.session import get_db
from app.deps import get_invalidation_bus, require_user_id
from app.modules.posts.reactions.schemas.reaction import ReactionKind, ToggleResult
from app.modules.posts.reactions.services.reaction import toggle_reaction

router = APIRouter()

@router.post("/like", response_model=ToggleResult)
def toggle_post_like(
    *,
    db: Session = Depends(get_db),
    post_id: str = Path(..., min_length=1, description="The ID of the post to like or unlike"),
    user_id: str = Depends(require_user_id),
    bus: InvalidationBus = Depends(get_invalidation_bus),
) -> Any:
    """Like the post, or remove the like if the user already liked it"""
    return toggle_reaction(db, user_id, post_id, ReactionKind.LIKE, bus=bus)

@router.post("/repost", response_model=ToggleResult)
def toggle_post_repost(
    *,
    db: Session = Depends(get_db),
    post_id: str = Path(..., min_length=1, description="The ID of the post to repost or un-repost"),
    user_id: str = Depends(require_user_id),
    bus: InvalidationBus = Depends(get_invalidation_bus),
) -> Any:
    """Repost the post, or undo the repost if the user already reposted it"""
    return toggle_reaction(db, user_id, post_id, ReactionKind.REPOST, bus=bus)
