from enum import Enum
from pydantic import BaseModel

class ReactionKind(str, Enum):
    LIKE = "LIKE"
    REPOST = "REPOST"

class ReactionState(str, Enum):
    ADDED = "added"
    REMOVED = "removed"

class ToggleResult(BaseModel):
    """Outcome of a like/repost toggle returned to client"""
    state: ReactionState
    post_id: str
    kind: ReactionKind
    count: int = 0
