from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field

from app.modules.posts.comments.schemas.comment import CommentPreview
from app.modules.user_management.schemas.user import PostAuthor

POST_MAX_LENGTH = 280

class PostCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=POST_MAX_LENGTH)
    image: Optional[str] = None

class PostInDBBase(BaseModel):
    id: str
    content: str
    image: Optional[str] = None
    author_id: str
    created_at: datetime

    class Config:
        from_attributes = True

class Post(PostInDBBase):
    """Post model returned to client"""
    pass

class PostCounts(BaseModel):
    likes: int = 0
    comments: int = 0
    reposts: int = 0

class PostCard(BaseModel):
    """Everything needed to render one post in the feed"""
    id: str
    author: PostAuthor
    content: str
    image: Optional[str] = None
    created_at: datetime
    created_display: str
    top_comment: Optional[CommentPreview] = None
    counts: PostCounts
    is_liked: bool = False
    is_reposted: bool = False
    is_owner: bool = False
    share_path: str
