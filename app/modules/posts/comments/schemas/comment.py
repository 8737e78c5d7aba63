from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field

COMMENT_MAX_LENGTH = 280

class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=COMMENT_MAX_LENGTH)

class CommentInDBBase(BaseModel):
    id: str
    content: str
    author_id: str
    post_id: str
    created_at: datetime

    class Config:
        from_attributes = True

class Comment(CommentInDBBase):
    """Comment model returned to client"""
    pass

class CommentPreview(BaseModel):
    """Top comment shown under a post card"""
    id: str
    author_id: str
    author_name: Optional[str] = None
    author_image: Optional[str] = None
    content: str
    truncated: bool = False
