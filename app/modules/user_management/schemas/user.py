from typing import Optional
from pydantic import BaseModel

class PostAuthor(BaseModel):
    """Public author details shown on a post card"""
    id: str
    name: Optional[str] = None
    username: Optional[str] = None
    image: Optional[str] = None
    handle: Optional[str] = None

    class Config:
        from_attributes = True
