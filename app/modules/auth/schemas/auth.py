from typing import Optional
from pydantic import BaseModel

class SessionUser(BaseModel):
    id: str
    username: Optional[str] = None
    name: Optional[str] = None
    image: Optional[str] = None

class Session(BaseModel):
    """The acting user for a request as seen by the presentation layer"""
    user: SessionUser
