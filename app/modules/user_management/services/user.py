from typing import Optional
from sqlalchemy.orm import Session

from app.modules.user_management.models.user import User
from app.modules.user_management.schemas.user import PostAuthor

def get_user(db: Session, user_id: str) -> Optional[User]:
    """Get user by ID"""
    return db.query(User).filter(User.id == user_id).first()

def get_display_name(db: Session, user_id: str) -> str:
    """Name used in notification texts, falling back to the raw id"""
    user = get_user(db, user_id)
    if user and (user.username or user.name):
        return user.username or user.name
    return user_id

def to_post_author(user: Optional[User], user_id: str) -> PostAuthor:
    if not user:
        return PostAuthor(id=user_id, handle=user_id)
    return PostAuthor(
        id=user.id,
        name=user.name,
        username=user.username,
        image=user.image,
        handle=user.username or user.name,
    )
