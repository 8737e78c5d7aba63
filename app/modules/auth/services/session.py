import logging
from typing import Optional
from sqlalchemy.orm import Session as DBSession

from app.core.security import verify_access_token
from app.modules.auth.schemas.auth import Session, SessionUser
from app.modules.user_management.services.user import get_user

logger = logging.getLogger("app")

def resolve_session(db: DBSession, token: Optional[str]) -> Optional[Session]:
    """Resolve the acting user from a bearer token, or None when there is no usable user"""
    if not token:
        return None

    user_id = verify_access_token(token)
    if not user_id:
        return None

    user = get_user(db, user_id)
    if not user:
        logger.warning(f"Token subject {user_id} does not match any user")
        return None
    if not user.is_active:
        logger.warning(f"Inactive user {user_id} presented a token")
        return None

    return Session(user=SessionUser(id=user.id, username=user.username, name=user.name, image=user.image))
