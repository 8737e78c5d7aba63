from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session as DBSession

from app.core.config import settings
from app.core.errors import UnauthenticatedError
from app.core.revalidation import InvalidationBus, RenderCache, invalidation_bus, render_cache
from app.db.session import get_db
from app.modules.auth.schemas.auth import Session
from app.modules.auth.services.session import resolve_session

# Bearer token is optional: anonymous visitors can still read post cards
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/token", auto_error=False)

_SESSION_STATE_KEY = "feed_session"

def get_session(
    request: Request,
    db: DBSession = Depends(get_db),
    token: Optional[str] = Depends(oauth2_scheme),
) -> Optional[Session]:
    """
    Dependency resolving the current session, cached for the rest of the request
    """
    if hasattr(request.state, _SESSION_STATE_KEY):
        return getattr(request.state, _SESSION_STATE_KEY)

    session = resolve_session(db, token)
    setattr(request.state, _SESSION_STATE_KEY, session)
    return session

def get_viewer_id(session: Optional[Session] = Depends(get_session)) -> Optional[str]:
    return session.user.id if session else None

def require_user_id(session: Optional[Session] = Depends(get_session)) -> str:
    """
    Dependency for mutations: the acting user's id, or Unauthenticated
    """
    if not session:
        raise UnauthenticatedError()
    return session.user.id

def get_invalidation_bus() -> InvalidationBus:
    return invalidation_bus

def get_render_cache() -> RenderCache:
    return render_cache
