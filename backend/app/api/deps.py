"""
Shared request dependencies: session lookup and rate limits.
"""
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.errors import Unauthenticated
from app.core.rate_limit import create_rate_limiter
from app.core.session import SessionManager, session_manager
from app.database import get_db
from app.models.user import User


def get_session_manager() -> SessionManager:
    return session_manager


async def get_optional_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
    sessions: SessionManager = Depends(get_session_manager),
) -> Optional[User]:
    """The signed-in user, or None. A bad or stale cookie is just "no identity"."""
    user_id = sessions.verify(request.cookies.get(sessions.cookie_name))
    if user_id is None:
        return None
    return await db.get(User, user_id)


async def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    if user is None:
        raise Unauthenticated()
    return user


login_rate_limit = create_rate_limiter(
    limit=settings.auth_rate_limit,
    window_seconds=settings.auth_rate_window_seconds,
    key_prefix="login",
)

invite_rate_limit = create_rate_limiter(
    limit=settings.invite_rate_limit,
    window_seconds=settings.invite_rate_window_seconds,
    key_prefix="invite_create",
)
