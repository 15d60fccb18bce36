"""
Authentication endpoints.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.user import User
from app.schemas.auth import GoogleLogin, MeResponse, UserSummary
from app.schemas.schedule import OkResponse
from app.api.deps import get_optional_user, get_session_manager, login_rate_limit
from app.core.session import SessionManager
from app.services.identity import GoogleIdentityVerifier, get_identity_verifier
from app.services.users import UserDirectory

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/google", response_model=MeResponse)
async def login_with_google(
    login_data: GoogleLogin,
    response: Response,
    db: AsyncSession = Depends(get_db),
    verifier: GoogleIdentityVerifier = Depends(get_identity_verifier),
    sessions: SessionManager = Depends(get_session_manager),
    _: None = Depends(login_rate_limit),
):
    """Exchange a Google ID token for a session cookie."""
    identity = await verifier.verify(login_data.id_token)

    directory = UserDirectory(db)
    user = await directory.upsert_from_identity(identity)
    await directory.ensure_public_slug(user)

    sessions.set_cookie(response, sessions.issue(user.id))
    logger.info(f"User {user.id} logged in")
    return MeResponse(user=UserSummary.model_validate(user))


@router.get("/me", response_model=MeResponse)
async def get_me(current_user: Optional[User] = Depends(get_optional_user)):
    """Get current user info, or null when not signed in."""
    if current_user is None:
        return MeResponse(user=None)
    return MeResponse(user=UserSummary.model_validate(current_user))


@router.post("/logout", response_model=OkResponse)
async def logout(
    response: Response,
    sessions: SessionManager = Depends(get_session_manager),
):
    """Clear the session cookie."""
    sessions.clear_cookie(response)
    return OkResponse()
