"""
Share management endpoints. Owners manage shares of their own days.
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.user import User
from app.schemas.auth import UserSummary
from app.schemas.schedule import OkResponse
from app.schemas.sharing import (
    IncomingShare,
    IncomingShareList,
    ShareEnvelope,
    ShareList,
    ShareResponse,
    ShareUpsert,
)
from app.api.deps import get_current_user
from app.api.schedule import date_query
from app.services.sharing import ShareService

router = APIRouter()


@router.get("", response_model=ShareList)
async def list_shares(
    day: date = Depends(date_query),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List who a day is shared with, oldest grant first."""
    shares = await ShareService(db, current_user.id).list_shares(day)
    return ShareList(shares=[ShareResponse.model_validate(s) for s in shares])


@router.post("", response_model=ShareEnvelope)
async def upsert_share(
    share_data: ShareUpsert,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Share a day with a registered user, or change their edit flag."""
    service = ShareService(db, current_user.id)
    share = await service.upsert_share(
        share_data.day,
        share_data.email,
        share_data.can_edit,
    )
    return ShareEnvelope(share=ShareResponse.model_validate(share))


@router.delete("", response_model=OkResponse)
async def revoke_share(
    day: date = Depends(date_query),
    user_id: Optional[int] = Query(None, description="Grantee user id"),
    email: Optional[str] = Query(None, description="Grantee email"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Remove a share. Removing a share that does not exist succeeds."""
    await ShareService(db, current_user.id).revoke_share(day, user_id=user_id, email=email)
    return OkResponse()


@router.get("/incoming", response_model=IncomingShareList)
async def shared_with_me(
    day: date = Depends(date_query),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Days other users have shared with me for a date."""
    shares = await ShareService(db, current_user.id).shared_with_me(day)
    return IncomingShareList(
        shared=[
            IncomingShare(
                schedule_id=s.schedule_id,
                owner=UserSummary.model_validate(s.schedule.owner),
                date=s.schedule.date,
                can_edit=s.can_edit,
            )
            for s in shares
        ]
    )
