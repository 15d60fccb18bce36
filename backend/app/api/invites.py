"""
Invite link endpoints.

Create, list and revoke are owner-only. Inspect is public and accept needs a
session; both are keyed by the token, never by the numeric id.
"""
from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.sharing import ScheduleShareInvite
from app.models.user import User
from app.schemas.auth import PublicUser
from app.schemas.schedule import OkResponse
from app.schemas.sharing import (
    InviteAccepted,
    InviteCreate,
    InviteEnvelope,
    InviteList,
    InviteMeta,
    InviteMetaEnvelope,
    InviteResponse,
)
from app.api.deps import get_current_user, invite_rate_limit
from app.api.schedule import date_query
from app.services.invites import InviteService, InviteStatus

router = APIRouter()


def to_owner_view(invite: ScheduleShareInvite) -> InviteResponse:
    return InviteResponse(
        id=invite.id,
        token=invite.token,
        invited_email=invite.invited_email,
        can_edit=invite.can_edit,
        expires_at=invite.expires_at,
        redeemed_at=invite.redeemed_at,
        redeemed_by_user_id=invite.redeemed_by_user_id,
        created_at=invite.created_at,
        status=InviteStatus.of(invite).value,
    )


@router.post("", response_model=InviteEnvelope)
async def create_invite(
    invite_data: InviteCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    _: None = Depends(invite_rate_limit),
):
    """Create an invite link for one of my days."""
    invite = await InviteService(db, current_user.id).create(
        invite_data.day,
        can_edit=invite_data.can_edit,
        invited_email=invite_data.email,
        ttl_hours=invite_data.ttl_hours,
    )
    return InviteEnvelope(invite=to_owner_view(invite))


@router.get("", response_model=InviteList)
async def list_invites(
    day: date = Depends(date_query),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List my invites for a day, newest first."""
    invites = await InviteService(db, current_user.id).list_invites(day)
    return InviteList(invites=[to_owner_view(i) for i in invites])


@router.delete("/{invite_id}", response_model=OkResponse)
async def revoke_invite(
    invite_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Revoke an invite. Shares it already granted are kept."""
    await InviteService(db, current_user.id).revoke(invite_id)
    return OkResponse()


@router.get("/token/{token}", response_model=InviteMetaEnvelope)
async def inspect_invite(
    token: str,
    db: AsyncSession = Depends(get_db),
):
    """Public invite metadata. No session required."""
    invite, expired = await InviteService(db).inspect(token)
    schedule = invite.schedule
    return InviteMetaEnvelope(
        invite=InviteMeta(
            owner=PublicUser.model_validate(schedule.owner),
            date=schedule.date,
            can_edit=invite.can_edit,
            invited_email=invite.invited_email,
            expires_at=invite.expires_at,
            redeemed_at=invite.redeemed_at,
            expired=expired,
        )
    )


@router.post("/token/{token}/accept", response_model=InviteAccepted)
async def accept_invite(
    token: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Redeem an invite; the caller gains a share on the owner's day."""
    owner_id, day = await InviteService(db, current_user.id).accept(token, current_user)
    return InviteAccepted(owner_id=owner_id, date=day)
