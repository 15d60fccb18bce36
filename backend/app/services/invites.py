"""
Invite links for sharing a day.

An invite is ACTIVE, REDEEMED or EXPIRED. The status is never stored; it is
derived from ``expires_at`` and ``redeemed_at`` whenever it is needed.
Revoking deletes the row, so a revoked token simply stops existing.

Redemption claims the invite with a conditional UPDATE (``redeemed_at IS
NULL``) in the same transaction that grants the share, so two concurrent
acceptances cannot both succeed.
"""
import logging
import re
import secrets
from datetime import date, datetime, timedelta
from enum import Enum
from typing import List, Optional, Tuple

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.config import settings
from app.core.errors import Conflict, Expired, Forbidden, NotFound, Unauthenticated, ValidationFailed
from app.core.timeutils import as_utc, utcnow
from app.models.schedule import DaySchedule
from app.models.sharing import ScheduleShareInvite
from app.models.user import User
from app.services.access import find_schedule
from app.services.schedule import get_or_create_schedule
from app.services.sharing import grant_share

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32  # 256 bits
TOKEN_PATTERN = re.compile(r"^[A-Za-z0-9_-]{16,128}$")
ACCEPT_ATTEMPTS = 3


class InviteStatus(str, Enum):
    ACTIVE = "active"
    REDEEMED = "redeemed"
    EXPIRED = "expired"

    @classmethod
    def of(cls, invite: ScheduleShareInvite, now: Optional[datetime] = None) -> "InviteStatus":
        # Expiry wins over redemption
        if is_expired(invite, now):
            return cls.EXPIRED
        if invite.redeemed_at is not None:
            return cls.REDEEMED
        return cls.ACTIVE


def is_expired(invite: ScheduleShareInvite, now: Optional[datetime] = None) -> bool:
    expires_at = as_utc(invite.expires_at)
    if expires_at is None:
        return False
    return expires_at < (now or utcnow())


def generate_token() -> str:
    return secrets.token_urlsafe(TOKEN_BYTES)


def token_hint(token: str) -> str:
    return f"{token[:8]}..."


class InviteService:
    """
    Invite operations.

    ``user_id`` is the requester; it may be None for the public inspect call.
    """

    def __init__(self, db: AsyncSession, user_id: Optional[int] = None):
        self.db = db
        self.user_id = user_id

    def _require_user(self) -> int:
        if self.user_id is None:
            raise Unauthenticated()
        return self.user_id

    async def create(
        self,
        day: date,
        can_edit: bool = True,
        invited_email: Optional[str] = None,
        ttl_hours: Optional[int] = None,
    ) -> ScheduleShareInvite:
        owner_id = self._require_user()
        if ttl_hours is None:
            ttl_hours = settings.invite_default_ttl_hours
        if not settings.invite_min_ttl_hours <= ttl_hours <= settings.invite_max_ttl_hours:
            raise ValidationFailed(
                f"ttl_hours must be between {settings.invite_min_ttl_hours} "
                f"and {settings.invite_max_ttl_hours}"
            )

        schedule = await get_or_create_schedule(self.db, owner_id, day)
        now = utcnow()
        invite = ScheduleShareInvite(
            schedule_id=schedule.id,
            token=generate_token(),
            invited_email=invited_email.strip().lower() if invited_email else None,
            can_edit=can_edit,
            expires_at=now + timedelta(hours=ttl_hours),
            created_at=now,
        )
        self.db.add(invite)
        await self.db.commit()
        await self.db.refresh(invite)

        logger.info(
            f"User {owner_id} created invite {token_hint(invite.token)} for {day.isoformat()} "
            f"(can_edit={can_edit}, ttl_hours={ttl_hours})"
        )
        return invite

    async def list_invites(self, day: date) -> List[ScheduleShareInvite]:
        owner_id = self._require_user()
        schedule = await find_schedule(self.db, owner_id, day)
        if schedule is None:
            return []
        result = await self.db.execute(
            select(ScheduleShareInvite)
            .where(ScheduleShareInvite.schedule_id == schedule.id)
            .order_by(ScheduleShareInvite.created_at.desc(), ScheduleShareInvite.id.desc())
        )
        return list(result.scalars().all())

    async def revoke(self, invite_id: int) -> None:
        """Delete the invite. Shares it already produced stay in place."""
        owner_id = self._require_user()
        result = await self.db.execute(
            select(ScheduleShareInvite)
            .join(DaySchedule, ScheduleShareInvite.schedule_id == DaySchedule.id)
            .where(ScheduleShareInvite.id == invite_id, DaySchedule.owner_id == owner_id)
        )
        invite = result.scalar_one_or_none()
        if invite is None:
            raise NotFound("Invite not found")

        await self.db.delete(invite)
        await self.db.commit()
        logger.info(f"User {owner_id} revoked invite {invite_id}")

    async def _by_token(self, token: str, refresh: bool = False) -> Optional[ScheduleShareInvite]:
        if not token or not TOKEN_PATTERN.match(token):
            return None
        query = (
            select(ScheduleShareInvite)
            .options(selectinload(ScheduleShareInvite.schedule).selectinload(DaySchedule.owner))
            .where(ScheduleShareInvite.token == token)
        )
        if refresh:
            query = query.execution_options(populate_existing=True)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def inspect(self, token: str) -> Tuple[ScheduleShareInvite, bool]:
        """Public metadata lookup: (invite with schedule and owner loaded, expired flag)."""
        invite = await self._by_token(token)
        if invite is None:
            raise NotFound("Invite not found")
        return invite, is_expired(invite)

    async def accept(self, token: str, requester: Optional[User]) -> Tuple[int, date]:
        """
        Redeem an invite for the requester and return (owner_id, date).

        Re-accepting an invite the requester already redeemed is a no-op.
        """
        if requester is None:
            raise Unauthenticated()
        requester_id = requester.id
        requester_email = (requester.email or "").strip().lower()

        invite = await self._by_token(token, refresh=True)
        if invite is None:
            raise NotFound("Invite not found")
        schedule_id = invite.schedule_id
        owner_id = invite.schedule.owner_id
        day = invite.schedule.date

        if is_expired(invite):
            raise Expired()

        if requester_id == owner_id:
            # Nothing to grant; leave the invite for whoever it was meant for
            return owner_id, day

        for _ in range(ACCEPT_ATTEMPTS):
            now = utcnow()
            if is_expired(invite, now):
                raise Expired()

            if invite.redeemed_at is not None:
                if invite.redeemed_by_user_id == requester_id:
                    return owner_id, day
                logger.warning(
                    f"Invite {token_hint(token)} already redeemed; rejected user {requester_id}"
                )
                raise Conflict("Invite already redeemed")

            if invite.invited_email and invite.invited_email.lower() != requester_email:
                logger.warning(f"Invite {token_hint(token)} email mismatch for user {requester_id}")
                raise Forbidden("Email mismatch")

            claim = await self.db.execute(
                update(ScheduleShareInvite)
                .where(
                    ScheduleShareInvite.id == invite.id,
                    ScheduleShareInvite.redeemed_at.is_(None),
                )
                .values(redeemed_at=now, redeemed_by_user_id=requester_id)
                .execution_options(synchronize_session="evaluate")
            )
            if claim.rowcount == 1:
                try:
                    await grant_share(self.db, schedule_id, requester_id, invite.can_edit)
                    await self.db.commit()
                except IntegrityError:
                    # A concurrent grant for the same user; undo the claim and retry
                    await self.db.rollback()
                else:
                    logger.info(
                        f"User {requester_id} redeemed invite {token_hint(token)} "
                        f"for schedule {schedule_id} (can_edit={invite.can_edit})"
                    )
                    return owner_id, day
            else:
                await self.db.rollback()

            invite = await self._by_token(token, refresh=True)
            if invite is None:
                raise NotFound("Invite not found")

        raise Conflict("Invite already redeemed")
