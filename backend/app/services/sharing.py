"""
Share registry: owner-managed per-user grants on a day schedule.
"""
import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.errors import NotFound, ValidationFailed
from app.models.schedule import DaySchedule
from app.models.sharing import ScheduleShare
from app.services.access import find_schedule
from app.services.schedule import get_or_create_schedule
from app.services.users import UserDirectory

logger = logging.getLogger(__name__)

UPSERT_ATTEMPTS = 3


async def grant_share(db: AsyncSession, schedule_id: int, user_id: int, can_edit: bool) -> ScheduleShare:
    """
    Insert or overwrite the share for (schedule, user) and flush.

    Raises IntegrityError if a concurrent insert wins; callers roll back and retry.
    """
    share = await db.scalar(
        select(ScheduleShare).where(
            ScheduleShare.schedule_id == schedule_id,
            ScheduleShare.shared_with_user_id == user_id,
        )
    )
    if share is None:
        share = ScheduleShare(schedule_id=schedule_id, shared_with_user_id=user_id, can_edit=can_edit)
        db.add(share)
    else:
        share.can_edit = can_edit
    await db.flush()
    return share


class ShareService:
    """Share management for the requester's own schedules."""

    def __init__(self, db: AsyncSession, user_id: int):
        self.db = db
        self.user_id = user_id
        self.users = UserDirectory(db)

    async def list_shares(self, day: date) -> List[ScheduleShare]:
        schedule = await find_schedule(self.db, self.user_id, day)
        if schedule is None:
            return []
        result = await self.db.execute(
            select(ScheduleShare)
            .options(selectinload(ScheduleShare.shared_with))
            .where(ScheduleShare.schedule_id == schedule.id)
            .order_by(ScheduleShare.id.asc())
        )
        return list(result.scalars().all())

    async def upsert_share(self, day: date, email: str, can_edit: bool) -> ScheduleShare:
        grantee = await self.users.get_by_email(email)
        if grantee is None:
            # No placeholder accounts: the grantee has to have logged in once
            raise NotFound("User not found. They must log in first")
        if grantee.id == self.user_id:
            raise ValidationFailed("You cannot share a schedule with yourself")
        grantee_id = grantee.id

        for attempt in range(UPSERT_ATTEMPTS):
            schedule = await get_or_create_schedule(self.db, self.user_id, day)
            try:
                share = await grant_share(self.db, schedule.id, grantee_id, can_edit)
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                if attempt == UPSERT_ATTEMPTS - 1:
                    raise
                continue
            break

        logger.info(
            f"User {self.user_id} shared {day.isoformat()} with user {grantee_id} (can_edit={can_edit})"
        )
        result = await self.db.execute(
            select(ScheduleShare)
            .options(selectinload(ScheduleShare.shared_with))
            .where(ScheduleShare.id == share.id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def revoke_share(
        self,
        day: date,
        user_id: Optional[int] = None,
        email: Optional[str] = None,
    ) -> None:
        """Delete the grant. Missing schedules, users or shares are not errors."""
        if user_id is None and not email:
            raise ValidationFailed("user_id or email is required")

        if user_id is None:
            grantee = await self.users.get_by_email(email)
            if grantee is None:
                return
            user_id = grantee.id

        schedule = await find_schedule(self.db, self.user_id, day)
        if schedule is None:
            return

        result = await self.db.execute(
            delete(ScheduleShare).where(
                ScheduleShare.schedule_id == schedule.id,
                ScheduleShare.shared_with_user_id == user_id,
            )
        )
        await self.db.commit()
        if result.rowcount:
            logger.info(f"User {self.user_id} revoked share on {day.isoformat()} for user {user_id}")

    async def shared_with_me(self, day: date) -> List[ScheduleShare]:
        """Shares other owners have granted the requester for a date."""
        result = await self.db.execute(
            select(ScheduleShare)
            .join(DaySchedule, ScheduleShare.schedule_id == DaySchedule.id)
            .options(selectinload(ScheduleShare.schedule).selectinload(DaySchedule.owner))
            .where(
                ScheduleShare.shared_with_user_id == self.user_id,
                DaySchedule.date == day,
            )
            .order_by(ScheduleShare.id.asc())
        )
        return list(result.scalars().all())
