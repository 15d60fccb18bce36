"""
Authorization core: who may view or edit a given owner's day.

Access is decided from ownership first and the share registry second.
Lookups return an explicit ``Access`` value (owner, shared, or none) instead
of a nullable share row, so a missing check cannot silently grant access.
"""
import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.errors import Forbidden, NotFound, Unauthenticated
from app.models.schedule import DaySchedule, ScheduleItem
from app.models.sharing import ScheduleShare

logger = logging.getLogger(__name__)


class Action(str, Enum):
    VIEW = "view"
    EDIT = "edit"


class AccessKind(str, Enum):
    OWNER = "owner"
    SHARED = "shared"
    NONE = "none"


@dataclass(frozen=True)
class Access:
    kind: AccessKind
    owner_id: int
    schedule: Optional[DaySchedule] = None
    can_edit_share: bool = False

    @property
    def can_view(self) -> bool:
        return self.kind in (AccessKind.OWNER, AccessKind.SHARED)

    @property
    def can_edit(self) -> bool:
        if self.kind == AccessKind.OWNER:
            return True
        return self.kind == AccessKind.SHARED and self.can_edit_share

    def allows(self, action: Action) -> bool:
        return self.can_edit if action == Action.EDIT else self.can_view

    @property
    def label(self) -> Optional[str]:
        """Short form used in responses: 'owner', 'edit', 'view' or None."""
        if self.kind == AccessKind.OWNER:
            return "owner"
        if self.kind == AccessKind.SHARED:
            return "edit" if self.can_edit_share else "view"
        return None


async def find_schedule(
    db: AsyncSession,
    owner_id: int,
    day: date,
    with_items: bool = False,
) -> Optional[DaySchedule]:
    query = select(DaySchedule).where(DaySchedule.owner_id == owner_id, DaySchedule.date == day)
    if with_items:
        query = query.options(selectinload(DaySchedule.items)).execution_options(
            populate_existing=True
        )
    result = await db.execute(query)
    return result.scalar_one_or_none()


class AccessPolicy:
    """Decides VIEW / EDIT for a requester against an (owner, date) schedule."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def lookup(
        self,
        requester_id: int,
        owner_id: int,
        day: date,
        with_items: bool = False,
    ) -> Access:
        schedule = await find_schedule(self.db, owner_id, day, with_items=with_items)

        # Owners never consult the share registry, even if a self-share exists
        if requester_id == owner_id:
            return Access(AccessKind.OWNER, owner_id, schedule)

        if schedule is None:
            return Access(AccessKind.NONE, owner_id, None)

        share = await self.db.scalar(
            select(ScheduleShare).where(
                ScheduleShare.schedule_id == schedule.id,
                ScheduleShare.shared_with_user_id == requester_id,
            )
        )
        if share is None:
            return Access(AccessKind.NONE, owner_id, schedule)
        return Access(AccessKind.SHARED, owner_id, schedule, can_edit_share=share.can_edit)

    async def authorize(
        self,
        requester_id: Optional[int],
        owner_id: int,
        day: date,
        action: Action,
        with_items: bool = False,
    ) -> Access:
        """
        Enforce access for one action.

        Returns the Access on success. A VIEW of a missing schedule succeeds
        with ``schedule=None``; an EDIT by a non-owner of a missing schedule
        is NOT_FOUND, since only owners create schedules implicitly.
        """
        if requester_id is None:
            raise Unauthenticated()

        access = await self.lookup(requester_id, owner_id, day, with_items=with_items)
        if access.kind == AccessKind.OWNER:
            return access

        if access.schedule is None:
            if action == Action.VIEW:
                return access
            raise NotFound("Schedule not found")

        if not access.allows(action):
            logger.warning(
                f"Denied {action.value} on schedule {access.schedule.id} for user {requester_id}"
            )
            raise Forbidden()
        return access

    async def authorize_item(
        self,
        requester_id: Optional[int],
        item_id: int,
        action: Action,
    ) -> Tuple[ScheduleItem, Access]:
        """Items carry no permissions; check against the parent schedule's owner and date."""
        if requester_id is None:
            raise Unauthenticated()

        result = await self.db.execute(
            select(ScheduleItem)
            .options(selectinload(ScheduleItem.schedule))
            .where(ScheduleItem.id == item_id)
        )
        item = result.scalar_one_or_none()
        if item is None:
            raise NotFound("Item not found")

        schedule = item.schedule
        access = await self.authorize(requester_id, schedule.owner_id, schedule.date, action)
        return item, access
