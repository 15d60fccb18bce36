"""
Day schedules and items, scoped through the authorization core.
"""
import logging
from datetime import date
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFound
from app.core.timeutils import combine_utc, parse_date
from app.models.schedule import DaySchedule, ScheduleItem
from app.schemas.schedule import DayUpsert, ItemCreate, ItemUpdate
from app.services.access import AccessKind, AccessPolicy, Action, find_schedule
from app.services.users import UserDirectory

logger = logging.getLogger(__name__)

ITEM_TEXT_FIELDS = (
    "title",
    "emoji",
    "color",
    "location",
    "notes",
    "kind",
    "departure_place",
    "arrival_place",
)


async def get_or_create_schedule(db: AsyncSession, owner_id: int, day: date) -> DaySchedule:
    """
    Fetch the owner's schedule for a day, creating it if needed.

    Call before adding other pending objects: on a lost insert race the
    session is rolled back and the winner's row is returned.
    """
    schedule = await find_schedule(db, owner_id, day)
    if schedule is not None:
        return schedule

    schedule = DaySchedule(owner_id=owner_id, date=day)
    db.add(schedule)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        schedule = await find_schedule(db, owner_id, day)
        if schedule is None:
            raise
    else:
        logger.info(f"Created schedule {schedule.id} for user {owner_id} on {day.isoformat()}")
    return schedule


class ScheduleService:
    """Read and mutate day schedules on behalf of one requester."""

    def __init__(self, db: AsyncSession, user_id: int):
        self.db = db
        self.user_id = user_id
        self.policy = AccessPolicy(db)
        self.users = UserDirectory(db)

    async def _target_owner(self, owner_id: Optional[int], owner_slug: Optional[str]) -> Optional[int]:
        """Requester's own id when no reference is given; None if the reference is unknown."""
        if owner_id is None and not owner_slug:
            return self.user_id
        if owner_id == self.user_id:
            return self.user_id
        return await self.users.resolve_owner(owner_id, owner_slug)

    async def get_day(
        self,
        day: date,
        owner_id: Optional[int] = None,
        owner_slug: Optional[str] = None,
    ) -> Tuple[Optional[DaySchedule], Optional[str]]:
        """Return (schedule with items, access label). Unknown owners read as no schedule."""
        target = await self._target_owner(owner_id, owner_slug)
        if target is None:
            return None, None

        access = await self.policy.authorize(self.user_id, target, day, Action.VIEW, with_items=True)
        if access.schedule is None:
            return None, access.label
        return access.schedule, access.label

    async def _authorize_edit(self, owner_id: Optional[int], owner_slug: Optional[str], day: date):
        target = await self._target_owner(owner_id, owner_slug)
        if target is None:
            raise NotFound("Schedule not found")
        access = await self.policy.authorize(self.user_id, target, day, Action.EDIT)
        return target, access

    async def upsert_day(self, data: DayUpsert) -> DaySchedule:
        day = data.day
        target, access = await self._authorize_edit(data.owner_id, data.owner, day)

        if access.kind == AccessKind.OWNER:
            schedule = await get_or_create_schedule(self.db, target, day)
        else:
            schedule = access.schedule

        if "title" in data.model_fields_set:
            schedule.title = data.title
        if "notes" in data.model_fields_set:
            schedule.notes = data.notes
        await self.db.commit()

        return await find_schedule(self.db, target, day, with_items=True)

    async def create_item(self, data: ItemCreate) -> ScheduleItem:
        day = data.day
        target, access = await self._authorize_edit(data.owner_id, data.owner, day)

        if access.kind == AccessKind.OWNER:
            schedule = await get_or_create_schedule(self.db, target, day)
        else:
            schedule = access.schedule

        item = ScheduleItem(
            schedule_id=schedule.id,
            title=data.title,
            emoji=data.emoji,
            color=data.color,
            location=data.location,
            notes=data.notes,
            kind=data.kind or "GENERAL",
            start_time=combine_utc(day, data.start_time),
            end_time=combine_utc(day, data.end_time) if data.end_time else None,
            departure_place=data.departure_place,
            arrival_place=data.arrival_place,
        )
        self.db.add(item)
        await self.db.commit()
        await self.db.refresh(item)
        return item

    async def update_item(self, item_id: int, data: ItemUpdate) -> ScheduleItem:
        item, _ = await self.policy.authorize_item(self.user_id, item_id, Action.EDIT)
        fields = data.model_fields_set

        for name in ITEM_TEXT_FIELDS:
            if name in fields:
                setattr(item, name, getattr(data, name))

        # Times are read against the given date, else the parent schedule's date
        day = parse_date(data.date) if data.date else item.schedule.date
        if "start_time" in fields:
            item.start_time = combine_utc(day, data.start_time)
        if "end_time" in fields:
            item.end_time = combine_utc(day, data.end_time) if data.end_time else None

        await self.db.commit()
        await self.db.refresh(item)
        return item

    async def delete_item(self, item_id: int) -> None:
        item, _ = await self.policy.authorize_item(self.user_id, item_id, Action.EDIT)
        await self.db.delete(item)
        await self.db.commit()
        logger.info(f"User {self.user_id} deleted item {item_id}")
