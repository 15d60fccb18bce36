"""
Day schedule and item endpoints.
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.user import User
from app.schemas.schedule import (
    DayResponse,
    DayUpsert,
    ItemCreate,
    ItemEnvelope,
    ItemResponse,
    ItemUpdate,
    OkResponse,
    ScheduleResponse,
)
from app.api.deps import get_current_user
from app.core.errors import ValidationFailed
from app.core.timeutils import parse_date
from app.services.schedule import ScheduleService

router = APIRouter()


def date_query(value: str = Query(..., alias="date", description="Day in YYYY-MM-DD")) -> date:
    try:
        return parse_date(value)
    except ValueError as e:
        raise ValidationFailed(str(e)) from e


@router.get("/day", response_model=DayResponse)
async def get_day(
    day: date = Depends(date_query),
    owner_id: Optional[int] = Query(None, description="Owner user id"),
    owner: Optional[str] = Query(None, description="Owner public slug"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get a day's schedule with items ordered by start time."""
    service = ScheduleService(db, current_user.id)
    schedule, access = await service.get_day(day, owner_id=owner_id, owner_slug=owner)
    return DayResponse(
        schedule=ScheduleResponse.model_validate(schedule) if schedule else None,
        access=access,
    )


@router.post("/day", response_model=DayResponse)
async def upsert_day(
    day_data: DayUpsert,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Set a day's title and notes, creating the schedule for its owner."""
    service = ScheduleService(db, current_user.id)
    schedule = await service.upsert_day(day_data)
    access = "owner" if schedule.owner_id == current_user.id else "edit"
    return DayResponse(schedule=ScheduleResponse.model_validate(schedule), access=access)


@router.post("/item", response_model=ItemEnvelope)
async def create_item(
    item_data: ItemCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Add an item to a day."""
    service = ScheduleService(db, current_user.id)
    item = await service.create_item(item_data)
    return ItemEnvelope(item=ItemResponse.model_validate(item))


@router.put("/item/{item_id}", response_model=ItemEnvelope)
async def update_item(
    item_id: int,
    item_data: ItemUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Update an item. Requires edit access to its day."""
    service = ScheduleService(db, current_user.id)
    item = await service.update_item(item_id, item_data)
    return ItemEnvelope(item=ItemResponse.model_validate(item))


@router.delete("/item/{item_id}", response_model=OkResponse)
async def delete_item(
    item_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete an item. Requires edit access to its day."""
    service = ScheduleService(db, current_user.id)
    await service.delete_item(item_id)
    return OkResponse()
