"""
Day schedule and item schemas.
"""
from datetime import date as Date, datetime
from typing import Annotated, List, Optional
from pydantic import AfterValidator, BaseModel, Field, field_validator, model_validator

from app.core.timeutils import as_utc, parse_clock, parse_date
from app.models.schedule import ITEM_KINDS


def _check_date(value: str) -> str:
    parse_date(value)
    return value


def _check_clock(value: str) -> str:
    parse_clock(value)
    return value


def _normalize_kind(value: str) -> str:
    kind = value.strip().upper()
    if kind not in ITEM_KINDS:
        raise ValueError("kind must be 'general' or 'move'")
    return kind


DateString = Annotated[str, AfterValidator(_check_date)]  # YYYY-MM-DD
ClockString = Annotated[str, AfterValidator(_check_clock)]  # HH:mm
ItemKind = Annotated[str, AfterValidator(_normalize_kind)]


class OwnerReference(BaseModel):
    """Optional pointer at another user's schedule, by numeric id or public slug."""

    owner_id: Optional[int] = Field(default=None, gt=0)
    owner: Optional[str] = Field(default=None, min_length=1, max_length=64)


class DayUpsert(OwnerReference):
    date: DateString
    title: Optional[str] = Field(default=None, max_length=255)
    notes: Optional[str] = None

    @property
    def day(self) -> Date:
        return parse_date(self.date)


class ItemCreate(OwnerReference):
    date: DateString
    title: str = Field(min_length=1, max_length=500)
    emoji: Optional[str] = Field(default=None, max_length=32)
    color: Optional[str] = Field(default=None, max_length=32)
    start_time: ClockString
    end_time: Optional[ClockString] = None
    location: Optional[str] = Field(default=None, max_length=500)
    kind: Optional[ItemKind] = None
    departure_place: Optional[str] = Field(default=None, max_length=500)
    arrival_place: Optional[str] = Field(default=None, max_length=500)
    notes: Optional[str] = None

    @property
    def day(self) -> Date:
        return parse_date(self.date)


class ItemUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=500)
    emoji: Optional[str] = Field(default=None, max_length=32)
    color: Optional[str] = Field(default=None, max_length=32)
    start_time: Optional[ClockString] = None
    end_time: Optional[ClockString] = None  # explicit null clears the end
    date: Optional[DateString] = None  # date the times are read against
    location: Optional[str] = Field(default=None, max_length=500)
    kind: Optional[ItemKind] = None
    departure_place: Optional[str] = Field(default=None, max_length=500)
    arrival_place: Optional[str] = Field(default=None, max_length=500)
    notes: Optional[str] = None

    @model_validator(mode="after")
    def reject_null_required(self) -> "ItemUpdate":
        for name in ("title", "start_time", "kind"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class ItemResponse(BaseModel):
    id: int
    schedule_id: int
    title: str
    emoji: Optional[str] = None
    color: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    kind: str
    start_time: datetime
    end_time: Optional[datetime] = None
    departure_place: Optional[str] = None
    arrival_place: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @field_validator("start_time", "end_time")
    @classmethod
    def ensure_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)


class ScheduleResponse(BaseModel):
    id: int
    owner_id: int
    date: Date
    title: Optional[str] = None
    notes: Optional[str] = None
    items: List[ItemResponse] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class DayResponse(BaseModel):
    schedule: Optional[ScheduleResponse] = None
    access: Optional[str] = None  # 'owner', 'edit', 'view'


class ItemEnvelope(BaseModel):
    item: ItemResponse


class OkResponse(BaseModel):
    ok: bool = True
