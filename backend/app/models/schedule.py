"""
Day schedules and their timed items.
"""
import datetime as dt
from datetime import datetime
from typing import TYPE_CHECKING, Optional
from sqlalchemy import Date, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

if TYPE_CHECKING:
    from app.models.user import User
    from app.models.sharing import ScheduleShare, ScheduleShareInvite


ITEM_KINDS = ("GENERAL", "MOVE")


class DaySchedule(Base):
    __tablename__ = "day_schedules"
    __table_args__ = (
        UniqueConstraint("owner_id", "date", name="uq_day_schedules_owner_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    owner: Mapped["User"] = relationship("User", back_populates="schedules")
    items: Mapped[list["ScheduleItem"]] = relationship(
        "ScheduleItem",
        back_populates="schedule",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ScheduleItem.start_time",
    )
    shares: Mapped[list["ScheduleShare"]] = relationship(
        "ScheduleShare", back_populates="schedule", cascade="all, delete-orphan", passive_deletes=True
    )
    invites: Mapped[list["ScheduleShareInvite"]] = relationship(
        "ScheduleShareInvite", back_populates="schedule", cascade="all, delete-orphan", passive_deletes=True
    )


class ScheduleItem(Base):
    __tablename__ = "schedule_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    schedule_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("day_schedules.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    emoji: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    color: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    kind: Mapped[str] = mapped_column(String(16), nullable=False, default="GENERAL")  # 'GENERAL', 'MOVE'

    # UTC instants; end may precede start, it is stored as given
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    end_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # MOVE items only
    departure_place: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    arrival_place: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    schedule: Mapped["DaySchedule"] = relationship("DaySchedule", back_populates="items")
