"""
Per-user schedule shares and the invite links that produce them.
"""
from datetime import datetime
from typing import TYPE_CHECKING, Optional
from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

if TYPE_CHECKING:
    from app.models.schedule import DaySchedule
    from app.models.user import User


class ScheduleShare(Base):
    __tablename__ = "schedule_shares"
    __table_args__ = (
        UniqueConstraint("schedule_id", "shared_with_user_id", name="uq_schedule_shares_schedule_user"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    schedule_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("day_schedules.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    shared_with_user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    can_edit: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    schedule: Mapped["DaySchedule"] = relationship("DaySchedule", back_populates="shares")
    shared_with: Mapped["User"] = relationship("User", back_populates="received_shares")


class ScheduleShareInvite(Base):
    __tablename__ = "schedule_share_invites"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    schedule_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("day_schedules.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # The only redemption key
    token: Mapped[str] = mapped_column(String(128), unique=True, nullable=False, index=True)
    invited_email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)
    can_edit: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Set together, exactly once
    redeemed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    redeemed_by_user_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Relationships
    schedule: Mapped["DaySchedule"] = relationship("DaySchedule", back_populates="invites")
