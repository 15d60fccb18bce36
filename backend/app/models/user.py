"""
User model for identity and public handles.
"""
from datetime import datetime
from typing import TYPE_CHECKING, Optional
from sqlalchemy import String, DateTime, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

if TYPE_CHECKING:
    from app.models.schedule import DaySchedule
    from app.models.sharing import ScheduleShare


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Subject claim from the identity provider; never changes
    external_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    # Stored lower-cased
    email: Mapped[Optional[str]] = mapped_column(String(320), unique=True, nullable=True, index=True)
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    avatar_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    public_slug: Mapped[Optional[str]] = mapped_column(String(64), unique=True, nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    schedules: Mapped[list["DaySchedule"]] = relationship(
        "DaySchedule", back_populates="owner", cascade="all, delete-orphan", passive_deletes=True
    )
    received_shares: Mapped[list["ScheduleShare"]] = relationship(
        "ScheduleShare", back_populates="shared_with", cascade="all, delete-orphan", passive_deletes=True
    )
