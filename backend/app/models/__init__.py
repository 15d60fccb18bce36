"""
SQLAlchemy models for the Shiori database.
"""
from app.models.user import User
from app.models.schedule import DaySchedule, ScheduleItem, ITEM_KINDS
from app.models.sharing import ScheduleShare, ScheduleShareInvite

__all__ = [
    "User",
    "DaySchedule",
    "ScheduleItem",
    "ITEM_KINDS",
    "ScheduleShare",
    "ScheduleShareInvite",
]
