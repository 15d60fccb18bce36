"""Tests for app.services.access: owner / shared / none decisions."""

import pytest

from app.core.errors import Forbidden, NotFound, Unauthenticated
from app.models.schedule import DaySchedule
from app.models.sharing import ScheduleShare
from app.services.access import Access, AccessKind, AccessPolicy, Action

from conftest import DAY


async def add_schedule(db, owner, day=DAY):
    schedule = DaySchedule(owner_id=owner.id, date=day)
    db.add(schedule)
    await db.commit()
    return schedule


async def add_share(db, schedule, user, can_edit):
    db.add(ScheduleShare(schedule_id=schedule.id, shared_with_user_id=user.id, can_edit=can_edit))
    await db.commit()


class TestAccessValue:
    def test_owner_can_do_everything(self):
        access = Access(AccessKind.OWNER, owner_id=1)
        assert access.allows(Action.VIEW)
        assert access.allows(Action.EDIT)
        assert access.label == "owner"

    def test_view_share(self):
        access = Access(AccessKind.SHARED, owner_id=1, can_edit_share=False)
        assert access.allows(Action.VIEW)
        assert not access.allows(Action.EDIT)
        assert access.label == "view"

    def test_edit_share(self):
        access = Access(AccessKind.SHARED, owner_id=1, can_edit_share=True)
        assert access.allows(Action.EDIT)
        assert access.label == "edit"

    def test_none_allows_nothing(self):
        access = Access(AccessKind.NONE, owner_id=1, can_edit_share=True)
        assert not access.can_view
        assert not access.can_edit
        assert access.label is None


class TestLookup:
    @pytest.mark.asyncio
    async def test_owner_without_schedule(self, db, make_user):
        owner = await make_user()
        access = await AccessPolicy(db).lookup(owner.id, owner.id, DAY)
        assert access.kind == AccessKind.OWNER
        assert access.schedule is None

    @pytest.mark.asyncio
    async def test_owner_ignores_self_share(self, db, make_user):
        owner = await make_user()
        schedule = await add_schedule(db, owner)
        await add_share(db, schedule, owner, can_edit=False)
        access = await AccessPolicy(db).lookup(owner.id, owner.id, DAY)
        assert access.kind == AccessKind.OWNER
        assert access.can_edit

    @pytest.mark.asyncio
    async def test_stranger_has_none(self, db, make_user):
        owner = await make_user()
        stranger = await make_user()
        await add_schedule(db, owner)
        access = await AccessPolicy(db).lookup(stranger.id, owner.id, DAY)
        assert access.kind == AccessKind.NONE

    @pytest.mark.asyncio
    async def test_share_is_scoped_to_its_date(self, db, make_user):
        from datetime import date

        owner = await make_user()
        friend = await make_user()
        schedule = await add_schedule(db, owner)
        await add_share(db, schedule, friend, can_edit=True)
        await add_schedule(db, owner, day=date(2025, 3, 15))

        policy = AccessPolicy(db)
        assert (await policy.lookup(friend.id, owner.id, DAY)).kind == AccessKind.SHARED
        other_day = await policy.lookup(friend.id, owner.id, date(2025, 3, 15))
        assert other_day.kind == AccessKind.NONE


class TestAuthorize:
    @pytest.mark.asyncio
    async def test_anonymous_is_unauthenticated(self, db, make_user):
        owner = await make_user()
        with pytest.raises(Unauthenticated):
            await AccessPolicy(db).authorize(None, owner.id, DAY, Action.VIEW)

    @pytest.mark.asyncio
    async def test_view_share_cannot_edit(self, db, make_user):
        owner = await make_user()
        friend = await make_user()
        schedule = await add_schedule(db, owner)
        await add_share(db, schedule, friend, can_edit=False)

        policy = AccessPolicy(db)
        access = await policy.authorize(friend.id, owner.id, DAY, Action.VIEW)
        assert access.label == "view"
        with pytest.raises(Forbidden):
            await policy.authorize(friend.id, owner.id, DAY, Action.EDIT)

    @pytest.mark.asyncio
    async def test_stranger_is_forbidden(self, db, make_user):
        owner = await make_user()
        stranger = await make_user()
        await add_schedule(db, owner)
        with pytest.raises(Forbidden):
            await AccessPolicy(db).authorize(stranger.id, owner.id, DAY, Action.VIEW)

    @pytest.mark.asyncio
    async def test_missing_schedule_view_reads_empty(self, db, make_user):
        owner = await make_user()
        stranger = await make_user()
        access = await AccessPolicy(db).authorize(stranger.id, owner.id, DAY, Action.VIEW)
        assert access.schedule is None

    @pytest.mark.asyncio
    async def test_missing_schedule_edit_by_non_owner_is_not_found(self, db, make_user):
        owner = await make_user()
        stranger = await make_user()
        with pytest.raises(NotFound):
            await AccessPolicy(db).authorize(stranger.id, owner.id, DAY, Action.EDIT)

    @pytest.mark.asyncio
    async def test_revoked_share_takes_effect_immediately(self, db, make_user):
        owner = await make_user()
        friend = await make_user()
        schedule = await add_schedule(db, owner)
        await add_share(db, schedule, friend, can_edit=True)

        policy = AccessPolicy(db)
        await policy.authorize(friend.id, owner.id, DAY, Action.EDIT)

        share = await db.get(ScheduleShare, 1)
        await db.delete(share)
        await db.commit()
        with pytest.raises(Forbidden):
            await policy.authorize(friend.id, owner.id, DAY, Action.VIEW)
