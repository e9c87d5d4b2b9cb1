from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from gymdesk.core.exceptions import MemberNotFound
from gymdesk.services.member_state import MemberState, get_member_state, resolve_member_state

NOW = datetime(2024, 6, 1, 12, 0, 0)


def member(deleted_at=None):
    return SimpleNamespace(deleted_at=deleted_at)


def sub(status="ACTIVE", end_date=NOW + timedelta(days=10), cancelled_at=None):
    return SimpleNamespace(status=status, end_date=end_date, cancelled_at=cancelled_at)


class TestResolveMemberState:
    """Pure resolver, first matching rule wins"""

    @pytest.mark.parametrize("subs", [[], [sub()], [sub("CANCELLED")], [sub(end_date=NOW - timedelta(days=3))]])
    def test_deleted_wins_over_everything(self, subs):
        assert resolve_member_state(member(deleted_at=NOW), subs, NOW) == MemberState.DELETED

    def test_no_rows(self):
        assert resolve_member_state(member(), [], NOW) == MemberState.NO_SUBSCRIPTION

    def test_cancelled_with_future_end_is_not_active(self):
        s = sub("CANCELLED", end_date=NOW + timedelta(days=20), cancelled_at=NOW - timedelta(days=1))
        assert resolve_member_state(member(), [s], NOW) == MemberState.CANCELLED

    def test_cancelled_at_without_cancelled_status(self):
        # status left ACTIVE but the row carries a cancellation
        s = sub("ACTIVE", end_date=NOW + timedelta(days=20), cancelled_at=NOW - timedelta(days=1))
        assert resolve_member_state(member(), [s], NOW) == MemberState.CANCELLED

    def test_past_end_date_overrides_stale_active_status(self):
        s = sub("ACTIVE", end_date=NOW - timedelta(seconds=1))
        assert resolve_member_state(member(), [s], NOW) == MemberState.EXPIRED

    def test_expired_status_with_future_end(self):
        assert resolve_member_state(member(), [sub("EXPIRED")], NOW) == MemberState.EXPIRED

    def test_end_date_equal_to_now_is_still_active(self):
        assert resolve_member_state(member(), [sub(end_date=NOW)], NOW) == MemberState.ACTIVE

    def test_only_the_newest_row_counts(self):
        newest = sub("ACTIVE", end_date=NOW + timedelta(days=5))
        older = sub("CANCELLED")
        assert resolve_member_state(member(), [newest, older], NOW) == MemberState.ACTIVE

    @pytest.mark.parametrize("bad", [None, "not-a-date", 20240601])
    def test_malformed_end_date_falls_through(self, bad):
        assert resolve_member_state(member(), [sub(end_date=bad)], NOW) == MemberState.ACTIVE

    def test_aware_end_date_does_not_raise(self):
        from datetime import timezone
        s = sub(end_date=datetime(2024, 5, 1, tzinfo=timezone.utc))
        assert resolve_member_state(member(), [s], NOW) == MemberState.ACTIVE


class TestGetMemberState:
    def test_latest_created_row_is_current(self, db, make, now):
        tenant = make.tenant()
        plan = make.plan(tenant)
        m = make.member(tenant)
        make.subscription(m, plan, end_date=now + timedelta(days=60), created_at=now - timedelta(days=40))
        latest = make.subscription(m, plan, end_date=now - timedelta(days=1), created_at=now - timedelta(days=5),
                                   status="ACTIVE")

        _, state, current = get_member_state(db, m.id, now)

        assert current.id == latest.id
        assert state == MemberState.EXPIRED

    def test_same_created_at_larger_id_wins(self, db, make, now):
        tenant = make.tenant()
        plan = make.plan(tenant)
        m = make.member(tenant)
        created = now - timedelta(days=2)
        make.subscription(m, plan, end_date=now + timedelta(days=5), created_at=created, status="CANCELLED")
        second = make.subscription(m, plan, end_date=now + timedelta(days=5), created_at=created)

        _, state, current = get_member_state(db, m.id, now)

        assert current.id == second.id
        assert state == MemberState.ACTIVE

    def test_unknown_member(self, db, now):
        with pytest.raises(MemberNotFound):
            get_member_state(db, 999, now)

    def test_other_tenant_is_not_found(self, db, make, now):
        m = make.member(make.tenant())
        other = make.tenant(name="Other Gym")
        with pytest.raises(MemberNotFound):
            get_member_state(db, m.id, now, tenant_id=other.id)

    def test_staff_user_is_not_a_member(self, db, make, now):
        owner = make.staff("OWNER", tenant=make.tenant())
        with pytest.raises(MemberNotFound):
            get_member_state(db, owner.id, now)
