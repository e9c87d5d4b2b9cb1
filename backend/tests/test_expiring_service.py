from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from gymdesk.services.branch_scope import Scope
from gymdesk.services.expiring_service import (
    build_expiring_overview,
    count_expiring_members,
    days_until,
    find_expired_members,
    find_expiring_subscriptions,
    latest_per_customer,
    urgency_for,
)


def ids(rows):
    return [sub.id for sub, _ in rows]


class TestExpiringWindow:
    """find_expiring_subscriptions over (now, now + days]"""

    def test_renewed_customer_listed_once_with_latest_row(self, db, make):
        tenant = make.tenant()
        plan = make.plan(tenant)
        m = make.member(tenant)
        make.subscription(m, plan, created_at=datetime(2024, 1, 1), end_date=datetime(2024, 1, 10),
                          status="EXPIRED")
        b = make.subscription(m, plan, created_at=datetime(2024, 2, 1), end_date=datetime(2024, 3, 1))

        rows = find_expiring_subscriptions(db, 14, datetime(2024, 2, 20))

        assert ids(rows) == [b.id]
        assert rows[0][0].end_date == datetime(2024, 3, 1)

    def test_two_active_rows_in_window_yield_the_later_one(self, db, make, now):
        tenant = make.tenant()
        plan = make.plan(tenant)
        m = make.member(tenant)
        make.subscription(m, plan, created_at=now - timedelta(days=30), end_date=now + timedelta(days=2))
        later = make.subscription(m, plan, created_at=now - timedelta(days=10), end_date=now + timedelta(days=5))

        rows = find_expiring_subscriptions(db, 7, now)

        assert ids(rows) == [later.id]
        assert count_expiring_members(db, 7, now) == 1

    def test_window_end_is_inclusive(self, db, make, now):
        tenant = make.tenant()
        plan = make.plan(tenant)
        sub = make.subscription(make.member(tenant), plan, created_at=datetime(2024, 5, 9),
                                end_date=datetime(2024, 6, 8, 12, 0, 0))
        make.subscription(make.member(tenant), plan, created_at=datetime(2024, 5, 9),
                          end_date=datetime(2024, 6, 8, 12, 0, 1))

        assert ids(find_expiring_subscriptions(db, 7, now)) == [sub.id]

    def test_midnight_end_date_within_week(self, db, make):
        tenant = make.tenant()
        plan = make.plan(tenant)
        sub = make.subscription(make.member(tenant), plan, created_at=datetime(2024, 5, 9),
                                end_date=datetime(2024, 6, 8, 0, 0, 0))

        assert ids(find_expiring_subscriptions(db, 7, datetime(2024, 6, 1))) == [sub.id]

    def test_past_end_date_is_expired_not_expiring(self, db, make, now):
        tenant = make.tenant()
        plan = make.plan(tenant)
        sub = make.subscription(make.member(tenant), plan, created_at=datetime(2024, 4, 30),
                                end_date=datetime(2024, 5, 30))

        assert find_expiring_subscriptions(db, 7, now) == []
        assert ids(find_expired_members(db, now)) == [sub.id]

    def test_cancelled_rows_excluded(self, db, make, now):
        tenant = make.tenant()
        plan = make.plan(tenant)
        make.subscription(make.member(tenant), plan, created_at=now - timedelta(days=25),
                          end_date=now + timedelta(days=2), status="CANCELLED")
        make.subscription(make.member(tenant), plan, created_at=now - timedelta(days=25),
                          end_date=now + timedelta(days=2), cancelled_at=now - timedelta(days=1))

        assert find_expiring_subscriptions(db, 7, now) == []

    def test_deleted_and_inactive_members_excluded(self, db, make, now):
        tenant = make.tenant()
        plan = make.plan(tenant)
        make.subscription(make.member(tenant, deleted_at=now), plan, created_at=now,
                          end_date=now + timedelta(days=2))
        make.subscription(make.member(tenant, is_active=False), plan, created_at=now,
                          end_date=now + timedelta(days=2))

        assert count_expiring_members(db, 7, now) == 0

    def test_zero_day_window_is_empty(self, db, make, now):
        tenant = make.tenant()
        make.subscription(make.member(tenant), make.plan(tenant), created_at=now, end_date=now)

        assert find_expiring_subscriptions(db, 0, now) == []

    def test_soonest_first(self, db, make, now):
        tenant = make.tenant()
        plan = make.plan(tenant)
        late = make.subscription(make.member(tenant), plan, created_at=now, end_date=now + timedelta(days=6))
        soon = make.subscription(make.member(tenant), plan, created_at=now, end_date=now + timedelta(days=1))

        assert ids(find_expiring_subscriptions(db, 7, now)) == [soon.id, late.id]

    def test_scope_filters_tenant_and_branch(self, db, make, now):
        gym = make.tenant()
        other = make.tenant(name="Other Gym")
        north, south = make.branch(gym, "North"), make.branch(gym, "South")
        in_north = make.subscription(make.member(gym, north), make.plan(gym), created_at=now,
                                     end_date=now + timedelta(days=3))
        make.subscription(make.member(gym, south), make.plan(gym), created_at=now,
                          end_date=now + timedelta(days=3))
        make.subscription(make.member(other), make.plan(other), created_at=now, end_date=now + timedelta(days=3))

        assert len(find_expiring_subscriptions(db, 7, now, Scope(tenant_id=gym.id))) == 2
        assert ids(find_expiring_subscriptions(db, 7, now, Scope(tenant_id=gym.id, branch_ids={north.id}))) \
            == [in_north.id]
        assert find_expiring_subscriptions(db, 7, now, Scope(tenant_id=gym.id, branch_ids=set())) == []


class TestExpired:
    def test_within_days_limits_lookback(self, db, make, now):
        tenant = make.tenant()
        plan = make.plan(tenant)
        recent = make.subscription(make.member(tenant), plan, created_at=now - timedelta(days=31),
                                   end_date=now - timedelta(hours=5))
        make.subscription(make.member(tenant), plan, created_at=now - timedelta(days=40),
                          end_date=now - timedelta(days=10))

        assert ids(find_expired_members(db, now, within_days=1)) == [recent.id]
        assert len(find_expired_members(db, now)) == 2


class TestLatestPerCustomer:
    def test_input_order_does_not_matter(self):
        t = datetime(2024, 3, 1)
        rows = [
            SimpleNamespace(id=3, customer_id=1, created_at=t),
            SimpleNamespace(id=7, customer_id=1, created_at=t),
            SimpleNamespace(id=9, customer_id=1, created_at=t - timedelta(days=1)),
            SimpleNamespace(id=4, customer_id=2, created_at=t),
        ]

        forward = {s.customer_id: s.id for s in latest_per_customer(rows)}
        backward = {s.customer_id: s.id for s in latest_per_customer(reversed(rows))}

        assert forward == backward == {1: 7, 2: 4}


class TestUrgency:
    @pytest.mark.parametrize("days_left,expected", [(0, "critical"), (1, "critical"), (2, "high"),
                                                    (3, "high"), (4, "medium"), (30, "medium")])
    def test_buckets(self, days_left, expected):
        assert urgency_for(days_left) == expected

    def test_days_until_rounds_up(self):
        now = datetime(2024, 6, 1, 12)
        assert days_until(datetime(2024, 6, 1, 13), now) == 1
        assert days_until(datetime(2024, 6, 3, 12), now) == 2


class TestOverview:
    def test_pagination_and_summary(self, db, make, now):
        tenant = make.tenant()
        plan = make.plan(tenant)
        for offset in (1, 2, 5):
            make.subscription(make.member(tenant), plan, created_at=now, end_date=now + timedelta(days=offset))
        owner = make.staff("OWNER", tenant=tenant)
        scope = Scope(tenant_id=tenant.id)

        first = build_expiring_overview(db, 7, now, scope, owner.role, page=1, limit=2)
        second = build_expiring_overview(db, 7, now, scope, owner.role, page=2, limit=2)

        assert first["pagination"] == {"page": 1, "limit": 2, "total": 3, "pages": 2,
                                       "has_next": True, "has_prev": False}
        assert [i["urgency"] for i in first["subscriptions"]] == ["critical", "high"]
        assert [i["days_until_expiry"] for i in second["subscriptions"]] == [5]
        assert first["summary"]["total_expiring"] == 3
        assert first["subscriptions"][0]["plan"]["name"] == "Monthly"
        assert first["grouped_by_tenant"] is None

    def test_super_admin_groups_by_tenant(self, db, make, now):
        for name in ("Alpha Gym", "Beta Gym"):
            tenant = make.tenant(name=name)
            make.subscription(make.member(tenant), make.plan(tenant), created_at=now,
                              end_date=now + timedelta(days=2))

        overview = build_expiring_overview(db, 7, now, Scope(), "SUPER_ADMIN")

        assert set(overview["grouped_by_tenant"]) == {"Alpha Gym", "Beta Gym"}
        assert overview["access_summary"]["can_filter_by_tenant"] is True

    def test_limit_is_capped(self, db, make, now):
        overview = build_expiring_overview(db, 7, now, Scope(tenant_id=make.tenant().id), "OWNER", limit=1000)
        assert overview["pagination"]["limit"] == 100
        assert overview["pagination"]["pages"] == 0
