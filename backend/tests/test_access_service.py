import base64
from datetime import timedelta

import pytest

from gymdesk.models import AccessEvent, Card, InventoryCard, PendingMemberAssignment
from gymdesk.services.access_service import (
    ALLOW,
    ASSIGNED,
    DENY_DISABLED,
    DENY_EXPIRED,
    DENY_GYM_MISMATCH,
    DENY_UNKNOWN,
    check_access,
    decode_card_uid,
)
from gymdesk.services.card_assignment_service import create_pending_assignment


@pytest.fixture
def kiosk(make):
    tenant = make.tenant()
    branch = make.branch(tenant, "Makati")
    return tenant, branch, make.terminal(branch), make.plan(tenant)


def last_event(db):
    return db.query(AccessEvent).order_by(AccessEvent.id.desc()).first()


class TestDecodeCardUid:
    def test_base64_digits(self):
        assert decode_card_uid(base64.b64encode(b"0012345678").decode()) == "0012345678"

    def test_plain_uid_kept(self):
        assert decode_card_uid("04A1B2C3") == "04A1B2C3"

    def test_base64_of_non_digits_kept_raw(self):
        raw = base64.b64encode(b"hello").decode()
        assert decode_card_uid(raw) == raw


class TestKnownCard:
    def test_active_member_allowed(self, db, make, kiosk, now):
        tenant, branch, terminal, plan = kiosk
        member = make.member(tenant, branch, first_name="Ana", last_name="Reyes")
        sub = make.subscription(member, plan, created_at=now - timedelta(days=3), end_date=now + timedelta(days=27))
        make.card("111", branch, member)

        result = check_access(db, terminal, "111", now)

        assert result == {"result": ALLOW, "member_name": "Ana Reyes", "expires_at": sub.end_date.isoformat()}
        assert last_event(db).event_type == "ACCESS_ALLOW"

    def test_lapsed_member_denied(self, db, make, kiosk, now):
        tenant, branch, terminal, plan = kiosk
        member = make.member(tenant, branch)
        make.subscription(member, plan, created_at=now - timedelta(days=40), end_date=now - timedelta(days=10))
        make.card("111", branch, member)

        assert check_access(db, terminal, "111", now)["result"] == DENY_EXPIRED
        event = last_event(db)
        assert event.event_type == "ACCESS_DENY_EXPIRED"
        assert event.details == {"member_state": "EXPIRED"}

    def test_cancelled_member_denied_even_before_end_date(self, db, make, kiosk, now):
        tenant, branch, terminal, plan = kiosk
        member = make.member(tenant, branch)
        make.subscription(member, plan, created_at=now - timedelta(days=3), end_date=now + timedelta(days=27),
                          status="CANCELLED")
        make.card("111", branch, member)

        assert check_access(db, terminal, "111", now)["result"] == DENY_EXPIRED

    def test_cancelled_at_on_active_row_denied(self, db, make, kiosk, now):
        tenant, branch, terminal, plan = kiosk
        member = make.member(tenant, branch)
        make.subscription(member, plan, created_at=now - timedelta(days=3), end_date=now + timedelta(days=27),
                          cancelled_at=now - timedelta(days=1))
        make.card("111", branch, member)

        assert check_access(db, terminal, "111", now)["result"] == DENY_EXPIRED
        assert last_event(db).details == {"member_state": "CANCELLED"}

    def test_other_branch_card(self, db, make, kiosk, now):
        tenant, branch, terminal, plan = kiosk
        elsewhere = make.branch(tenant, "Taguig")
        make.card("222", elsewhere, make.member(tenant, elsewhere))

        assert check_access(db, terminal, "222", now)["result"] == DENY_GYM_MISMATCH

    def test_disabled_card(self, db, make, kiosk, now):
        tenant, branch, terminal, _ = kiosk
        make.card("333", branch, make.member(tenant, branch), active=False)

        assert check_access(db, terminal, "333", now)["result"] == DENY_DISABLED


class TestUnknownCard:
    def test_no_pending_assignment(self, db, make, kiosk, now):
        _, _, terminal, _ = kiosk
        assert check_access(db, terminal, "999", now) == {"result": DENY_UNKNOWN, "member_name": None,
                                                           "expires_at": None}
        assert last_event(db).event_type == "ACCESS_DENY_UNKNOWN"

    def test_pending_assignment_binds_card(self, db, make, kiosk, now):
        tenant, branch, terminal, plan = kiosk
        member = make.member(tenant, branch, first_name="Ben", last_name="Cruz")
        make.subscription(member, plan, created_at=now, end_date=now + timedelta(days=30))
        make.inventory("444", branch)
        create_pending_assignment(db, branch.id, member.id, now)

        result = check_access(db, terminal, "444", now + timedelta(minutes=1))

        assert result["result"] == ASSIGNED
        assert result["member_name"] == "Ben Cruz"
        card = db.query(Card).filter(Card.uid == "444").one()
        assert card.member_id == member.id
        assert db.query(InventoryCard).filter(InventoryCard.uid == "444").one().status == "ASSIGNED"
        assert db.query(PendingMemberAssignment).count() == 0
        assert last_event(db).event_type == "CARD_ASSIGNED"

        assert check_access(db, terminal, "444", now + timedelta(minutes=2))["result"] == ALLOW

    def test_expired_pending_assignment(self, db, make, kiosk, now):
        tenant, branch, terminal, _ = kiosk
        make.inventory("444", branch)
        create_pending_assignment(db, branch.id, make.member(tenant, branch).id, now, ttl_minutes=5)

        assert check_access(db, terminal, "444", now + timedelta(minutes=6))["result"] == DENY_UNKNOWN
        assert db.query(PendingMemberAssignment).count() == 0
        assert last_event(db).event_type == "PENDING_ASSIGNMENT_EXPIRED"

    def test_inventory_of_other_branch(self, db, make, kiosk, now):
        tenant, branch, terminal, _ = kiosk
        make.inventory("555", make.branch(tenant, "Taguig"))
        create_pending_assignment(db, branch.id, make.member(tenant, branch).id, now)

        assert check_access(db, terminal, "555", now)["result"] == DENY_UNKNOWN
        assert last_event(db).event_type == "INVENTORY_MISMATCH"
        assert db.query(PendingMemberAssignment).count() == 1

    def test_replace_switches_old_card_off(self, db, make, kiosk, now):
        tenant, branch, terminal, plan = kiosk
        member = make.member(tenant, branch)
        make.subscription(member, plan, created_at=now, end_date=now + timedelta(days=30))
        make.inventory("old", branch, status="ASSIGNED")
        make.card("old", branch, member)
        make.inventory("new", branch)
        create_pending_assignment(db, branch.id, member.id, now, purpose="REPLACE", old_card_uid="old")

        assert check_access(db, terminal, "new", now)["result"] == ASSIGNED

        db.expire_all()
        assert db.query(Card).filter(Card.uid == "old").one().active is False
        assert db.query(InventoryCard).filter(InventoryCard.uid == "old").one().status == "DISABLED"
        event = last_event(db)
        assert event.event_type == "CARD_REPLACED"
        assert event.details == {"old_card_uid": "old"}
        assert check_access(db, terminal, "old", now)["result"] == DENY_DISABLED
