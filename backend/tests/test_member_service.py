from datetime import timedelta

import pytest

from gymdesk.core.exceptions import DuplicateMember, GymDeskError, InvalidMemberTransition, PlanNotFound
from gymdesk.models import Card, CustomerSubscription, EmailLog, MemberAuditLog
from gymdesk.services.audit_service import get_audit_trail
from gymdesk.services.member_service import (
    activate_member,
    cancel_member,
    create_member,
    restore_member,
    soft_delete_member,
)
from gymdesk.services.member_state import MemberState, get_member_state


def actions(db, member_id):
    return [row.action for row in get_audit_trail(db, member_id)]


class TestCreateMember:
    def test_with_plan_starts_subscription_and_welcomes(self, db, make, now, sent_emails):
        tenant = make.tenant(name="Iron Works Gym")
        branch = make.branch(tenant)
        plan = make.plan(tenant, duration=90)

        member = create_member(db, tenant.id, "Ana", "Reyes", now, email="Ana@Example.PH",
                               branch_id=branch.id, plan_id=plan.id)

        assert member.email == "ana@example.ph"
        sub = db.query(CustomerSubscription).filter(CustomerSubscription.customer_id == member.id).one()
        assert sub.end_date == now + timedelta(days=90)
        assert set(actions(db, member.id)) == {"ACCOUNT_CREATED", "SUBSCRIPTION_STARTED"}
        assert sent_emails[0]["to"] == ["ana@example.ph"]
        assert "Iron Works Gym" in sent_emails[0]["subject"]
        assert db.query(EmailLog).filter(EmailLog.email_type == "welcome").count() == 1

    def test_welcome_disabled(self, db, make, now, sent_emails):
        tenant = make.tenant(welcome_email_enabled=False)
        member = create_member(db, tenant.id, "Ben", "Cruz", now, email="ben@example.ph")
        assert get_member_state(db, member.id, now)[1] == MemberState.NO_SUBSCRIPTION
        assert sent_emails == []

    def test_duplicate_email(self, db, make, now):
        tenant = make.tenant()
        make.member(tenant, email="dup@example.ph")
        with pytest.raises(DuplicateMember):
            create_member(db, tenant.id, "Dup", "Licate", now, email="DUP@example.ph")

    def test_plan_must_belong_to_tenant(self, db, make, now):
        tenant = make.tenant()
        foreign = make.plan(make.tenant(name="Other Gym"))
        with pytest.raises(PlanNotFound):
            create_member(db, tenant.id, "Cara", "Diaz", now, plan_id=foreign.id)


class TestMemberTransitions:
    def test_cancel_then_activate_reopens_row(self, db, make, now):
        tenant = make.tenant()
        member = make.member(tenant)
        sub = make.subscription(member, make.plan(tenant), created_at=now - timedelta(days=5),
                                end_date=now + timedelta(days=25))

        cancel_member(db, member.id, now, reason="NON_PAYMENT", notes="card declined")
        db.refresh(sub)
        assert sub.status == "CANCELLED"
        assert sub.cancellation_reason == "NON_PAYMENT"
        assert get_member_state(db, member.id, now)[1] == MemberState.CANCELLED

        activate_member(db, member.id, now, reason="PAYMENT_RECEIVED")
        db.refresh(sub)
        assert sub.status == "ACTIVE"
        assert sub.cancelled_at is None
        assert get_member_state(db, member.id, now)[1] == MemberState.ACTIVE
        assert set(actions(db, member.id)) == {"ACCOUNT_ACTIVATED", "ACCOUNT_DEACTIVATED"}

    def test_activate_active_member_rejected(self, db, make, now):
        tenant = make.tenant()
        member = make.member(tenant)
        make.subscription(member, make.plan(tenant), created_at=now, end_date=now + timedelta(days=30))
        with pytest.raises(InvalidMemberTransition):
            activate_member(db, member.id, now)

    def test_cancel_without_subscription_rejected(self, db, make, now):
        with pytest.raises(InvalidMemberTransition):
            cancel_member(db, make.member(make.tenant()).id, now)

    def test_unknown_reason_rejected(self, db, make, now):
        member = make.member(make.tenant())
        with pytest.raises(GymDeskError):
            cancel_member(db, member.id, now, reason="BORED")

    def test_delete_disables_cards_and_restore(self, db, make, now):
        tenant = make.tenant()
        branch = make.branch(tenant)
        member = make.member(tenant, branch)
        make.card("1234567890", branch, member)

        soft_delete_member(db, member.id, now, reason="DUPLICATE_ACCOUNT", performed_by=None)
        assert get_member_state(db, member.id, now)[1] == MemberState.DELETED
        assert db.query(Card).filter(Card.uid == "1234567890").one().active is False

        with pytest.raises(InvalidMemberTransition):
            soft_delete_member(db, member.id, now)

        restored = restore_member(db, member.id, now)
        assert restored.deleted_at is None
        assert restored.is_active is True
        audit = db.query(MemberAuditLog).filter(MemberAuditLog.action == "ACCOUNT_RESTORED").one()
        assert audit.new_state == "NO_SUBSCRIPTION"

    def test_restore_not_deleted_rejected(self, db, make, now):
        with pytest.raises(InvalidMemberTransition):
            restore_member(db, make.member(make.tenant()).id, now)
