import pytest

from gymdesk.core.exceptions import Conflict, NotFound, PlanNotFound
from gymdesk.services import plan_service
from gymdesk.services.subscription_service import renew_membership


class TestPlanCatalogue:
    def test_create_and_list_active_first(self, db, make):
        tenant = make.tenant()
        annual = plan_service.create_plan(db, tenant.id, "Annual", price=15000, duration=365)
        day = plan_service.create_plan(db, tenant.id, "Day Pass", price=150, duration=1, is_active=False)

        assert [p.id for p in plan_service.list_plans(db, tenant.id)] == [annual.id, day.id]
        assert [p.id for p in plan_service.list_plans(db, tenant.id, active_only=True)] == [annual.id]

    def test_name_unique_within_tenant_only(self, db, make):
        a, b = make.tenant(), make.tenant()
        plan_service.create_plan(db, a.id, "Monthly", price=1500, duration=30)

        with pytest.raises(Conflict):
            plan_service.create_plan(db, a.id, "Monthly", price=1200, duration=30)
        assert plan_service.create_plan(db, b.id, "Monthly", price=1200, duration=30).tenant_id == b.id

    def test_unknown_tenant(self, db):
        with pytest.raises(NotFound):
            plan_service.create_plan(db, 999, "Monthly", price=1500, duration=30)

    def test_update_is_partial(self, db, make):
        tenant = make.tenant()
        plan = make.plan(tenant, description="Gym floor")

        updated = plan_service.update_plan(db, plan.id, {"price": 1800, "description": None})

        assert updated.price == 1800
        assert updated.duration == 30
        assert updated.description == "Gym floor"

    def test_rename_onto_existing_name(self, db, make):
        tenant = make.tenant()
        make.plan(tenant, name="Monthly")
        quarterly = make.plan(tenant, name="Quarterly", duration=90)

        with pytest.raises(Conflict):
            plan_service.update_plan(db, quarterly.id, {"name": "Monthly"})
        assert plan_service.update_plan(db, quarterly.id, {"name": "Quarterly"}).name == "Quarterly"

    def test_other_tenant_plan_not_found(self, db, make):
        plan = make.plan(make.tenant())
        with pytest.raises(NotFound):
            plan_service.get_plan(db, plan.id, tenant_id=make.tenant().id)

    def test_deactivated_plan_cannot_be_renewed_into(self, db, make, now):
        tenant = make.tenant()
        plan = make.plan(tenant)
        member = make.member(tenant)

        assert plan_service.toggle_plan_status(db, plan.id).is_active is False
        with pytest.raises(PlanNotFound):
            renew_membership(db, member.id, plan.id, now)

        assert plan_service.toggle_plan_status(db, plan.id).is_active is True
        assert renew_membership(db, member.id, plan.id, now).status == "ACTIVE"
