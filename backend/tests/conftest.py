"""
Shared fixtures: in-memory SQLite schema, fake Redis, captured emails
and small row factories.
"""
import os

# must be set before gymdesk.core.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DEBUG"] = "false"
os.environ["AES_KEY"] = "11" * 32
os.environ["RESEND_API_KEY"] = "re_test_key"
os.environ["RESEND_FROM_EMAIL"] = "noreply@gymdesk.ph"

from datetime import datetime, timedelta

import fakeredis
import fakeredis.aioredis
import pytest
import resend
from fastapi.testclient import TestClient

import gymdesk.models  # noqa: F401
from gymdesk.core import api_keys
from gymdesk.core.database import Base, SessionLocal, engine
from gymdesk.core.rate_limit import limiter
from gymdesk.models import (
    Branch,
    Card,
    CustomerSubscription,
    InventoryCard,
    MembershipPlan,
    Tenant,
    Terminal,
    User,
    UserBranch,
)
from gymdesk.services.auth_service import hash_password

STAFF_PASSWORD = "Str0ng!pass"


@pytest.fixture(autouse=True)
def schema():
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def sent_emails(monkeypatch):
    """Every Resend call is captured here instead of leaving the process"""
    sent = []

    def fake_send(params):
        sent.append(params)
        return {"id": f"msg_{len(sent)}"}

    monkeypatch.setattr(resend.Emails, "send", fake_send)
    monkeypatch.setattr(api_keys, "_load_setting", lambda: None)
    return sent


@pytest.fixture
def redis_server():
    return fakeredis.FakeServer()


@pytest.fixture
def client(redis_server):
    from gymdesk.core.redis import get_redis
    from gymdesk.main import app

    async def fake_redis():
        return fakeredis.aioredis.FakeRedis(server=redis_server, decode_responses=True)

    app.dependency_overrides[get_redis] = fake_redis
    limiter.reset()
    with TestClient(app, base_url="https://testserver") as c:
        yield c
    app.dependency_overrides.clear()


def login(client, email: str, password: str = STAFF_PASSWORD) -> dict:
    """Log in and return the CSRF header for mutating requests"""
    res = client.post("/api/auth/login", json={"email": email, "password": password})
    assert res.status_code == 200, res.text
    return {"X-CSRF-Token": res.json()["csrf_token"]}


class Factory:
    """Row builders; every call commits"""

    def __init__(self, db):
        self.db = db
        self._seq = 0

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    def _save(self, obj):
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def tenant(self, name="Iron Works Gym", **kw) -> Tenant:
        n = self._next()
        kw.setdefault("slug", f"tenant-{n}")
        return self._save(Tenant(name=name, **kw))

    def branch(self, tenant, name=None, **kw) -> Branch:
        n = self._next()
        return self._save(Branch(tenant_id=tenant.id, name=name or f"Branch {n}", **kw))

    def plan(self, tenant, name="Monthly", price=1500, duration=30, **kw) -> MembershipPlan:
        return self._save(MembershipPlan(tenant_id=tenant.id, name=name, price=price, duration=duration, **kw))

    def member(self, tenant, branch=None, email=None, **kw) -> User:
        n = self._next()
        kw.setdefault("first_name", "Member")
        kw.setdefault("last_name", str(n))
        return self._save(User(
            tenant_id=tenant.id,
            branch_id=branch.id if branch else None,
            email=email if email is not None else f"member{n}@irongym.ph",
            role="GYM_MEMBER",
            **kw,
        ))

    def staff(self, role, tenant=None, branches=(), email=None) -> User:
        n = self._next()
        user = self._save(User(
            tenant_id=tenant.id if tenant else None,
            email=email or f"{role.lower()}{n}@irongym.ph",
            password_hash=hash_password(STAFF_PASSWORD),
            first_name=role.title(),
            last_name=str(n),
            role=role,
        ))
        for branch in branches:
            self.grant(user, branch)
        return user

    def grant(self, user, branch, access_level="STAFF_ACCESS") -> UserBranch:
        return self._save(UserBranch(user_id=user.id, branch_id=branch.id, access_level=access_level))

    def subscription(self, member, plan, end_date, created_at, status="ACTIVE", start_date=None,
                     branch=None, **kw) -> CustomerSubscription:
        return self._save(CustomerSubscription(
            tenant_id=member.tenant_id,
            branch_id=branch.id if branch else member.branch_id,
            customer_id=member.id,
            membership_plan_id=plan.id,
            status=status,
            start_date=start_date or end_date - timedelta(days=30),
            end_date=end_date,
            price=plan.price,
            created_at=created_at,
            **kw,
        ))

    def inventory(self, uid, branch, status="AVAILABLE") -> InventoryCard:
        return self._save(InventoryCard(uid=uid, allocated_branch_id=branch.id, status=status))

    def card(self, uid, branch, member=None, active=True, card_type="MONTHLY") -> Card:
        return self._save(Card(
            uid=uid,
            branch_id=branch.id,
            member_id=member.id if member else None,
            active=active,
            card_type=card_type,
        ))

    def terminal(self, branch, secret="kiosk-secret", name="Front desk") -> Terminal:
        return self._save(Terminal(
            branch_id=branch.id,
            name=name,
            secret_hash=hash_password(secret),
            is_active=True,
        ))


@pytest.fixture
def make(db):
    return Factory(db)


@pytest.fixture
def now():
    return datetime(2024, 6, 1, 12, 0, 0)
