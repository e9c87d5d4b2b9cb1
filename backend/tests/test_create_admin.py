from gymdesk.create_admin import create_super_admin, main
from gymdesk.models import User
from gymdesk.services.auth_service import authenticate


class TestCreateAdmin:
    def test_creates_once(self, db):
        user = create_super_admin(db, "Root@GymDesk.ph", "Str0ng!pass")

        assert user.role == "SUPER_ADMIN"
        assert user.tenant_id is None
        assert authenticate(db, "root@gymdesk.ph", "Str0ng!pass").id == user.id
        assert create_super_admin(db, "root@gymdesk.ph", "other") is None

    def test_email_held_by_member(self, db, make):
        make.member(make.tenant(), email="root@gymdesk.ph")
        assert create_super_admin(db, "Root@GymDesk.ph", "Str0ng!pass") is None
        assert db.query(User).filter(User.role == "SUPER_ADMIN").count() == 0

    def test_main_requires_password(self, monkeypatch, capsys):
        monkeypatch.delenv("ADMIN_PASSWORD", raising=False)
        assert main(["root@gymdesk.ph"]) == 1
        assert "Password required" in capsys.readouterr().out

    def test_main_from_args(self, db):
        assert main(["ops@gymdesk.ph", "Str0ng!pass"]) == 0
        db.expire_all()
        assert db.query(User).filter(User.email == "ops@gymdesk.ph").one().role == "SUPER_ADMIN"
