from gymdesk.services.branch_scope import can_access_branch, resolve_branch_scope


class TestResolveBranchScope:
    def test_super_admin_sees_everything(self, db, make):
        admin = make.staff("SUPER_ADMIN")
        scope = resolve_branch_scope(db, admin)
        assert scope.tenant_id is None
        assert scope.branch_ids is None

    def test_super_admin_filters(self, db, make):
        admin = make.staff("SUPER_ADMIN")
        gym = make.tenant()
        branch = make.branch(gym)
        scope = resolve_branch_scope(db, admin, tenant_id=gym.id, branch_id=branch.id)
        assert scope.tenant_id == gym.id
        assert scope.branch_ids == {branch.id}
        assert [b.id for b in scope.available_branches] == [branch.id]

    def test_owner_gets_whole_tenant(self, db, make):
        gym = make.tenant()
        make.branch(gym, "North")
        make.branch(gym, "South")
        owner = make.staff("OWNER", tenant=gym)
        scope = resolve_branch_scope(db, owner, tenant_id=999)
        assert scope.tenant_id == gym.id
        assert scope.branch_ids is None
        assert [b.name for b in scope.available_branches] == ["North", "South"]

    def test_manager_outside_grant_sees_nothing(self, db, make):
        gym = make.tenant()
        north, south = make.branch(gym, "North"), make.branch(gym, "South")
        manager = make.staff("MANAGER", tenant=gym, branches=[north])

        assert resolve_branch_scope(db, manager).branch_ids == {north.id}
        assert resolve_branch_scope(db, manager, branch_id=south.id).is_empty

    def test_staff_outside_grant_falls_back(self, db, make):
        gym = make.tenant()
        north, south = make.branch(gym, "North"), make.branch(gym, "South")
        staff = make.staff("STAFF", tenant=gym, branches=[north])

        assert resolve_branch_scope(db, staff, branch_id=south.id).branch_ids == {north.id}

    def test_staff_without_grants_sees_nothing(self, db, make):
        staff = make.staff("STAFF", tenant=make.tenant())
        assert resolve_branch_scope(db, staff).is_empty


class TestCanAccessBranch:
    def test_roles(self, db, make):
        gym = make.tenant()
        other = make.tenant(name="Other Gym")
        north, south = make.branch(gym, "North"), make.branch(gym, "South")
        foreign = make.branch(other)
        owner = make.staff("OWNER", tenant=gym)
        staff = make.staff("STAFF", tenant=gym, branches=[north])

        assert can_access_branch(db, make.staff("SUPER_ADMIN"), foreign.id)
        assert can_access_branch(db, owner, south.id)
        assert not can_access_branch(db, owner, foreign.id)
        assert can_access_branch(db, staff, north.id)
        assert not can_access_branch(db, staff, south.id)
        assert not can_access_branch(db, owner, 4040)
