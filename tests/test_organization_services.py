"""
tests/test_organization_services.py: Organizations, departments and staff.

Covers:
    1. Organization name uniqueness and root pointer ownership
    2. Partial updates (absent / None / blank semantics)
    3. Department tree: scope, self-parent and loop rejection, manager scope
    4. Staff: email uniqueness, department scope, supervision loops
    5. Blocked deletes and soft-reference clearing on delete
    6. Stats helpers
"""

import pytest

from bumasys.core.exceptions import (
    CircularReferenceError,
    ConflictError,
    DependencyExistsError,
    InvalidReferenceError,
    NotFoundError,
    ValidationError,
)


# ═════════════════════════════════════════════════════════════════════════════
# Organizations
# ═════════════════════════════════════════════════════════════════════════════


class TestOrganizationCreate:
    def test_create_assigns_id_and_unset_roots(self, services):
        org = services.organizations.create({
            "name": "Initech", "root_department_id": "ignored", "root_staff_id": "ignored",
        })
        assert org["id"]
        assert org["root_department_id"] is None
        assert org["root_staff_id"] is None
        assert services.organizations.find_by_id(org["id"])["name"] == "Initech"

    def test_duplicate_name_rejected(self, services, org):
        with pytest.raises(ConflictError, match="Organization name already in use"):
            services.organizations.create({"name": "Acme"})

    def test_name_comparison_is_case_sensitive(self, services, org):
        assert services.organizations.create({"name": "ACME"})["name"] == "ACME"

    def test_blank_name_rejected(self, services):
        with pytest.raises(ValidationError, match="name is required"):
            services.organizations.create({"name": "   "})

    def test_returned_record_is_a_copy(self, services, org):
        org["name"] = "Mutated"
        assert services.organizations.find_by_id(org["id"])["name"] == "Acme"


class TestOrganizationUpdate:
    def test_unknown_id(self, services):
        with pytest.raises(NotFoundError, match="Organization not found"):
            services.organizations.update({"id": "missing", "name": "X"})

    def test_keeping_own_name_is_allowed(self, services, org):
        assert services.organizations.update({"id": org["id"], "name": "Acme"})["name"] == "Acme"

    def test_renaming_onto_another_name_rejected(self, services, org, other_org):
        with pytest.raises(ConflictError):
            services.organizations.update({"id": other_org["id"], "name": "Acme"})

    def test_absent_fields_unchanged(self, services, org):
        updated = services.organizations.update({"id": org["id"]})
        assert updated["description"] == "Main tenant"

    def test_none_clears_optional_field(self, services, org):
        assert services.organizations.update({"id": org["id"], "description": None})["description"] is None

    def test_none_on_required_field_is_ignored(self, services, org):
        assert services.organizations.update({"id": org["id"], "name": None})["name"] == "Acme"

    def test_root_department_must_belong_to_org(self, services, org, other_org):
        foreign = services.departments.create({"name": "Sales", "organization_id": other_org["id"]})
        with pytest.raises(InvalidReferenceError,
                           match="Department not found or does not belong to this organization"):
            services.organizations.update({"id": org["id"], "root_department_id": foreign["id"]})

    def test_root_staff_must_belong_to_org(self, services, org):
        with pytest.raises(InvalidReferenceError,
                           match="Staff member not found or does not belong to this organization"):
            services.organizations.update({"id": org["id"], "root_staff_id": "ghost"})

    def test_roots_can_be_set_and_cleared(self, services, org, department, staff):
        updated = services.organizations.update({
            "id": org["id"], "root_department_id": department["id"], "root_staff_id": staff["id"],
        })
        assert updated["root_department_id"] == department["id"]
        assert updated["root_staff_id"] == staff["id"]
        cleared = services.organizations.update({"id": org["id"], "root_staff_id": None})
        assert cleared["root_staff_id"] is None
        assert cleared["root_department_id"] == department["id"]


class TestOrganizationDelete:
    def test_unknown_id_returns_false(self, services):
        assert services.organizations.delete("missing") is False

    def test_blocked_by_departments(self, services, org, department):
        with pytest.raises(DependencyExistsError):
            services.organizations.delete(org["id"])
        assert services.organizations.find_by_id(org["id"]) is not None

    def test_empty_organization_deleted(self, services, other_org, store):
        persisted = store.persist_count
        assert services.organizations.delete(other_org["id"]) is True
        assert services.organizations.find_by_id(other_org["id"]) is None
        assert store.persist_count == persisted + 1

    def test_stats(self, services, org, department, staff):
        stats = {o["name"]: o for o in services.organizations.get_with_stats()}
        assert stats["Acme"]["department_count"] == 1
        assert stats["Acme"]["staff_count"] == 1


# ═════════════════════════════════════════════════════════════════════════════
# Departments
# ═════════════════════════════════════════════════════════════════════════════


class TestDepartmentCreate:
    def test_unknown_organization(self, services):
        with pytest.raises(InvalidReferenceError, match="Organization not found"):
            services.departments.create({"name": "Ops", "organization_id": "nope"})

    def test_missing_parent(self, services, org):
        with pytest.raises(InvalidReferenceError, match="Parent department not found"):
            services.departments.create({
                "name": "Ops", "organization_id": org["id"], "parent_department_id": "nope",
            })

    def test_parent_from_other_organization(self, services, org, other_org):
        foreign = services.departments.create({"name": "Sales", "organization_id": other_org["id"]})
        with pytest.raises(InvalidReferenceError,
                           match="Parent department must belong to the same organization"):
            services.departments.create({
                "name": "Ops", "organization_id": org["id"], "parent_department_id": foreign["id"],
            })

    def test_manager_from_other_organization(self, services, org, other_org, staff):
        with pytest.raises(InvalidReferenceError,
                           match="Manager not found or does not belong to this organization"):
            services.departments.create({
                "name": "Sales", "organization_id": other_org["id"], "manager_id": staff["id"],
            })

    def test_child_department(self, services, org, department, staff):
        child = services.departments.create({
            "name": "Platform", "organization_id": org["id"],
            "parent_department_id": department["id"], "manager_id": staff["id"],
        })
        assert [d["id"] for d in services.departments.get_children(department["id"])] == [child["id"]]

    def test_get_by_organization(self, services, org, other_org, department):
        services.departments.create({"name": "Sales", "organization_id": other_org["id"]})
        assert [d["id"] for d in services.departments.get_by_organization(org["id"])] == [department["id"]]


class TestDepartmentUpdate:
    @pytest.fixture()
    def chain(self, services, org):
        """a <- b <- c"""
        a = services.departments.create({"name": "A", "organization_id": org["id"]})
        b = services.departments.create({"name": "B", "organization_id": org["id"],
                                         "parent_department_id": a["id"]})
        c = services.departments.create({"name": "C", "organization_id": org["id"],
                                         "parent_department_id": b["id"]})
        return a, b, c

    def test_self_parent_rejected(self, services, department):
        with pytest.raises(CircularReferenceError, match="Department cannot be its own parent"):
            services.departments.update({"id": department["id"],
                                         "parent_department_id": department["id"]})

    def test_loop_rejected(self, services, chain):
        a, _, c = chain
        with pytest.raises(CircularReferenceError,
                           match="Update would create circular reference in department hierarchy"):
            services.departments.update({"id": a["id"], "parent_department_id": c["id"]})

    def test_reparent_within_tree_allowed(self, services, chain):
        a, _, c = chain
        assert services.departments.update(
            {"id": c["id"], "parent_department_id": a["id"]})["parent_department_id"] == a["id"]

    def test_organization_is_fixed(self, services, department, other_org, org):
        updated = services.departments.update({"id": department["id"],
                                               "organization_id": other_org["id"]})
        assert updated["organization_id"] == org["id"]

    def test_parent_can_be_cleared(self, services, chain):
        _, b, _ = chain
        assert services.departments.update(
            {"id": b["id"], "parent_department_id": None})["parent_department_id"] is None


class TestDepartmentDelete:
    def test_blocked_by_child(self, services, org, department):
        services.departments.create({"name": "Child", "organization_id": org["id"],
                                     "parent_department_id": department["id"]})
        with pytest.raises(DependencyExistsError):
            services.departments.delete(department["id"])

    def test_blocked_by_staff(self, services, department, staff):
        with pytest.raises(DependencyExistsError):
            services.departments.delete(department["id"])

    def test_delete_clears_root_department(self, services, org):
        ops = services.departments.create({"name": "Ops", "organization_id": org["id"]})
        services.organizations.update({"id": org["id"], "root_department_id": ops["id"]})
        assert services.departments.delete(ops["id"]) is True
        assert services.organizations.find_by_id(org["id"])["root_department_id"] is None

    def test_stats(self, services, org, department, staff):
        [stats] = services.departments.get_with_stats(org["id"])
        assert stats["staff_count"] == 1
        assert stats["child_department_count"] == 0


# ═════════════════════════════════════════════════════════════════════════════
# Staff
# ═════════════════════════════════════════════════════════════════════════════


class TestStaffCreate:
    def test_duplicate_email_rejected(self, make_staff, staff):
        with pytest.raises(ConflictError, match="Email already in use"):
            make_staff(email="ada@example.com")

    def test_email_comparison_is_case_sensitive(self, make_staff, staff):
        assert make_staff(email="ADA@example.com")["email"] == "ADA@example.com"

    def test_required_fields(self, make_staff):
        with pytest.raises(ValidationError, match="role is required"):
            make_staff(role="")

    def test_unknown_organization(self, make_staff):
        with pytest.raises(InvalidReferenceError, match="Organization not found"):
            make_staff(organization_id="nope")

    def test_department_from_other_organization(self, services, make_staff, other_org):
        foreign = services.departments.create({"name": "Sales", "organization_id": other_org["id"]})
        with pytest.raises(InvalidReferenceError,
                           match="Department not found or does not belong to the specified organization"):
            make_staff(department_id=foreign["id"])

    def test_supervisor_from_other_organization(self, services, make_staff, other_org):
        sales = services.departments.create({"name": "Sales", "organization_id": other_org["id"]})
        outsider = make_staff(organization_id=other_org["id"], department_id=sales["id"])
        with pytest.raises(InvalidReferenceError,
                           match="Supervisor not found or does not belong to the same organization"):
            make_staff(supervisor_id=outsider["id"])

    def test_lookups(self, services, make_staff, staff, department):
        report = make_staff(supervisor_id=staff["id"])
        assert services.staff.find_by_email("ada@example.com")["id"] == staff["id"]
        assert [s["id"] for s in services.staff.get_subordinates(staff["id"])] == [report["id"]]
        assert len(services.staff.get_by_department(department["id"])) == 2
        assert len(services.staff.get_by_organization(staff["organization_id"])) == 2
        assert services.staff.get_by_organization("ghost") == []


class TestStaffUpdate:
    def test_self_supervision_rejected(self, services, staff):
        with pytest.raises(CircularReferenceError, match="Staff member cannot supervise themselves"):
            services.staff.update({"id": staff["id"], "supervisor_id": staff["id"]})

    def test_supervision_loop_rejected(self, services, make_staff, staff):
        report = make_staff(supervisor_id=staff["id"])
        with pytest.raises(CircularReferenceError,
                           match="Update would create circular supervision hierarchy"):
            services.staff.update({"id": staff["id"], "supervisor_id": report["id"]})

    def test_department_from_other_organization(self, services, staff, other_org):
        foreign = services.departments.create({"name": "Sales", "organization_id": other_org["id"]})
        with pytest.raises(InvalidReferenceError,
                           match="Department not found or does not belong to the same organization"):
            services.staff.update({"id": staff["id"], "department_id": foreign["id"]})

    def test_email_taken_by_someone_else(self, services, make_staff, staff):
        other = make_staff()
        with pytest.raises(ConflictError):
            services.staff.update({"id": other["id"], "email": "ada@example.com"})

    def test_organization_is_fixed(self, services, staff, other_org, org):
        updated = services.staff.update({"id": staff["id"], "organization_id": other_org["id"]})
        assert updated["organization_id"] == org["id"]

    def test_blank_required_value_rejected(self, services, staff):
        with pytest.raises(ValidationError, match="last_name is required"):
            services.staff.update({"id": staff["id"], "last_name": ""})

    def test_optional_phone_set_and_cleared(self, services, staff):
        assert services.staff.update({"id": staff["id"], "phone": "555-0100"})["phone"] == "555-0100"
        assert services.staff.update({"id": staff["id"], "phone": None})["phone"] is None


class TestStaffDelete:
    def test_blocked_by_subordinates(self, services, make_staff, staff):
        make_staff(supervisor_id=staff["id"])
        with pytest.raises(DependencyExistsError):
            services.staff.delete(staff["id"])

    def test_blocked_by_managed_department(self, services, department, staff):
        services.departments.update({"id": department["id"], "manager_id": staff["id"]})
        with pytest.raises(DependencyExistsError):
            services.staff.delete(staff["id"])

    def test_delete_clears_root_staff(self, services, org, staff):
        services.organizations.update({"id": org["id"], "root_staff_id": staff["id"]})
        assert services.staff.delete(staff["id"]) is True
        assert services.organizations.find_by_id(org["id"])["root_staff_id"] is None

    def test_stats(self, services, make_staff, staff, org):
        make_staff(supervisor_id=staff["id"])
        stats = {s["id"]: s for s in services.staff.get_with_stats(org["id"])}
        assert stats[staff["id"]]["subordinate_count"] == 1
