"""
Shared pytest fixtures for the Bumasys test suite.

Provides:
    - store: fresh in-memory datastore (function-scoped)
    - services: service registry wired to ``store``
    - org / other_org / department: seeded organization structure
    - make_staff / staff: staff members inside ``org`` / ``department``
    - project / make_task / task: seeded project and tasks
    - app / client: Flask app + test client sharing ``store``
    - auth_headers: Bearer header for a freshly registered user
"""

import itertools

import pytest

from bumasys import create_app
from bumasys.services import build_services
from bumasys.store import MemoryStore

TEST_JWT_SECRET = "testing-jwt-secret-0123456789abcdef"


# ── Store & services ─────────────────────────────────────────────────────


@pytest.fixture()
def store():
    return MemoryStore()


@pytest.fixture()
def services(store):
    return build_services(store, jwt_secret=TEST_JWT_SECRET, bcrypt_rounds=4)


# ── Organization structure ───────────────────────────────────────────────


@pytest.fixture()
def org(services):
    return services.organizations.create({"name": "Acme", "description": "Main tenant"})


@pytest.fixture()
def other_org(services):
    return services.organizations.create({"name": "Globex"})


@pytest.fixture()
def department(services, org):
    return services.departments.create({"name": "Engineering", "organization_id": org["id"]})


@pytest.fixture()
def make_staff(services, org, department):
    """Factory: create a staff member in ``org``/``department`` with a unique email."""
    counter = itertools.count(1)

    def _make(**overrides):
        n = next(counter)
        data = {
            "first_name": "Staff",
            "last_name": f"Member{n}",
            "email": f"staff{n}@example.com",
            "role": "Engineer",
            "organization_id": org["id"],
            "department_id": department["id"],
        }
        data.update(overrides)
        return services.staff.create(data)

    return _make


@pytest.fixture()
def staff(make_staff):
    return make_staff(first_name="Ada", last_name="Lovelace", email="ada@example.com")


# ── Projects & tasks ─────────────────────────────────────────────────────


@pytest.fixture()
def project(services):
    return services.projects.create({"name": "Apollo"})


@pytest.fixture()
def make_task(services, project):
    """Factory: create a task inside ``project``."""

    def _make(**overrides):
        data = {"name": "Task", "project_id": project["id"]}
        data.update(overrides)
        return services.tasks.create(data)

    return _make


@pytest.fixture()
def task(make_task):
    return make_task(name="Build launch pad")


# ── HTTP ─────────────────────────────────────────────────────────────────


@pytest.fixture()
def app(store):
    """Flask app in testing mode over the same store the services fixture uses."""
    return create_app("testing", store=store)


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def auth_headers(client):
    res = client.post("/api/v1/auth/register", json={
        "email": "admin@example.com", "password": "S3cret-pass", "first_name": "Admin",
    })
    assert res.status_code == 201
    return {"Authorization": f"Bearer {res.get_json()['token']}"}
