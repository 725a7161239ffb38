"""
Shared pytest fixtures for the AgroCoop test suite.

Provides:
    - engine: SQLite file database in tmp_path with all tables created
    - db: Session bound to that engine
    - storage: BlobStore rooted in tmp_path
    - company / other_company: tenants
    - admin, pm, u1, u2, accountant: users of ``company`` (u1/u2 are Members)
    - outsider: Admin of ``other_company``
    - client: TestClient with get_db and get_storage overridden
    - auth_headers: helper building a bearer header for a user
"""
import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, create_engine

from agrocoop.api import deps
from agrocoop.core.security import create_access_token, get_password_hash
from agrocoop.db.session import get_db, init_db
from agrocoop.main import app
from agrocoop.models.company import Company
from agrocoop.models.resource import Resource, ResourceCategory
from agrocoop.models.user import User, UserRole
from agrocoop.services.projects import create_project
from agrocoop.services.storage import BlobStore

PASSWORD = "secret123"
# Hash once; bcrypt is slow enough to matter across the suite
PASSWORD_HASH = get_password_hash(PASSWORD)


# ── DB & storage fixtures ────────────────────────────────────────────────


@pytest.fixture()
def engine(tmp_path):
    eng = create_engine(
        f"sqlite:///{tmp_path / 'agrocoop-test.db'}",
        connect_args={"check_same_thread": False},
    )
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def db(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture()
def storage(tmp_path):
    return BlobStore(str(tmp_path / "blobs"), "http://testserver/files")


# ── Tenants & users ──────────────────────────────────────────────────────


def _make_user(db, company, email, name, role):
    user = User(
        email=email,
        password=PASSWORD_HASH,
        display_name=name,
        role=role,
        company_id=company.id,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def company(db):
    c = Company(name="Green Valley Cooperative")
    db.add(c)
    db.commit()
    db.refresh(c)
    return c


@pytest.fixture()
def other_company(db):
    c = Company(name="Hill Farmers Union")
    db.add(c)
    db.commit()
    db.refresh(c)
    return c


@pytest.fixture()
def admin(db, company):
    return _make_user(db, company, "admin@greenvalley.com", "Ama Admin", UserRole.ADMIN)


@pytest.fixture()
def pm(db, company):
    return _make_user(db, company, "pm@greenvalley.com", "Kofi Manager", UserRole.PROJECT_MANAGER)


@pytest.fixture()
def u1(db, company):
    return _make_user(db, company, "u1@greenvalley.com", "Esi Member", UserRole.MEMBER)


@pytest.fixture()
def u2(db, company):
    return _make_user(db, company, "u2@greenvalley.com", "Yaw Member", UserRole.MEMBER)


@pytest.fixture()
def accountant(db, company):
    return _make_user(db, company, "books@greenvalley.com", "Abena Accountant", UserRole.ACCOUNTANT)


@pytest.fixture()
def outsider(db, other_company):
    return _make_user(db, other_company, "admin@hillfarmers.com", "Other Admin", UserRole.ADMIN)


# ── Convenience fixtures ─────────────────────────────────────────────────


@pytest.fixture()
def project_id(db, pm):
    """A project with no tasks, created by the project manager."""
    result = create_project(db, pm, {
        "title": "Maize Expansion",
        "description": "Plant 20 hectares of maize",
        "status": "Planning",
        "team": [pm.id],
    })
    assert result.success, result.error
    return result.project_id


@pytest.fixture()
def seed(db, company):
    """A ledger resource with 10 kg in stock."""
    resource = Resource(
        company_id=company.id,
        name="Maize Seed",
        category=ResourceCategory.INPUTS,
        quantity=10,
        unit="kg",
    )
    db.add(resource)
    db.commit()
    db.refresh(resource)
    return resource


# ── HTTP fixtures ────────────────────────────────────────────────────────


@pytest.fixture()
def client(engine, storage):
    def override_get_db():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[deps.get_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers():
    def build(user):
        return {"Authorization": f"Bearer {create_access_token(subject=user.email)}"}
    return build
