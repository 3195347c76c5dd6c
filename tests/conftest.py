import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-church-api")

import pytest
from datetime import datetime, timedelta, UTC
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from jose import jwt

from church_api.database import get_db
from church_api.models.base import Base
from church_api.config import settings
from church_api.core.permission_catalog import default_permissions_for_role, with_floor
# Import all model classes to ensure they're registered with SQLAlchemy
from church_api.models.church import Church
from church_api.models.branch import Branch
from church_api.models.position import Position
from church_api.models.member import Member
from church_api.models.permission import Permission
from church_api.models.member_context import ActorContext, TargetMember
from church_api.models.role import MemberRole
# Import FastAPI app AFTER model imports
from church_api.main import app

# Test database (SQLite in-memory for speed)
# Use StaticPool to ensure all connections share the same in-memory database
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """FastAPI test client with test database"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def create_test_token(user_id: str = "test-user-123", expired: bool = False) -> str:
    """
    Generate valid JWT token for testing.

    Args:
        user_id: Auth user ID to embed in 'sub' claim
        expired: If True, create expired token

    Returns:
        Encoded JWT token
    """
    if expired:
        exp = datetime.now(UTC) - timedelta(minutes=5)
    else:
        exp = datetime.now(UTC) + timedelta(minutes=15)

    payload = {"sub": user_id, "exp": exp, "iat": datetime.now(UTC)}

    token = jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")
    return token


def headers_for(member: Member) -> dict:
    """Authorization headers for a member created by make_member"""
    return {"Authorization": f"Bearer {create_test_token(user_id=member.auth_user_id)}"}


def make_member(
    db,
    branch: Branch,
    role: MemberRole = MemberRole.MEMBER,
    name: str = "Membro",
    permissions: set[str] | None = None,
    **fields,
) -> Member:
    """
    Persist a member with materialized permissions.

    Defaults to the role's default permission set (plus members_view).
    """
    slug = name.lower().replace(" ", "-")
    member = Member(
        branch_id=branch.id,
        name=name,
        role=role,
        email=fields.pop("email", f"{slug}@example.com"),
        auth_user_id=fields.pop("auth_user_id", f"auth-{slug}"),
        **fields,
    )
    db.add(member)
    db.flush()
    names = with_floor(default_permissions_for_role(role)) if permissions is None else permissions
    db.add_all([Permission(member_id=member.id, type=p) for p in names])
    db.commit()
    db.refresh(member)
    return member


def actor(role: MemberRole, member_id: int = 1, branch_id: int = 10, church_id: int = 100, permissions=()):
    """In-memory actor snapshot for unit tests"""
    return ActorContext(
        member_id=member_id,
        role=role,
        permissions=frozenset(permissions),
        branch_id=branch_id,
        church_id=church_id,
    )


def target(role: MemberRole, member_id: int = 2, branch_id: int = 10, church_id: int = 100):
    """In-memory target snapshot for unit tests"""
    return TargetMember(id=member_id, role=role, branch_id=branch_id, church_id=church_id)


@pytest.fixture
def church(db_session):
    church = Church(name="Igreja Central")
    db_session.add(church)
    db_session.commit()
    return church


@pytest.fixture
def other_church(db_session):
    church = Church(name="Igreja Vizinha")
    db_session.add(church)
    db_session.commit()
    return church


@pytest.fixture
def main_branch(db_session, church):
    branch = Branch(church_id=church.id, name="Sede", is_main_branch=True)
    db_session.add(branch)
    db_session.commit()
    return branch


@pytest.fixture
def second_branch(db_session, church):
    branch = Branch(church_id=church.id, name="Filial Norte")
    db_session.add(branch)
    db_session.commit()
    return branch


@pytest.fixture
def foreign_branch(db_session, other_church):
    branch = Branch(church_id=other_church.id, name="Sede Vizinha", is_main_branch=True)
    db_session.add(branch)
    db_session.commit()
    return branch


@pytest.fixture
def position(db_session, church):
    position = Position(church_id=church.id, name="Diácono")
    db_session.add(position)
    db_session.commit()
    return position


@pytest.fixture
def admin_geral(db_session, main_branch):
    return make_member(db_session, main_branch, MemberRole.ADMINGERAL, name="Admin Geral")


@pytest.fixture
def admin_filial(db_session, main_branch):
    return make_member(db_session, main_branch, MemberRole.ADMINFILIAL, name="Admin Filial")


@pytest.fixture
def coordinator(db_session, main_branch):
    return make_member(db_session, main_branch, MemberRole.COORDINATOR, name="Coordenador")


@pytest.fixture
def plain_member(db_session, main_branch):
    return make_member(db_session, main_branch, MemberRole.MEMBER, name="Membro Comum")


@pytest.fixture
def second_branch_member(db_session, second_branch):
    return make_member(db_session, second_branch, MemberRole.MEMBER, name="Membro Norte")


@pytest.fixture
def foreign_member(db_session, foreign_branch):
    return make_member(db_session, foreign_branch, MemberRole.MEMBER, name="Membro Vizinho")
