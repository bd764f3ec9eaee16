from collections.abc import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import wcp_api.models  # noqa: F401
from wcp_api.core.config import get_settings
from wcp_api.db.session import get_db
from wcp_api.main import app
from wcp_api.models.base import Base
from wcp_api.models.enums import GlobalRole
from wcp_api.models.user import User
from wcp_api.models.workspace import Workspace, WorkspaceMember
from wcp_api.services.authorization import WorkspaceAccess, evaluate_workspace_access
from wcp_api.services.local_auth import hash_password
from wcp_api.services.workspaces import create_workspace

DEFAULT_PASSWORD = "StrongPassw0rd!"


@pytest.fixture(autouse=True)
def _test_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    # 降低口令哈希迭代次数，避免测试耗时。
    monkeypatch.setenv("WCP_AUTH_PASSWORD_HASH_ITERATIONS", "1000")
    monkeypatch.setenv("WCP_AUTH_JWT_SECRET", "test-access-secret-key-at-least-32-bytes")
    monkeypatch.setenv("WCP_AUTH_REFRESH_SECRET", "test-refresh-secret-key-at-least-32-bytes")
    monkeypatch.setenv("WCP_APP_ENV", "test")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sqlite_engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(sqlite_engine) -> sessionmaker:
    return sessionmaker(bind=sqlite_engine, autoflush=False, autocommit=False, class_=Session)


@pytest.fixture
def db_session(session_factory) -> Generator[Session, None, None]:
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def api_client(session_factory) -> Generator[TestClient, None, None]:
    def override_get_db() -> Generator[Session, None, None]:
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides.clear()
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session: Session) -> Callable[..., User]:
    def _make(
        name: str,
        *,
        email: str | None = None,
        global_role: str = GlobalRole.USER,
        is_active: bool = True,
        password: str = DEFAULT_PASSWORD,
    ) -> User:
        user = User(
            name=name,
            email=email or f"{name.lower()}@example.com",
            password_hash=hash_password(password),
            global_role=global_role,
            is_active=is_active,
        )
        db_session.add(user)
        db_session.flush()
        return user

    return _make


@pytest.fixture
def make_workspace(db_session: Session) -> Callable[..., Workspace]:
    def _make(owner: User, name: str = "Docs") -> Workspace:
        return create_workspace(db_session, creator_id=owner.id, name=name)

    return _make


@pytest.fixture
def add_member(db_session: Session) -> Callable[..., WorkspaceMember]:
    def _add(workspace: Workspace, user: User, role: str) -> WorkspaceMember:
        member = WorkspaceMember(workspace_id=workspace.id, user_id=user.id, role=role)
        db_session.add(member)
        db_session.flush()
        return member

    return _add


@pytest.fixture
def access_for(db_session: Session) -> Callable[..., WorkspaceAccess]:
    def _access(workspace: Workspace, user: User) -> WorkspaceAccess:
        return evaluate_workspace_access(db_session, user_id=user.id, workspace_id=workspace.id)

    return _access
