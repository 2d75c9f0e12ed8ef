"""
Shared fixtures: fresh in-memory SQLite per test, TestClient with get_db / settings / token
service overridden, and small factories for users, organizations and content.
Requires: fastapi, httpx (install with: pip install -e ".[test]").
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from navigator.config import Settings
from navigator.database import enable_sqlite_foreign_keys, get_db, init_sqlite_db
from navigator.main import app
from navigator.api.deps import get_settings, get_token_service
from navigator.models import Article, Form, Module, Organization, User
from navigator.services.auth import TokenService, hash_password

TEST_PASSWORD = "testpass123"


@pytest.fixture
def test_settings():
    # low bcrypt cost keeps the suite fast
    return Settings(
        database_url="sqlite://",
        secret_key="test-secret-key",
        bcrypt_rounds=4,
        max_upload_bytes=2 * 1024 * 1024,
    )


@pytest.fixture
def tokens(test_settings):
    return TokenService(test_settings)


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(eng)
    init_sqlite_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory, test_settings, tokens):
    """TestClient against the in-memory database."""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_token_service] = lambda: tokens
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db, None)
        app.dependency_overrides.pop(get_settings, None)
        app.dependency_overrides.pop(get_token_service, None)


@pytest.fixture
def make_org(db):
    def _make(name: str) -> Organization:
        org = Organization(name=name)
        db.add(org)
        db.commit()
        db.refresh(org)
        return org

    return _make


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(
        email: str | None = None,
        role: str = "employer",
        organization: Organization | None = None,
        name: str = "Test User",
        password: str = TEST_PASSWORD,
    ) -> User:
        counter["n"] += 1
        user = User(
            name=name,
            email=email or f"user{counter['n']}@example.com",
            password_hash=hash_password(password, rounds=4),
            role=role,
            organization_id=organization.id if organization else None,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def auth_headers(tokens):
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {tokens.issue(user.id, user.email, user.role)}"}

    return _headers


@pytest.fixture
def admin_headers(make_user, auth_headers):
    return auth_headers(make_user(email="admin@example.com", role="admin"))


@pytest.fixture
def make_module(db):
    def _make(number: int = 1, name: str = "Getting started") -> Module:
        module = Module(module_number=number, module_name=name)
        db.add(module)
        db.commit()
        db.refresh(module)
        return module

    return _make


@pytest.fixture
def make_article(db):
    def _make(module: Module, position: int, name: str | None = None) -> Article:
        article = Article(
            module_id=module.id,
            article_name=name or f"Article {position}",
            content="Some **content**",
            position=position,
        )
        db.add(article)
        db.commit()
        db.refresh(article)
        return article

    return _make


@pytest.fixture
def make_form(db):
    def _make(module: Module, position: int = 1, name: str = "Worksheet") -> Form:
        form = Form(
            module_id=module.id,
            form_name=name,
            questions=[
                {"id": "q1", "text": "Why hire fairly?", "type": "textarea", "required": True},
                {"id": "q2", "text": "Pick all", "type": "checkbox", "options": ["a", "b"], "required": False},
            ],
            position=position,
        )
        db.add(form)
        db.commit()
        db.refresh(form)
        return form

    return _make
