import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from functools import lru_cache  # noqa: E402
from types import SimpleNamespace  # noqa: E402
from unittest.mock import patch  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from cloud_ide.main import app  # noqa: E402
from cloud_ide.core.database import Base, get_db  # noqa: E402
from cloud_ide.core.security import create_access_token, get_password_hash  # noqa: E402
from cloud_ide.models import Collaboration, Collaborator, File, Folder, User  # noqa: E402
from cloud_ide.utils.storage import FOLDER_PLACEHOLDER, StorageError  # noqa: E402

# In-memory SQLite shared across the test client's threads
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

DEFAULT_PASSWORD = "TestPassword123!"


@lru_cache
def _password_hash(password: str) -> str:
    return get_password_hash(password)


class FakeStorage:
    """Dict-backed stand-in for the storage bucket."""

    def __init__(self):
        self.objects = {}
        self.failing = set()
        # Number of further successful stores before "store" starts failing
        self.store_budget = None

    def _check(self, op):
        if op in self.failing:
            raise StorageError(f"{op} failed")

    def store_object(self, key, data, content_type=None):
        self._check("store")
        if self.store_budget is not None:
            if self.store_budget <= 0:
                raise StorageError("store failed")
            self.store_budget -= 1
        self.objects[key] = data
        return key

    def read_object(self, key):
        self._check("read")
        if key not in self.objects:
            raise StorageError(f"'{key}' not found")
        return self.objects[key]

    def remove_object(self, key):
        self._check("remove")
        self.objects.pop(key, None)

    def create_folder_placeholder(self, prefix):
        return self.store_object(f"{prefix}{FOLDER_PLACEHOLDER}", b"", "text/plain")


@pytest.fixture(scope="function")
def db_session():
    """Fresh database for every test"""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def storage():
    fake = FakeStorage()
    with patch("cloud_ide.api.v1.folder.create_folder_placeholder", side_effect=fake.create_folder_placeholder), \
            patch("cloud_ide.api.v1.file.store_object", side_effect=fake.store_object), \
            patch("cloud_ide.api.v1.file.read_object", side_effect=fake.read_object), \
            patch("cloud_ide.api.v1.file.remove_object", side_effect=fake.remove_object), \
            patch("cloud_ide.api.v1.ai.read_object", side_effect=fake.read_object):
        yield fake


@pytest.fixture
def mailer():
    """Mock the outgoing emails so tests never reach SendGrid"""
    with patch("cloud_ide.services.collaboration.send_collaboration_email") as mock_invite:
        with patch("cloud_ide.services.collaboration.send_change_notification_email") as mock_notify:
            mock_invite.return_value = True
            mock_notify.return_value = True
            yield SimpleNamespace(invite=mock_invite, notify=mock_notify)


@pytest.fixture(scope="function")
def client(db_session, storage, mailer):
    """Test client bound to the test database session"""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def create_test_user(db_session):
    """Factory fixture creating users"""
    def _create_user(email="testuser@example.com", name="Test User", password=DEFAULT_PASSWORD):
        user = User(name=name, email=email, passwordhash=_password_hash(password))
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _create_user


@pytest.fixture
def auth_headers():
    def _headers(user):
        token = create_access_token(data={"sub": user.email})
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def make_folder(db_session):
    def _make_folder(name, owner, parent=None):
        folder = Folder(
            name=name,
            owner_id=owner.id,
            parent_id=parent.id if parent else None,
            path=(parent.path if parent else f"{owner.id}/") + name + "/",
        )
        db_session.add(folder)
        db_session.commit()
        db_session.refresh(folder)
        return folder

    return _make_folder


@pytest.fixture
def make_file(db_session, storage):
    def _make_file(name, owner, parent=None, content=b""):
        key = (parent.path if parent else f"{owner.id}/") + name
        storage.objects[key] = content
        file = File(
            name=name,
            owner_id=owner.id,
            parent_id=parent.id if parent else None,
            storage_key=key,
            size=len(content),
            content_type="text/plain",
            path=key,
        )
        db_session.add(file)
        db_session.commit()
        db_session.refresh(file)
        return file

    return _make_file


@pytest.fixture
def make_collaboration(db_session):
    """Attach a collaboration to ``project`` listing users and/or bare emails."""
    def _make_collaboration(project, owner, members=(), is_active=True):
        entries = []
        for member in members:
            if isinstance(member, str):
                entries.append(Collaborator(user_id=None, email=member, role="editor"))
            else:
                entries.append(Collaborator(user_id=member.id, email=member.email, role="editor"))
        collaboration = Collaboration(
            project_id=project.id,
            owner_id=owner.id,
            project_name=project.name,
            collaborators=entries,
            is_active=is_active,
        )
        db_session.add(collaboration)
        db_session.commit()
        db_session.refresh(collaboration)
        return collaboration

    return _make_collaboration


@pytest.fixture
def project_tree(create_test_user, make_folder, make_file, make_collaboration):
    """alice owns F1 > F2 > doc.txt; bob collaborates on F1; carol is unrelated."""
    alice = create_test_user(email="alice@example.com", name="Alice")
    bob = create_test_user(email="bob@example.com", name="Bob")
    carol = create_test_user(email="carol@example.com", name="Carol")

    f1 = make_folder("F1", alice)
    f2 = make_folder("F2", alice, parent=f1)
    doc = make_file("doc.txt", alice, parent=f2, content=b"hello world")
    collaboration = make_collaboration(f1, alice, members=[bob])

    return SimpleNamespace(
        alice=alice, bob=bob, carol=carol, f1=f1, f2=f2, doc=doc,
        collaboration=collaboration,
    )
