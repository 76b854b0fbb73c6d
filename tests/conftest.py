import os
import tempfile

# Settings are read at import time
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["ENCRYPTION_KEY"] = "test-encryption-key"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DOCUMENT_STORAGE_PATH"] = tempfile.mkdtemp(prefix="emhr-test-docs-")

import pytest
from datetime import date, time
from typing import Callable, Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from emhr.main import app
from emhr.core.config import settings
from emhr.core.security import get_password_hash
from emhr.infrastructure.database import Base, get_db, import_models
from emhr.domain.auth.models import User, UserType, UserSupervisor
from emhr.domain.clients.models import Client, ClientProvider, CareTeamRole
from emhr.domain.scheduling.models import CalendarCategory, CategoryType
from emhr.domain.settings.service import seed_default_settings

TEST_PASSWORD = "Password123!"
API = settings.API_V1_STR

import_models()


@pytest.fixture(scope="function")
def engine():
    """Fresh in-memory database for each test."""
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture(scope="function")
def db_session(session_factory) -> Generator[Session, None, None]:
    """Session for arranging and inspecting test data."""
    session = session_factory()
    seed_default_settings(session)
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function", autouse=True)
def override_database(session_factory, db_session) -> Generator[None, None, None]:
    """Route the app's get_db dependency to the test database."""

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client() -> TestClient:
    """Anonymous test client."""
    return TestClient(app)


def create_user(db: Session, username: str, **fields) -> User:
    fields.setdefault("fname", username.capitalize())
    fields.setdefault("lname", "Tester")
    user = User(username=username, password_hash=get_password_hash(TEST_PASSWORD), **fields)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture(scope="function")
def login() -> Callable[[User], TestClient]:
    """Build a test client holding a session cookie for ``user``."""

    def _login(user: User) -> TestClient:
        test_client = TestClient(app)
        response = test_client.post(
            f"{API}/auth/login",
            json={"username": user.username, "password": TEST_PASSWORD}
        )
        assert response.status_code == 200, response.text
        return test_client

    return _login


# Users

@pytest.fixture(scope="function")
def admin_user(db_session: Session) -> User:
    return create_user(db_session, "admin", user_type=UserType.ADMIN, fname="Ada", lname="Admin")


@pytest.fixture(scope="function")
def clinician_user(db_session: Session) -> User:
    return create_user(db_session, "clinician", is_provider=True, fname="Carla", lname="Clinician")


@pytest.fixture(scope="function")
def supervisor_user(db_session: Session) -> User:
    return create_user(
        db_session, "supervisor", is_provider=True, is_supervisor=True, fname="Sam", lname="Supervisor"
    )


@pytest.fixture(scope="function")
def intern_user(db_session: Session, supervisor_user: User) -> User:
    """Provider under active supervision of ``supervisor_user``."""
    intern = create_user(db_session, "intern", is_provider=True, fname="Ivy", lname="Intern")
    db_session.add(UserSupervisor(user_id=intern.id, supervisor_id=supervisor_user.id, started_at=date.today()))
    db_session.commit()
    return intern


@pytest.fixture(scope="function")
def social_worker_user(db_session: Session) -> User:
    return create_user(
        db_session, "socialworker", user_type=UserType.SOCIAL_WORKER, is_social_worker=True,
        fname="Sol", lname="Worker"
    )


@pytest.fixture(scope="function")
def outsider_user(db_session: Session) -> User:
    """Provider with no care team assignments."""
    return create_user(db_session, "outsider", is_provider=True, fname="Otto", lname="Outsider")


# Logged-in clients

@pytest.fixture(scope="function")
def admin_client(login, admin_user) -> TestClient:
    return login(admin_user)


@pytest.fixture(scope="function")
def clinician_client(login, clinician_user) -> TestClient:
    return login(clinician_user)


@pytest.fixture(scope="function")
def supervisor_client(login, supervisor_user) -> TestClient:
    return login(supervisor_user)


@pytest.fixture(scope="function")
def intern_client(login, intern_user) -> TestClient:
    return login(intern_user)


@pytest.fixture(scope="function")
def social_worker_client(login, social_worker_user) -> TestClient:
    return login(social_worker_user)


@pytest.fixture(scope="function")
def outsider_client(login, outsider_user) -> TestClient:
    return login(outsider_user)


# Clinical data

@pytest.fixture(scope="function")
def sample_client(
    db_session: Session,
    admin_user: User,
    clinician_user: User,
    intern_user: User,
    social_worker_user: User
) -> Client:
    """Client with the clinician, the intern and the social worker on the care team."""
    record = Client(
        fname="John",
        lname="Doe",
        dob=date(1985, 6, 15),
        sex="male",
        phone_cell="555-0100",
        email="john.doe@clinic.org",
        created_by=admin_user.id,
    )
    db_session.add(record)
    db_session.commit()
    db_session.refresh(record)

    for provider, role in (
        (clinician_user, CareTeamRole.PRIMARY_CLINICIAN),
        (intern_user, CareTeamRole.CLINICIAN),
        (social_worker_user, CareTeamRole.SOCIAL_WORKER),
    ):
        db_session.add(ClientProvider(
            client_id=record.id,
            provider_id=provider.id,
            role=role,
            assigned_by=admin_user.id,
        ))
    db_session.commit()
    return record


@pytest.fixture(scope="function")
def session_category(db_session: Session) -> CalendarCategory:
    category = CalendarCategory(
        name="Therapy Session", category_type=CategoryType.CLIENT.value, default_duration=50
    )
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category


@pytest.fixture(scope="function")
def availability_category(db_session: Session) -> CalendarCategory:
    category = CalendarCategory(
        name="Available", category_type=CategoryType.AVAILABILITY.value, default_duration=60, is_billable=False
    )
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category


@pytest.fixture(scope="function")
def appointment_payload(sample_client, clinician_user, session_category) -> dict:
    return {
        "patientId": sample_client.id,
        "providerId": clinician_user.id,
        "categoryId": session_category.id,
        "eventDate": date.today().isoformat(),
        "startTime": time(10, 0).isoformat(),
    }


@pytest.fixture(scope="function")
def progress_note_payload(sample_client) -> dict:
    return {
        "patientId": sample_client.id,
        "noteType": "progress",
        "serviceDate": date.today().isoformat(),
        "behaviorProblem": "Client reports increased anxiety at work.",
        "intervention": "CBT thought record introduced.",
        "response": "Client engaged and completed an example.",
        "plan": "Practice thought records daily.",
    }


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "auth: mark test as authentication related"
    )
    config.addinivalue_line(
        "markers", "clients: mark test as client records related"
    )
    config.addinivalue_line(
        "markers", "scheduling: mark test as scheduling related"
    )
    config.addinivalue_line(
        "markers", "notes: mark test as clinical notes related"
    )
    config.addinivalue_line(
        "markers", "billing: mark test as billing related"
    )
    config.addinivalue_line(
        "markers", "admin: mark test as administration related"
    )
    config.addinivalue_line(
        "markers", "audit: mark test as audit logging related"
    )
