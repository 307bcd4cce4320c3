import pytest
import os
from datetime import date, datetime, timedelta, timezone
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["AUTH_JWT_SECRET"] = "test-jwt-secret"
os.environ["AUTH_JWT_AUDIENCE"] = "authenticated"

from jose import jwt
from fastapi.testclient import TestClient
from synergy_ems.database import Base, get_db
from synergy_ems.main import app

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def upcoming_monday(weeks_ahead: int = 2) -> date:
    """A Monday at least `weeks_ahead` weeks out, so requests are never in the past."""
    d = date.today() + timedelta(weeks=weeks_ahead)
    return d + timedelta(days=(7 - d.weekday()) % 7)


@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Create tables once for the whole test session."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture(scope="function")
def db_session():
    """Get a clean database session for each test function with rollback safety."""
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()

@pytest.fixture(scope="function")
def monday():
    return upcoming_monday()

@pytest.fixture(scope="function")
def leave_types(db_session):
    """Annual (20 days) and Sick (10 days) leave types."""
    from synergy_ems.models.leave_type import LeaveType

    annual = LeaveType(name="Annual Leave", color="#22c55e", default_days=20.0)
    sick = LeaveType(name="Sick Leave", color="#ef4444", default_days=10.0)
    db_session.add_all([annual, sick])
    db_session.commit()
    return {"annual": annual, "sick": sick}

def _make_employee(db_session, name, email, role, auth_user_id):
    from synergy_ems.models.employee import Employee

    employee = Employee(name=name, email=email, role=role, auth_user_id=auth_user_id, department="Engineering")
    db_session.add(employee)
    db_session.commit()
    return employee

@pytest.fixture(scope="function")
def employee(db_session):
    # Lowercase on purpose: roles are stored however the admin typed them
    return _make_employee(db_session, "Ada Employee", "ada@synergy.io", "employee", "auth-ada")

@pytest.fixture(scope="function")
def other_employee(db_session):
    return _make_employee(db_session, "Ben Employee", "ben@synergy.io", "Employee", "auth-ben")

@pytest.fixture(scope="function")
def manager(db_session):
    return _make_employee(db_session, "Mia Manager", "mia@synergy.io", "MANAGER", "auth-mia")

@pytest.fixture(scope="function")
def admin(db_session):
    return _make_employee(db_session, "Sam Admin", "sam@synergy.io", " admin ", "auth-sam")

@pytest.fixture(scope="function")
def balances(db_session, employee, leave_types, monday):
    """Balances for the year the test requests fall in."""
    from synergy_ems.services.leave_service import LeaveService

    return LeaveService(db_session).initialize_balances(employee.id, monday.year)

@pytest.fixture(scope="function")
def get_token():
    """Mint an access token the way the identity provider does."""
    def _get_token(employee, expires_in=timedelta(hours=1), secret="test-jwt-secret", audience="authenticated"):
        now = datetime.now(timezone.utc)
        return jwt.encode(
            {
                "sub": employee.auth_user_id,
                "aud": audience,
                "email": employee.email,
                "iat": int(now.timestamp()),
                "exp": int((now + expires_in).timestamp()),
            },
            secret,
            algorithm="HS256",
        )
    return _get_token

@pytest.fixture(scope="function")
def auth_headers(get_token):
    def _auth_headers(employee):
        return {"Authorization": f"Bearer {get_token(employee)}"}
    return _auth_headers

@pytest.fixture(scope="function")
def client(db_session):
    """Get a TestClient that uses the test database session via dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
