import pytest
import os
from datetime import date
from types import SimpleNamespace
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

from app.database import Base, get_db
from app.dependencies import get_today
from app.main import app
from app.models.department import Department
from app.models.employee import Employee
from app.models.leave_balance import LeaveBalance
from app.models.leave_policy import LeavePolicy, LeaveType
from app.models.user import User, UserRole
from app.services.leave_events import LeaveEventDispatcher
from app.services.leave_workflow import LeaveWorkflowEngine
from fastapi.testclient import TestClient

# Fixed "today" so notice periods and balance years are deterministic
TODAY = date(2025, 3, 3)

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture(scope="function")
def db_session():
    """Fresh schema and session for each test function."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)

@pytest.fixture(scope="function")
def people(db_session):
    """Engineering department: an HR officer, a line manager, an admin and two reports."""
    dept = Department(name="Engineering", description="Product engineering")
    db_session.add(dept)
    db_session.flush()

    def _employee(code, name, position, role=None, manager=None):
        emp = Employee(
            name=name,
            employee_code=code,
            department_id=dept.id,
            position=position,
            manager_id=manager.id if manager else None,
            joining_date=date(2022, 1, 10),
            email=f"{code.lower()}@absentra.test",
        )
        db_session.add(emp)
        db_session.flush()
        if role is not None:
            db_session.add(User(username=code.lower(), employee_id=emp.id, role=role, is_active=True))
        return emp

    admin = _employee("EMP001", "Admin User", "System Administrator", UserRole.ADMIN)
    hr = _employee("EMP002", "Sarah Johnson", "HR Manager", UserRole.HR)
    manager = _employee("EMP003", "Mike Chen", "Engineering Lead", UserRole.LINE_MANAGER)
    employee = _employee("EMP004", "Emily Davis", "Software Engineer", UserRole.EMPLOYEE, manager=manager)
    contractor = _employee("EMP005", "Omar Haddad", "Contract Engineer", manager=manager)
    db_session.commit()

    return SimpleNamespace(
        department=dept, admin=admin, hr=hr, manager=manager,
        employee=employee, contractor=contractor,
    )

@pytest.fixture(scope="function")
def policies(db_session):
    """Casual, sick and paid policies as configured by the administrators."""
    casual = LeavePolicy(
        leave_type=LeaveType.CASUAL, annual_limit=12, min_days_notice=2, max_consecutive_days=5,
        carry_forward_allowed=True, carry_forward_limit=5, is_active=True,
    )
    sick = LeavePolicy(
        leave_type=LeaveType.SICK, annual_limit=10, min_days_notice=0, max_consecutive_days=10,
        carry_forward_allowed=False, requires_medical_certificate=True, is_active=True,
    )
    paid = LeavePolicy(
        leave_type=LeaveType.PAID, annual_limit=20, min_days_notice=7, max_consecutive_days=15,
        carry_forward_allowed=True, carry_forward_limit=10, is_active=True,
    )
    db_session.add_all([casual, sick, paid])
    db_session.commit()
    return SimpleNamespace(casual=casual, sick=sick, paid=paid)

@pytest.fixture(scope="function")
def balances(db_session, people, policies):
    """Current-year balances; the employee has 10 casual days left."""
    def _balance(emp, leave_type, total, used):
        bal = LeaveBalance(
            employee_id=emp.id, leave_type=leave_type, year=TODAY.year,
            total_days=total, used_days=used, remaining_days=total - used,
        )
        db_session.add(bal)
        return bal

    result = SimpleNamespace(
        casual=_balance(people.employee, LeaveType.CASUAL, 12, 2),
        sick=_balance(people.employee, LeaveType.SICK, 10, 1),
        paid=_balance(people.employee, LeaveType.PAID, 20, 5),
        hr_casual=_balance(people.hr, LeaveType.CASUAL, 12, 0),
        admin_casual=_balance(people.admin, LeaveType.CASUAL, 12, 0),
    )
    db_session.commit()
    return result

@pytest.fixture(scope="function")
def published():
    """Events received by the dispatcher, in publish order."""
    return []

@pytest.fixture(scope="function")
def dispatcher(published):
    events = LeaveEventDispatcher()
    events.subscribe(published.append)
    return events

@pytest.fixture(scope="function")
def workflow(db_session, dispatcher):
    return LeaveWorkflowEngine(db_session, events=dispatcher, today=lambda: TODAY)

@pytest.fixture(scope="function")
def client(db_session, dispatcher):
    """Get a TestClient that uses the test database session via dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_today] = lambda: (lambda: TODAY)
    with TestClient(app) as c:
        app.state.leave_events = dispatcher
        yield c
    app.dependency_overrides.clear()
