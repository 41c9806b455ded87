from datetime import timedelta

from app.models.leave_policy import LeaveType
from app.schemas.leave import LeaveDraft
from app.services.balance_ledger import BalanceLedger
from app.services.leave_validator import LeaveRequestValidator
from app.services.policy_catalog import PolicyCatalog
from tests.conftest import TODAY


def _validator(db_session):
    return LeaveRequestValidator(PolicyCatalog(db_session), BalanceLedger(db_session), today=lambda: TODAY)

def _draft(employee, leave_type=LeaveType.CASUAL, start_in=5, days=3):
    start = TODAY + timedelta(days=start_in)
    return LeaveDraft(
        employee_id=employee.id,
        leave_type=leave_type,
        from_date=start,
        to_date=start + timedelta(days=days - 1),
        day_count=days,
    )

def test_valid_request(db_session, people, balances):
    result = _validator(db_session).validate(_draft(people.employee))

    assert result.valid is True
    assert result.errors == []
    assert result.policy_found is True

def test_missing_policy_short_circuits(db_session, people, balances):
    # Would also break notice and balance rules, but only the policy error is reported
    result = _validator(db_session).validate(
        _draft(people.employee, leave_type=LeaveType.PERSONAL, start_in=0, days=40)
    )

    assert result.valid is False
    assert result.policy_found is False
    assert result.errors == ["No active policy found for personal leave"]

def test_inactive_policy_counts_as_missing(db_session, people, policies):
    policies.paid.is_active = False
    db_session.commit()

    result = _validator(db_session).validate(_draft(people.employee, leave_type=LeaveType.PAID, start_in=30))

    assert result.errors == ["No active policy found for paid leave"]

def test_notice_period_boundary(db_session, people, balances):
    validator = _validator(db_session)

    assert validator.validate(_draft(people.employee, start_in=2)).valid is True
    result = validator.validate(_draft(people.employee, start_in=1))
    assert result.errors == ["Minimum 2 days notice required for casual leave"]

def test_past_dates_fail_notice(db_session, people, balances):
    result = _validator(db_session).validate(_draft(people.employee, leave_type=LeaveType.PAID, start_in=-3))

    assert result.errors == ["Minimum 7 days notice required for paid leave"]

def test_consecutive_day_cap(db_session, people, balances):
    validator = _validator(db_session)

    assert validator.validate(_draft(people.employee, days=5)).valid is True
    result = validator.validate(_draft(people.employee, days=6))
    assert result.errors == ["Maximum 5 consecutive days allowed for casual leave"]

def test_balance_check(db_session, people, balances):
    balances.paid.used_days = 18
    balances.paid.remaining_days = 2
    db_session.commit()

    result = _validator(db_session).validate(_draft(people.employee, leave_type=LeaveType.PAID, start_in=10))

    assert result.errors == ["Insufficient leave balance. Available: 2 days"]

def test_missing_balance_is_not_a_rejection(db_session, people, policies):
    result = _validator(db_session).validate(_draft(people.contractor))

    assert result.valid is True

def test_balance_read_from_current_year(db_session, people, balances):
    """A request dated next year is still checked against this year's balance."""
    balances.casual.used_days = 12
    balances.casual.remaining_days = 0
    db_session.commit()

    result = _validator(db_session).validate(_draft(people.employee, start_in=400))

    assert result.errors == ["Insufficient leave balance. Available: 0 days"]

def test_medical_certificate_warning(db_session, people, balances):
    result = _validator(db_session).validate(_draft(people.employee, leave_type=LeaveType.SICK, start_in=0, days=2))

    assert result.valid is True
    assert result.warnings == ["A medical certificate is required for sick leave"]
