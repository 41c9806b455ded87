import pytest
from pydantic import ValidationError

from app.core.exceptions import PolicyConflict, PolicyNotFound
from app.models.leave_policy import LeavePolicy, LeaveType
from app.schemas.leave import LeavePolicyCreate, LeavePolicyUpdate
from app.services.policy_catalog import PolicyCatalog


def test_get_active_policy(db_session, policies):
    catalog = PolicyCatalog(db_session)

    assert catalog.get_active_policy(LeaveType.CASUAL).id == policies.casual.id
    assert catalog.get_active_policy(LeaveType.PATERNITY) is None

def test_create_policy(db_session, policies):
    policy = PolicyCatalog(db_session).create_policy(LeavePolicyCreate(
        leave_type=LeaveType.PATERNITY, annual_limit=10, min_days_notice=14, max_consecutive_days=10,
    ))

    assert policy.id is not None
    assert policy.is_active is True
    assert policy.carry_forward_allowed is False

def test_second_active_policy_is_refused(db_session, policies):
    with pytest.raises(PolicyConflict) as exc_info:
        PolicyCatalog(db_session).create_policy(LeavePolicyCreate(
            leave_type=LeaveType.CASUAL, annual_limit=15, max_consecutive_days=3,
        ))

    assert exc_info.value.details["active_policy_id"] == policies.casual.id
    assert db_session.query(LeavePolicy).filter(LeavePolicy.leave_type == LeaveType.CASUAL).count() == 1

def test_inactive_draft_then_swap(db_session, policies):
    catalog = PolicyCatalog(db_session)
    draft = catalog.create_policy(LeavePolicyCreate(
        leave_type=LeaveType.CASUAL, annual_limit=15, max_consecutive_days=3, is_active=False,
    ))

    with pytest.raises(PolicyConflict):
        catalog.update_policy(draft.id, LeavePolicyUpdate(is_active=True))

    catalog.deactivate_policy(policies.casual.id)
    catalog.update_policy(draft.id, LeavePolicyUpdate(is_active=True))

    assert catalog.get_active_policy(LeaveType.CASUAL).id == draft.id
    assert len(catalog.list_policies()) == 4
    assert len(catalog.list_policies(active_only=True)) == 3

def test_update_policy_fields(db_session, policies):
    policy = PolicyCatalog(db_session).update_policy(
        policies.paid.id, LeavePolicyUpdate(min_days_notice=14, carry_forward_limit=3)
    )

    assert policy.min_days_notice == 14
    assert policy.carry_forward_limit == 3
    assert policy.annual_limit == 20

def test_deactivate_is_idempotent(db_session, policies):
    catalog = PolicyCatalog(db_session)

    catalog.deactivate_policy(policies.sick.id)
    policy = catalog.deactivate_policy(policies.sick.id)

    assert policy.is_active is False
    assert catalog.get_active_policy(LeaveType.SICK) is None

def test_unknown_policy(db_session, policies):
    with pytest.raises(PolicyNotFound):
        PolicyCatalog(db_session).update_policy(999, LeavePolicyUpdate(annual_limit=1))

def test_update_schema_refuses_null_for_required_fields():
    with pytest.raises(ValidationError):
        LeavePolicyUpdate(annual_limit=None)
    with pytest.raises(ValidationError):
        LeavePolicyUpdate(requires_medical_certificate=None)

    update = LeavePolicyUpdate(carry_forward_limit=None)
    assert update.model_dump(exclude_unset=True) == {"carry_forward_limit": None}
