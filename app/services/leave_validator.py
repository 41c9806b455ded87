"""
Leave Request Validator

Gates submission against the active policy for the leave type:

1. an active policy must exist (otherwise nothing else can be checked)
2. minimum notice period
3. maximum consecutive days
4. remaining balance for the current calendar year, when a balance row exists

Checks 2-4 are all evaluated so every violation is reported at once.
"""
from datetime import date
from typing import Callable

from app.schemas.leave import LeaveDraft, LeaveValidationResult
from app.services.balance_ledger import BalanceLedger
from app.services.policy_catalog import PolicyCatalog


class LeaveRequestValidator:
    def __init__(
        self,
        catalog: PolicyCatalog,
        ledger: BalanceLedger,
        today: Callable[[], date] = date.today,
    ):
        self.catalog = catalog
        self.ledger = ledger
        self.today = today

    def validate(self, draft: LeaveDraft) -> LeaveValidationResult:
        leave_type = draft.leave_type.value
        policy = self.catalog.get_active_policy(draft.leave_type)
        if policy is None:
            return LeaveValidationResult(
                valid=False,
                errors=[f"No active policy found for {leave_type} leave"],
                policy_found=False,
            )

        errors = []
        warnings = []
        today = self.today()

        notice_days = (draft.from_date - today).days
        if notice_days < policy.min_days_notice:
            errors.append(f"Minimum {policy.min_days_notice} days notice required for {leave_type} leave")

        if draft.day_count > policy.max_consecutive_days:
            errors.append(f"Maximum {policy.max_consecutive_days} consecutive days allowed for {leave_type} leave")

        # Balance is read for the current year, not the year of from_date.
        balance = self.ledger.get_balance(draft.employee_id, draft.leave_type, today.year)
        if balance is not None and draft.day_count > balance.remaining_days:
            errors.append(f"Insufficient leave balance. Available: {balance.remaining_days} days")

        if policy.requires_medical_certificate:
            warnings.append(f"A medical certificate is required for {leave_type} leave")

        return LeaveValidationResult(valid=not errors, errors=errors, warnings=warnings)
