"""
Leave Balance Ledger

Per (employee, leave type, year) counters. Invariant on every row:
total_days == used_days + remaining_days, remaining_days >= 0.

consume/release never commit: the workflow engine owns the transaction so a
final approval and its ledger update land together. provision commits.
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import BalanceNotFound, InsufficientBalance, InvalidLedgerAdjustment
from app.models.leave_balance import LeaveBalance
from app.models.leave_policy import LeavePolicy, LeaveType

logger = logging.getLogger(__name__)


class BalanceLedger:
    def __init__(self, db: Session):
        self.db = db

    def get_balance(self, employee_id: int, leave_type: LeaveType, year: int) -> Optional[LeaveBalance]:
        return self.db.query(LeaveBalance).filter(
            LeaveBalance.employee_id == employee_id,
            LeaveBalance.leave_type == leave_type,
            LeaveBalance.year == year
        ).first()

    def list_balances(self, employee_id: int, year: Optional[int] = None) -> List[LeaveBalance]:
        query = self.db.query(LeaveBalance).filter(LeaveBalance.employee_id == employee_id)
        if year is not None:
            query = query.filter(LeaveBalance.year == year)
        return query.order_by(LeaveBalance.year, LeaveBalance.leave_type).all()

    def consume(self, employee_id: int, leave_type: LeaveType, year: int, days: int) -> LeaveBalance:
        """Move `days` from remaining to used. The row is left untouched on failure."""
        if days < 1:
            raise ValueError(f"Days to consume must be positive, got {days}")

        balance = self._locked_balance(employee_id, leave_type, year)
        if days > balance.remaining_days:
            raise InsufficientBalance(employee_id, leave_type.value, year, days, balance.remaining_days)

        balance.used_days += days
        balance.remaining_days -= days
        self.db.flush()
        logger.info(
            f"Consumed {days} {leave_type.value} days for employee {employee_id} ({year})",
            extra={"remaining_days": balance.remaining_days}
        )
        return balance

    def release(self, employee_id: int, leave_type: LeaveType, year: int, days: int) -> LeaveBalance:
        """Inverse of consume: move `days` from used back to remaining."""
        if days < 1:
            raise ValueError(f"Days to release must be positive, got {days}")

        balance = self._locked_balance(employee_id, leave_type, year)
        if days > balance.used_days:
            raise InvalidLedgerAdjustment(
                f"Cannot release {days} {leave_type.value} days for employee {employee_id} in {year}: "
                f"only {balance.used_days} used"
            )

        balance.used_days -= days
        balance.remaining_days += days
        self.db.flush()
        logger.info(
            f"Released {days} {leave_type.value} days for employee {employee_id} ({year})",
            extra={"remaining_days": balance.remaining_days}
        )
        return balance

    def provision(self, employee_id: int, year: int) -> List[LeaveBalance]:
        """
        Create the year's balance rows for every active policy the employee has
        no row for. Where the policy allows carry-forward, last year's remaining
        days (capped at carry_forward_limit) are added to the annual limit.
        """
        policies = self.db.query(LeavePolicy).filter(LeavePolicy.is_active == True).all()  # noqa: E712
        created = []
        for policy in policies:
            if self.get_balance(employee_id, policy.leave_type, year) is not None:
                continue

            carried = self._carry_forward(employee_id, policy, year)
            total = policy.annual_limit + carried
            balance = LeaveBalance(
                employee_id=employee_id,
                leave_type=policy.leave_type,
                total_days=total,
                used_days=0,
                remaining_days=total,
                year=year
            )
            self.db.add(balance)
            created.append(balance)

        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        for balance in created:
            self.db.refresh(balance)

        if created:
            logger.info(
                f"Provisioned {len(created)} leave balances for employee {employee_id} ({year})",
                extra={"leave_types": [b.leave_type.value for b in created]}
            )
        return created

    def _carry_forward(self, employee_id: int, policy: LeavePolicy, year: int) -> int:
        if not policy.carry_forward_allowed:
            return 0
        previous = self.get_balance(employee_id, policy.leave_type, year - 1)
        if previous is None:
            return 0
        if policy.carry_forward_limit is None:
            return previous.remaining_days
        return min(previous.remaining_days, policy.carry_forward_limit)

    def _locked_balance(self, employee_id: int, leave_type: LeaveType, year: int) -> LeaveBalance:
        # Row lock serializes consume/release per (employee, type, year)
        balance = self.db.query(LeaveBalance).filter(
            LeaveBalance.employee_id == employee_id,
            LeaveBalance.leave_type == leave_type,
            LeaveBalance.year == year
        ).with_for_update().populate_existing().first()
        if balance is None:
            raise BalanceNotFound(employee_id, leave_type.value, year)
        return balance
