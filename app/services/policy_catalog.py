"""
Leave Policy Catalog

Holds one active policy per leave type. The workflow only reads from it
(get_active_policy); the remaining operations are administrative upserts.
Policies are never deleted, only deactivated.
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import PolicyConflict, PolicyNotFound
from app.models.leave_policy import LeavePolicy, LeaveType
from app.schemas.leave import LeavePolicyCreate, LeavePolicyUpdate

logger = logging.getLogger(__name__)


class PolicyCatalog:
    def __init__(self, db: Session):
        self.db = db

    def get_active_policy(self, leave_type: LeaveType) -> Optional[LeavePolicy]:
        return self.db.query(LeavePolicy).filter(
            LeavePolicy.leave_type == leave_type,
            LeavePolicy.is_active == True  # noqa: E712
        ).first()

    def get_policy(self, policy_id: int) -> LeavePolicy:
        policy = self.db.get(LeavePolicy, policy_id)
        if not policy:
            raise PolicyNotFound(policy_id)
        return policy

    def list_policies(self, active_only: bool = False) -> List[LeavePolicy]:
        query = self.db.query(LeavePolicy)
        if active_only:
            query = query.filter(LeavePolicy.is_active == True)  # noqa: E712
        return query.order_by(LeavePolicy.leave_type, LeavePolicy.id).all()

    def create_policy(self, data: LeavePolicyCreate) -> LeavePolicy:
        if data.is_active:
            self._ensure_no_other_active(data.leave_type)

        policy = LeavePolicy(**data.model_dump())
        self.db.add(policy)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(policy)
        logger.info(f"Created {policy.leave_type.value} leave policy {policy.id} (active={policy.is_active})")
        return policy

    def update_policy(self, policy_id: int, data: LeavePolicyUpdate) -> LeavePolicy:
        policy = self.get_policy(policy_id)
        changes = data.model_dump(exclude_unset=True)

        if changes.get("is_active") and not policy.is_active:
            self._ensure_no_other_active(policy.leave_type, exclude_id=policy.id)

        for field, value in changes.items():
            setattr(policy, field, value)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(policy)
        logger.info(f"Updated leave policy {policy.id}: {sorted(changes)}")
        return policy

    def deactivate_policy(self, policy_id: int) -> LeavePolicy:
        policy = self.get_policy(policy_id)
        if not policy.is_active:
            return policy
        policy.is_active = False
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(policy)
        logger.info(f"Deactivated {policy.leave_type.value} leave policy {policy.id}")
        return policy

    def _ensure_no_other_active(self, leave_type: LeaveType, exclude_id: Optional[int] = None):
        active = self.get_active_policy(leave_type)
        if active is not None and active.id != exclude_id:
            logger.warning(
                f"Refused second active policy for {leave_type.value} leave",
                extra={"active_policy_id": active.id}
            )
            raise PolicyConflict(leave_type.value, active.id)
