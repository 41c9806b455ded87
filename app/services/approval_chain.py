"""
Approval chain construction.

The chain depends only on the requester's role:

    hr                      -> [hr (pre-approved)]        request starts approved
    admin                   -> [hr]
    line_manager / employee -> [line_manager, hr]

HR staff never approve their own requests through the queue, and admins
skip the line-manager step.
"""
from datetime import datetime, timezone
from typing import List, Optional

from app.models.leave_request import ApprovalStep, ApproverRole, LeaveStatus
from app.models.user import UserRole

HR_AUTO_APPROVAL_COMMENT = "Auto-approved for HR"


def build_chain(
    requester_role: UserRole,
    requester_id: Optional[int] = None,
    now: Optional[datetime] = None,
) -> List[ApprovalStep]:
    """Return unsaved ApprovalStep rows for a new request, step 1 first."""
    if requester_role == UserRole.HR:
        return [
            ApprovalStep(
                step_order=1,
                approver_role=ApproverRole.HR,
                approver_id=requester_id,
                status=LeaveStatus.APPROVED,
                comments=HR_AUTO_APPROVAL_COMMENT,
                decided_at=now or datetime.now(timezone.utc),
                is_current=False,
            )
        ]

    if requester_role == UserRole.ADMIN:
        return [_pending_step(1, ApproverRole.HR, is_current=True)]

    if requester_role in (UserRole.LINE_MANAGER, UserRole.EMPLOYEE):
        return [
            _pending_step(1, ApproverRole.LINE_MANAGER, is_current=True),
            _pending_step(2, ApproverRole.HR, is_current=False),
        ]

    raise ValueError(f"Unknown requester role: {requester_role}")


def _pending_step(order: int, role: ApproverRole, is_current: bool) -> ApprovalStep:
    return ApprovalStep(
        step_order=order,
        approver_role=role,
        status=LeaveStatus.PENDING,
        is_current=is_current,
    )
