from pydantic import BaseModel, Field
from datetime import datetime, timezone
from typing import List, Optional
import enum

from app.models.leave_request import ApproverRole
from app.schemas.employee import EmployeeSummary
from app.schemas.leave import LeaveRequestResponse


class LeaveEventKind(str, enum.Enum):
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


class LeaveEvent(BaseModel):
    """
    Lifecycle event published by the workflow engine after a committed transition.
    Snapshots are detached from the ORM session so subscribers can keep them.
    """
    kind: LeaveEventKind
    employee: EmployeeSummary
    request: LeaveRequestResponse
    approver: Optional[EmployeeSummary] = None
    is_fully_approved: bool = False
    next_approver_role: Optional[ApproverRole] = None
    next_approvers: List[EmployeeSummary] = []
    warnings: List[str] = []
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
