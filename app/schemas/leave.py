from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import date, datetime
from typing import List, Optional
import enum

from app.models.leave_policy import LeaveType
from app.models.leave_request import LeaveStatus, ApproverRole


class DecisionOutcome(str, enum.Enum):
    APPROVED = "approved"
    REJECTED = "rejected"


class LeaveRequestCreate(BaseModel):
    employee_id: int
    leave_type: LeaveType
    from_date: date
    to_date: date
    reason: str = Field(..., min_length=1)


class LeaveDraft(BaseModel):
    """Input to the policy validator: a submission with its computed day count."""
    employee_id: int
    leave_type: LeaveType
    from_date: date
    to_date: date
    day_count: int = Field(..., ge=1)


class LeaveValidationResult(BaseModel):
    valid: bool
    errors: List[str] = []
    warnings: List[str] = []
    policy_found: bool = True


class LeaveDecisionRequest(BaseModel):
    approver_id: int
    outcome: DecisionOutcome
    comments: Optional[str] = None


class ApprovalStepResponse(BaseModel):
    id: int
    step_order: int
    approver_role: ApproverRole
    approver_id: Optional[int] = None
    status: LeaveStatus
    comments: Optional[str] = None
    decided_at: Optional[datetime] = None
    is_current: bool

    model_config = ConfigDict(from_attributes=True)


class LeaveRequestResponse(BaseModel):
    id: int
    employee_id: int
    leave_type: LeaveType
    from_date: date
    to_date: date
    days_count: int
    reason: str
    status: LeaveStatus
    approvals: List[ApprovalStepResponse] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    # Non-blocking policy notices; only filled in on the submission response
    warnings: List[str] = []

    model_config = ConfigDict(from_attributes=True)


class LeaveBalanceResponse(BaseModel):
    id: int
    employee_id: int
    leave_type: LeaveType
    total_days: int
    used_days: int
    remaining_days: int
    year: int

    model_config = ConfigDict(from_attributes=True)


class LeavePolicyBase(BaseModel):
    leave_type: LeaveType
    annual_limit: int = Field(..., ge=0)
    min_days_notice: int = Field(0, ge=0)
    max_consecutive_days: int = Field(..., ge=1)
    carry_forward_allowed: bool = False
    carry_forward_limit: Optional[int] = Field(None, ge=0)
    requires_medical_certificate: bool = False
    is_active: bool = True


class LeavePolicyCreate(LeavePolicyBase):
    pass


class LeavePolicyUpdate(BaseModel):
    """Partial update. Omitted fields are left alone; only carry_forward_limit may be set to null (uncapped)."""
    annual_limit: Optional[int] = Field(None, ge=0)
    min_days_notice: Optional[int] = Field(None, ge=0)
    max_consecutive_days: Optional[int] = Field(None, ge=1)
    carry_forward_allowed: Optional[bool] = None
    carry_forward_limit: Optional[int] = Field(None, ge=0)
    requires_medical_certificate: Optional[bool] = None
    is_active: Optional[bool] = None

    @field_validator(
        "annual_limit", "min_days_notice", "max_consecutive_days",
        "carry_forward_allowed", "requires_medical_certificate", "is_active",
    )
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v


class LeavePolicyResponse(LeavePolicyBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
