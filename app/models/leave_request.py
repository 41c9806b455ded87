from sqlalchemy import (
    Column, Integer, Date, Enum, ForeignKey, DateTime, Boolean, Text, UniqueConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
from app.models.leave_policy import LeaveType
import enum

class LeaveStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

class ApproverRole(str, enum.Enum):
    LINE_MANAGER = "line_manager"
    HR = "hr"
    ADMIN = "admin"

class LeaveRequest(Base):
    __tablename__ = "leave_requests"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    leave_type = Column(Enum(LeaveType), nullable=False, index=True)
    from_date = Column(Date, nullable=False)
    to_date = Column(Date, nullable=False)
    days_count = Column(Integer, nullable=False)
    reason = Column(Text, nullable=False)
    status = Column(Enum(LeaveStatus), default=LeaveStatus.PENDING, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    employee = relationship("Employee", foreign_keys=[employee_id], back_populates="leave_requests")
    approvals = relationship(
        "ApprovalStep",
        back_populates="leave_request",
        order_by="ApprovalStep.step_order",
        cascade="all, delete-orphan",
    )

    @property
    def current_step(self):
        current = [step for step in self.approvals if step.is_current]
        return current[0] if len(current) == 1 else None

class ApprovalStep(Base):
    __tablename__ = "approval_steps"
    __table_args__ = (
        UniqueConstraint("leave_request_id", "step_order", name="uq_approval_steps_request_order"),
    )

    id = Column(Integer, primary_key=True, index=True)
    leave_request_id = Column(Integer, ForeignKey("leave_requests.id"), nullable=False, index=True)
    step_order = Column(Integer, nullable=False)  # 1-based
    approver_role = Column(Enum(ApproverRole), nullable=False)
    approver_id = Column(Integer, ForeignKey("employees.id"), nullable=True)  # set when acted upon
    status = Column(Enum(LeaveStatus), default=LeaveStatus.PENDING, nullable=False)
    comments = Column(Text, nullable=True)
    decided_at = Column(DateTime(timezone=True), nullable=True)
    is_current = Column(Boolean, default=False, nullable=False)

    leave_request = relationship("LeaveRequest", back_populates="approvals")
    approver = relationship("Employee", foreign_keys=[approver_id])
