from sqlalchemy import Column, Integer, Boolean, Enum, DateTime, Index, CheckConstraint, text
from sqlalchemy.sql import func
from app.database import Base
import enum

class LeaveType(str, enum.Enum):
    CASUAL = "casual"
    SICK = "sick"
    PAID = "paid"
    PERSONAL = "personal"
    MATERNITY = "maternity"
    PATERNITY = "paternity"

class LeavePolicy(Base):
    __tablename__ = "leave_policies"
    __table_args__ = (
        # At most one active policy per leave type
        Index(
            "uq_leave_policies_active_type",
            "leave_type",
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active"),
        ),
        CheckConstraint("annual_limit >= 0", name="ck_leave_policies_annual_limit"),
        CheckConstraint("min_days_notice >= 0", name="ck_leave_policies_min_notice"),
        CheckConstraint("max_consecutive_days >= 1", name="ck_leave_policies_max_consecutive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    leave_type = Column(Enum(LeaveType), nullable=False, index=True)
    annual_limit = Column(Integer, nullable=False)
    min_days_notice = Column(Integer, default=0, nullable=False)
    max_consecutive_days = Column(Integer, nullable=False)
    carry_forward_allowed = Column(Boolean, default=False, nullable=False)
    carry_forward_limit = Column(Integer, nullable=True)  # None = uncapped when carry-forward is allowed
    requires_medical_certificate = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<LeavePolicy {self.leave_type.value} active={self.is_active}>"
