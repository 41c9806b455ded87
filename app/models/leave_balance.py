from sqlalchemy import Column, Integer, Enum, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from app.database import Base
from app.models.leave_policy import LeaveType

class LeaveBalance(Base):
    __tablename__ = "leave_balances"
    __table_args__ = (
        UniqueConstraint("employee_id", "leave_type", "year", name="uq_leave_balances_employee_type_year"),
        CheckConstraint("remaining_days >= 0", name="ck_leave_balances_remaining_non_negative"),
        CheckConstraint("used_days >= 0", name="ck_leave_balances_used_non_negative"),
        CheckConstraint("total_days = used_days + remaining_days", name="ck_leave_balances_conservation"),
    )

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    leave_type = Column(Enum(LeaveType), nullable=False, index=True)
    total_days = Column(Integer, nullable=False, default=0)
    used_days = Column(Integer, nullable=False, default=0)
    remaining_days = Column(Integer, nullable=False, default=0)
    year = Column(Integer, nullable=False)

    employee = relationship("Employee", back_populates="leave_balances")

    def __repr__(self):
        return (
            f"<LeaveBalance emp={self.employee_id} {self.leave_type.value} {self.year} "
            f"{self.used_days}/{self.total_days}>"
        )
