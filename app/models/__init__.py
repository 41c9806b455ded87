# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import (
    department, employee, user,
    leave_policy, leave_balance, leave_request,
)

# Explicit class exports for cleaner imports
from .department import Department
from .employee import Employee, EmployeeStatus
from .user import User, UserRole
from .leave_policy import LeavePolicy, LeaveType
from .leave_balance import LeaveBalance
from .leave_request import LeaveRequest, ApprovalStep, LeaveStatus, ApproverRole

__all__ = [
    "Department",
    "Employee",
    "EmployeeStatus",
    "User",
    "UserRole",
    "LeavePolicy",
    "LeaveType",
    "LeaveBalance",
    "LeaveRequest",
    "ApprovalStep",
    "LeaveStatus",
    "ApproverRole",
]
