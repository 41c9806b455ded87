from typing import List

from sqlalchemy.orm import Session

from app.core.exceptions import EmployeeInactive, EmployeeNotFound
from app.models.employee import Employee, EmployeeStatus
from app.models.leave_request import ApproverRole
from app.models.user import User, UserRole


class EmployeeDirectory:
    """Resolves requesters, their workflow role, and who can act on a step."""

    def __init__(self, db: Session):
        self.db = db

    def get_employee(self, employee_id: int) -> Employee:
        employee = self.db.get(Employee, employee_id)
        if not employee:
            raise EmployeeNotFound(employee_id)
        return employee

    def get_active_employee(self, employee_id: int) -> Employee:
        """Employee allowed to take part in the workflow (submit or decide)."""
        employee = self.get_employee(employee_id)
        if employee.status != EmployeeStatus.ACTIVE:
            raise EmployeeInactive(employee_id)
        return employee

    def role_for(self, employee: Employee) -> UserRole:
        """Role of the employee's active user account; employees without one act as EMPLOYEE."""
        user = employee.user
        if user is None or not user.is_active:
            return UserRole.EMPLOYEE
        return user.role

    def approvers_for(self, role: ApproverRole, requester: Employee) -> List[Employee]:
        if role == ApproverRole.LINE_MANAGER:
            manager = requester.manager
            if manager is None or manager.status != EmployeeStatus.ACTIVE:
                return []
            return [manager]

        user_role = UserRole(role.value)
        return (
            self.db.query(Employee)
            .join(User, User.employee_id == Employee.id)
            .filter(
                User.role == user_role,
                User.is_active == True,  # noqa: E712
                Employee.status == EmployeeStatus.ACTIVE,
                Employee.id != requester.id,
            )
            .order_by(Employee.id)
            .all()
        )
