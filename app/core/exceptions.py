from typing import Any, Dict, List, Optional

class AppException(Exception):
    def __init__(
        self,
        message: str,
        status_code: int = 400,
        error_code: str = "BUSINESS_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)

class ValidationFailed(AppException):
    """Submission rejected by policy checks. User-correctable."""
    def __init__(self, errors: List[str], error_code: str = "VALIDATION_FAILED"):
        self.errors = list(errors)
        super().__init__(
            message=". ".join(self.errors) or "Leave request validation failed",
            status_code=422,
            error_code=error_code,
            details={"errors": self.errors}
        )

class NoActivePolicy(ValidationFailed):
    def __init__(self, leave_type: str):
        self.leave_type = leave_type
        super().__init__(
            [f"No active policy found for {leave_type} leave"],
            error_code="NO_ACTIVE_POLICY"
        )

class NoCurrentStep(AppException):
    """decide() called on a request that has nothing awaiting action."""
    def __init__(self, request_id: int):
        self.request_id = request_id
        super().__init__(
            message=f"Leave request {request_id} has no pending approval step",
            status_code=409,
            error_code="NO_CURRENT_STEP"
        )

class InsufficientBalance(AppException):
    """Ledger guard. Reaching it after validation signals inconsistent data."""
    def __init__(self, employee_id: int, leave_type: str, year: int, requested: int, remaining: int):
        super().__init__(
            message=(
                f"Insufficient {leave_type} balance for employee {employee_id} in {year}. "
                f"Requested: {requested} days, Remaining: {remaining} days"
            ),
            status_code=409,
            error_code="INSUFFICIENT_BALANCE",
            details={
                "employee_id": employee_id,
                "leave_type": leave_type,
                "year": year,
                "requested": requested,
                "remaining": remaining,
            }
        )

class InvalidLedgerAdjustment(AppException):
    def __init__(self, message: str):
        super().__init__(
            message=message,
            status_code=409,
            error_code="INVALID_LEDGER_ADJUSTMENT"
        )

class PolicyConflict(AppException):
    def __init__(self, leave_type: str, active_policy_id: int):
        super().__init__(
            message=f"An active policy already exists for {leave_type} leave (policy {active_policy_id})",
            status_code=409,
            error_code="POLICY_CONFLICT",
            details={"leave_type": leave_type, "active_policy_id": active_policy_id}
        )

class NotFoundError(AppException):
    def __init__(self, entity: str, entity_id: Any, error_code: str):
        super().__init__(
            message=f"{entity} {entity_id} not found",
            status_code=404,
            error_code=error_code
        )

class LeaveRequestNotFound(NotFoundError):
    def __init__(self, request_id: int):
        super().__init__("Leave request", request_id, "LEAVE_REQUEST_NOT_FOUND")

class EmployeeNotFound(NotFoundError):
    def __init__(self, employee_id: int):
        super().__init__("Employee", employee_id, "EMPLOYEE_NOT_FOUND")

class PolicyNotFound(NotFoundError):
    def __init__(self, policy_id: int):
        super().__init__("Leave policy", policy_id, "POLICY_NOT_FOUND")

class BalanceNotFound(AppException):
    def __init__(self, employee_id: int, leave_type: str, year: int):
        super().__init__(
            message=f"No {leave_type} balance for employee {employee_id} in {year}",
            status_code=404,
            error_code="BALANCE_NOT_FOUND"
        )

class EmployeeInactive(AppException):
    def __init__(self, employee_id: int):
        super().__init__(
            message=f"Employee {employee_id} is inactive",
            status_code=409,
            error_code="EMPLOYEE_INACTIVE"
        )
