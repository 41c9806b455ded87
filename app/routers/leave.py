from datetime import date
from typing import Callable, List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_balance_ledger, get_today, get_workflow_engine
from app.models.leave_request import ApproverRole, LeaveStatus
from app.schemas.leave import (
    LeaveBalanceResponse,
    LeaveDecisionRequest,
    LeaveRequestCreate,
    LeaveRequestResponse,
    LeaveValidationResult,
)
from app.services.balance_ledger import BalanceLedger
from app.services.employee_directory import EmployeeDirectory
from app.services.leave_workflow import LeaveWorkflowEngine

router = APIRouter(prefix="/leave", tags=["Leave"])


@router.post("/requests", response_model=LeaveRequestResponse, status_code=status.HTTP_201_CREATED)
def submit_leave_request(
    request: LeaveRequestCreate,
    engine: LeaveWorkflowEngine = Depends(get_workflow_engine),
):
    return engine.submit(request)


@router.post("/validate", response_model=LeaveValidationResult)
def validate_leave_request(
    request: LeaveRequestCreate,
    engine: LeaveWorkflowEngine = Depends(get_workflow_engine),
):
    """Run the submission checks without creating a request."""
    return engine.check(request)


@router.get("/requests", response_model=List[LeaveRequestResponse])
def list_leave_requests(
    employee_id: Optional[int] = None,
    status: Optional[LeaveStatus] = None,
    engine: LeaveWorkflowEngine = Depends(get_workflow_engine),
):
    return engine.list_requests(employee_id=employee_id, status=status)


@router.get("/requests/pending", response_model=List[LeaveRequestResponse])
def list_pending_approvals(
    role: ApproverRole,
    engine: LeaveWorkflowEngine = Depends(get_workflow_engine),
):
    return engine.pending_for_role(role)


@router.get("/requests/{request_id}", response_model=LeaveRequestResponse)
def get_leave_request(
    request_id: int,
    engine: LeaveWorkflowEngine = Depends(get_workflow_engine),
):
    return engine.get_request(request_id)


@router.post("/requests/{request_id}/decision", response_model=LeaveRequestResponse)
def decide_leave_request(
    request_id: int,
    decision: LeaveDecisionRequest,
    engine: LeaveWorkflowEngine = Depends(get_workflow_engine),
):
    return engine.decide(request_id, decision.approver_id, decision.outcome, decision.comments)


@router.get("/balances/{employee_id}", response_model=List[LeaveBalanceResponse])
def get_leave_balances(
    employee_id: int,
    year: Optional[int] = None,
    ledger: BalanceLedger = Depends(get_balance_ledger),
):
    return ledger.list_balances(employee_id, year=year)


@router.post("/balances/{employee_id}/provision", response_model=List[LeaveBalanceResponse])
def provision_leave_balances(
    employee_id: int,
    year: Optional[int] = None,
    db: Session = Depends(get_db),
    today: Callable[[], date] = Depends(get_today),
):
    """Create the year's balances from the active policies (defaults to the current year)."""
    EmployeeDirectory(db).get_employee(employee_id)
    return BalanceLedger(db).provision(employee_id, year or today().year)
