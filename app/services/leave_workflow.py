"""
Leave Workflow Engine

Owns the leave-request lifecycle:

    submit  -> validate -> build approval chain -> persist (pending | approved)
    decide  -> stamp current step -> advance or terminate -> consume balance

State machine per request: pending -> approved | rejected (both terminal).
The request status is always recomputed from its approval steps.

Every operation is one transaction: request, steps and ledger row are
committed together or not at all. Events are published only after commit.
"""
import logging
from datetime import date, datetime, timezone
from typing import Callable, List, Optional, Sequence

from sqlalchemy.orm import Session, selectinload

from app.core.exceptions import (
    InsufficientBalance,
    LeaveRequestNotFound,
    NoActivePolicy,
    NoCurrentStep,
    ValidationFailed,
)
from app.models.employee import Employee
from app.models.leave_balance import LeaveBalance
from app.models.leave_request import ApprovalStep, ApproverRole, LeaveRequest, LeaveStatus
from app.schemas.employee import EmployeeSummary
from app.schemas.events import LeaveEvent, LeaveEventKind
from app.schemas.leave import (
    DecisionOutcome,
    LeaveDraft,
    LeaveRequestCreate,
    LeaveRequestResponse,
    LeaveValidationResult,
)
from app.services.approval_chain import build_chain
from app.services.balance_ledger import BalanceLedger
from app.services.employee_directory import EmployeeDirectory
from app.services.leave_events import LeaveEventDispatcher
from app.services.leave_validator import LeaveRequestValidator
from app.services.policy_catalog import PolicyCatalog

logger = logging.getLogger(__name__)


def count_leave_days(from_date: date, to_date: date) -> int:
    """Inclusive calendar-day span."""
    if from_date > to_date:
        raise ValueError(f"from_date {from_date} is after to_date {to_date}")
    return (to_date - from_date).days + 1


def derive_status(steps: Sequence[ApprovalStep]) -> LeaveStatus:
    statuses = [step.status for step in steps]
    if LeaveStatus.REJECTED in statuses:
        return LeaveStatus.REJECTED
    if statuses and all(status == LeaveStatus.APPROVED for status in statuses):
        return LeaveStatus.APPROVED
    return LeaveStatus.PENDING


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LeaveWorkflowEngine:
    def __init__(
        self,
        db: Session,
        events: Optional[LeaveEventDispatcher] = None,
        catalog: Optional[PolicyCatalog] = None,
        ledger: Optional[BalanceLedger] = None,
        directory: Optional[EmployeeDirectory] = None,
        today: Callable[[], date] = date.today,
        now: Callable[[], datetime] = _utcnow,
    ):
        self.db = db
        self.events = events or LeaveEventDispatcher()
        self.catalog = catalog or PolicyCatalog(db)
        self.ledger = ledger or BalanceLedger(db)
        self.directory = directory or EmployeeDirectory(db)
        self.validator = LeaveRequestValidator(self.catalog, self.ledger, today=today)
        self.now = now

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------
    def check(self, data: LeaveRequestCreate) -> LeaveValidationResult:
        """Dry-run of the submission checks; nothing is written."""
        self.directory.get_active_employee(data.employee_id)
        errors = self._draft_errors(data)
        if errors:
            return LeaveValidationResult(valid=False, errors=errors)
        return self.validator.validate(self._draft(data))

    def submit(self, data: LeaveRequestCreate) -> LeaveRequest:
        employee = self.directory.get_active_employee(data.employee_id)

        errors = self._draft_errors(data)
        if errors:
            raise ValidationFailed(errors)

        draft = self._draft(data)
        result = self.validator.validate(draft)
        if not result.policy_found:
            logger.info(f"Rejected {data.leave_type.value} leave for employee {employee.id}: no active policy")
            raise NoActivePolicy(data.leave_type.value)
        if not result.valid:
            logger.info(
                f"Rejected {data.leave_type.value} leave for employee {employee.id}",
                extra={"errors": result.errors}
            )
            raise ValidationFailed(result.errors)

        role = self.directory.role_for(employee)
        steps = build_chain(role, requester_id=employee.id, now=self.now())
        leave = LeaveRequest(
            employee_id=employee.id,
            leave_type=data.leave_type,
            from_date=data.from_date,
            to_date=data.to_date,
            days_count=draft.day_count,
            reason=data.reason.strip(),
            status=derive_status(steps),
            approvals=steps,
        )

        try:
            self.db.add(leave)
            self.db.flush()
            if leave.status == LeaveStatus.APPROVED:
                # HR auto-approval: fully approved on creation
                self._consume_for(leave)
            self.db.commit()
        except InsufficientBalance:
            self.db.rollback()
            logger.error(f"Ledger rejected auto-approved leave for employee {employee.id}", exc_info=True)
            raise
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(leave)
        # Not persisted; carried on the submission response and event only
        leave.warnings = result.warnings
        logger.info(
            f"Leave request {leave.id} submitted by employee {employee.id} ({role.value})",
            extra={"status": leave.status.value, "days_count": leave.days_count, "warnings": result.warnings}
        )
        self._publish(
            LeaveEventKind.SUBMITTED, leave, employee,
            next_step=leave.current_step, warnings=result.warnings,
        )
        return leave

    # ------------------------------------------------------------------
    # Decisions
    # ------------------------------------------------------------------
    def decide(
        self,
        request_id: int,
        approver_id: int,
        outcome: DecisionOutcome,
        comments: Optional[str] = None,
    ) -> LeaveRequest:
        next_step = None
        try:
            leave = self._locked_request(request_id)
            current = [step for step in leave.approvals if step.is_current]
            if leave.status != LeaveStatus.PENDING or len(current) != 1:
                logger.warning(
                    f"Decision on leave request {request_id} with no current step",
                    extra={"status": leave.status.value, "current_steps": len(current)}
                )
                raise NoCurrentStep(request_id)

            step = current[0]
            approver = self.directory.get_active_employee(approver_id)

            step.approver_id = approver.id
            step.status = LeaveStatus(outcome.value)
            step.comments = comments
            step.decided_at = self.now()
            step.is_current = False

            if outcome == DecisionOutcome.APPROVED:
                next_step = next(
                    (s for s in leave.approvals if s.step_order == step.step_order + 1),
                    None
                )
                if next_step is not None:
                    next_step.is_current = True

            leave.status = derive_status(leave.approvals)
            if leave.status == LeaveStatus.APPROVED:
                self._consume_for(leave)

            self.db.commit()
        except InsufficientBalance:
            self.db.rollback()
            logger.error(f"Ledger consistency failure approving leave request {request_id}", exc_info=True)
            raise
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(leave)
        logger.info(
            f"Leave request {leave.id} step {step.step_order} {outcome.value} by employee {approver.id}",
            extra={"status": leave.status.value}
        )

        kind = LeaveEventKind.REJECTED if outcome == DecisionOutcome.REJECTED else LeaveEventKind.APPROVED
        self._publish(kind, leave, leave.employee, approver=approver, next_step=next_step)
        return leave

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get_request(self, request_id: int) -> LeaveRequest:
        leave = self.db.get(LeaveRequest, request_id)
        if not leave:
            raise LeaveRequestNotFound(request_id)
        return leave

    def list_requests(
        self,
        employee_id: Optional[int] = None,
        status: Optional[LeaveStatus] = None,
    ) -> List[LeaveRequest]:
        query = self.db.query(LeaveRequest)
        if employee_id is not None:
            query = query.filter(LeaveRequest.employee_id == employee_id)
        if status is not None:
            query = query.filter(LeaveRequest.status == status)
        return query.order_by(LeaveRequest.created_at.desc(), LeaveRequest.id.desc()).all()

    def pending_for_role(self, role: ApproverRole) -> List[LeaveRequest]:
        """Pending requests whose current step awaits `role`."""
        return (
            self.db.query(LeaveRequest)
            .join(ApprovalStep, ApprovalStep.leave_request_id == LeaveRequest.id)
            .filter(
                LeaveRequest.status == LeaveStatus.PENDING,
                ApprovalStep.is_current == True,  # noqa: E712
                ApprovalStep.approver_role == role,
            )
            .order_by(LeaveRequest.from_date, LeaveRequest.id)
            .all()
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _draft_errors(self, data: LeaveRequestCreate) -> List[str]:
        errors = []
        if data.from_date > data.to_date:
            errors.append("From date cannot be after to date")
        if not data.reason or not data.reason.strip():
            errors.append("A reason is required")
        return errors

    def _draft(self, data: LeaveRequestCreate) -> LeaveDraft:
        return LeaveDraft(
            employee_id=data.employee_id,
            leave_type=data.leave_type,
            from_date=data.from_date,
            to_date=data.to_date,
            day_count=count_leave_days(data.from_date, data.to_date),
        )

    def _locked_request(self, request_id: int) -> LeaveRequest:
        # Row lock serializes decisions on the same request
        leave = (
            self.db.query(LeaveRequest)
            .options(selectinload(LeaveRequest.approvals))
            .filter(LeaveRequest.id == request_id)
            .with_for_update()
            .populate_existing()
            .first()
        )
        if not leave:
            raise LeaveRequestNotFound(request_id)
        return leave

    def _consume_for(self, leave: LeaveRequest) -> Optional[LeaveBalance]:
        year = leave.from_date.year
        if self.ledger.get_balance(leave.employee_id, leave.leave_type, year) is None:
            logger.warning(
                f"No {leave.leave_type.value} balance for employee {leave.employee_id} in {year}; "
                f"ledger not updated for leave request {leave.id}"
            )
            return None
        return self.ledger.consume(leave.employee_id, leave.leave_type, year, leave.days_count)

    def _publish(
        self,
        kind: LeaveEventKind,
        leave: LeaveRequest,
        employee: Employee,
        approver: Optional[Employee] = None,
        next_step: Optional[ApprovalStep] = None,
        warnings: Optional[List[str]] = None,
    ) -> None:
        next_role = next_step.approver_role if next_step is not None else None
        next_approvers = self.directory.approvers_for(next_role, employee) if next_role else []
        event = LeaveEvent(
            kind=kind,
            employee=EmployeeSummary.model_validate(employee),
            request=LeaveRequestResponse.model_validate(leave),
            approver=EmployeeSummary.model_validate(approver) if approver is not None else None,
            is_fully_approved=leave.status == LeaveStatus.APPROVED,
            next_approver_role=next_role,
            next_approvers=[EmployeeSummary.model_validate(e) for e in next_approvers],
            warnings=warnings or [],
        )
        self.events.publish(event)
