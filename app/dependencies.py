"""
FastAPI dependency providers.

Services are built per request around the request's database session; the
event dispatcher is process-wide and lives on app.state (see main.lifespan).
"""
from datetime import date
from typing import Callable

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.database import get_db
from app.services.balance_ledger import BalanceLedger
from app.services.leave_events import LeaveEventDispatcher
from app.services.leave_workflow import LeaveWorkflowEngine
from app.services.policy_catalog import PolicyCatalog


def get_event_dispatcher(request: Request) -> LeaveEventDispatcher:
    return request.app.state.leave_events


def get_today() -> Callable[[], date]:
    return date.today


def get_policy_catalog(db: Session = Depends(get_db)) -> PolicyCatalog:
    return PolicyCatalog(db)


def get_balance_ledger(db: Session = Depends(get_db)) -> BalanceLedger:
    return BalanceLedger(db)


def get_workflow_engine(
    db: Session = Depends(get_db),
    events: LeaveEventDispatcher = Depends(get_event_dispatcher),
    today: Callable[[], date] = Depends(get_today),
) -> LeaveWorkflowEngine:
    return LeaveWorkflowEngine(db, events=events, today=today)


__all__ = [
    "get_event_dispatcher",
    "get_today",
    "get_policy_catalog",
    "get_balance_ledger",
    "get_workflow_engine",
]
