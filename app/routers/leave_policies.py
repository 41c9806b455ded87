from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from app.dependencies import get_policy_catalog
from app.models.leave_policy import LeaveType
from app.schemas.leave import LeavePolicyCreate, LeavePolicyResponse, LeavePolicyUpdate
from app.services.policy_catalog import PolicyCatalog

router = APIRouter(prefix="/leave-policies", tags=["Leave Policies"])


@router.get("", response_model=List[LeavePolicyResponse])
def list_leave_policies(
    active_only: bool = False,
    catalog: PolicyCatalog = Depends(get_policy_catalog),
):
    return catalog.list_policies(active_only=active_only)


@router.get("/{leave_type}/active", response_model=LeavePolicyResponse)
def get_active_leave_policy(
    leave_type: LeaveType,
    catalog: PolicyCatalog = Depends(get_policy_catalog),
):
    policy = catalog.get_active_policy(leave_type)
    if not policy:
        raise HTTPException(status_code=404, detail=f"No active policy for {leave_type.value} leave")
    return policy


@router.post("", response_model=LeavePolicyResponse, status_code=status.HTTP_201_CREATED)
def create_leave_policy(
    policy: LeavePolicyCreate,
    catalog: PolicyCatalog = Depends(get_policy_catalog),
):
    return catalog.create_policy(policy)


@router.put("/{policy_id}", response_model=LeavePolicyResponse)
def update_leave_policy(
    policy_id: int,
    policy: LeavePolicyUpdate,
    catalog: PolicyCatalog = Depends(get_policy_catalog),
):
    return catalog.update_policy(policy_id, policy)


@router.post("/{policy_id}/deactivate", response_model=LeavePolicyResponse)
def deactivate_leave_policy(
    policy_id: int,
    catalog: PolicyCatalog = Depends(get_policy_catalog),
):
    return catalog.deactivate_policy(policy_id)
