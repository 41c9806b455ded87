from pydantic import BaseModel, ConfigDict
from datetime import date
from typing import Optional


class EmployeeSummary(BaseModel):
    """Employee record as carried on lifecycle events."""
    id: int
    name: str
    employee_code: str
    position: str
    department_id: Optional[int] = None
    manager_id: Optional[int] = None
    joining_date: Optional[date] = None
    email: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
