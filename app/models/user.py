"""
User Model.
A login account linked to exactly one employee; carries the workflow role.
"""
from sqlalchemy import Column, Integer, String, Enum, DateTime, Boolean, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum
from app.database import Base


class UserRole(str, enum.Enum):
    """
    Roles that drive the approval chain.

    - EMPLOYEE: Self-service access
    - LINE_MANAGER: Approves first-level requests of direct reports
    - HR: Final approver; own requests are auto-approved
    - ADMIN: Reference-data administration; own requests need HR only
    """
    EMPLOYEE = "employee"
    LINE_MANAGER = "line_manager"
    HR = "hr"
    ADMIN = "admin"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(255), nullable=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), unique=True, nullable=False)

    role = Column(Enum(UserRole), default=UserRole.EMPLOYEE, nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    last_login = Column(DateTime(timezone=True), nullable=True)

    employee = relationship("Employee", back_populates="user")

    def __repr__(self):
        return f"<User {self.username} ({self.role.value})>"
