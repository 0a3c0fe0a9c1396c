"""Employee model - people who create, receive and complete tasks."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class Role(str, Enum):
    """User roles."""
    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"


class Employee(BaseModel):
    """Employee model - primary people table."""
    employee_id: str = Field(..., description="Employee ID (text)")
    email: str = Field(..., description="Email address")
    name: str = Field(..., description="Full name")
    role: Role = Field(default=Role.EMPLOYEE)
    status: str = Field(default="active", description="Status: active, inactive, suspended")
    coins: int = Field(default=0, ge=0, description="Coin balance")
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class Caller(BaseModel):
    """Identity of the user performing an operation."""
    user_id: str = Field(..., min_length=1, description="Authenticated user ID")
    user_name: str = Field(default="Unknown User", description="Display name for audit entries")
    role: Role = Field(default=Role.EMPLOYEE)
