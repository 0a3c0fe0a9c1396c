"""Project model (referenced by tasks, not owned)."""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class Project(BaseModel):
    """Project a task belongs to."""
    model_config = ConfigDict(extra="ignore")

    project_id: str = Field(..., description="Project ID (text)")
    name: str = Field(..., description="Project name")
    managers: list[str] = Field(default_factory=list, description="Manager employee IDs")
    created_at: Optional[str] = None
