"""Activity log model - append-only audit trail of task events."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class ActivityType(str, Enum):
    """Activity event types."""
    TASK_CREATED = "task_created"
    TASK_UPDATED = "task_updated"
    TASK_STATUS_UPDATE = "task_status_update"
    TASK_DELETED = "task_deleted"
    TASK_COMMENT_ADDED = "task_comment_added"
    TASK_ATTACHMENT_ADDED = "task_attachment_added"


class ActivityLogEntry(BaseModel):
    """Activity log entry."""
    user_id: str = Field(..., description="Acting user ID")
    user_name: str = Field(default="Unknown User", description="Acting user display name")
    type: ActivityType = Field(..., description="Event type")
    project_id: Optional[str] = Field(None, description="Project ID (text FK)")
    project_name: Optional[str] = Field(None, description="Project name at time of event")
    task_id: Optional[str] = Field(None, description="Task ID (text FK)")
    task_name: Optional[str] = Field(None, description="Task title at time of event")
    new_status: Optional[str] = Field(None, description="New status for status updates")
    details: Optional[str] = Field(None, description="Human-readable details")
    created_at: Optional[str] = None
