"""Notification model."""

from typing import Optional
from pydantic import BaseModel, Field


class Notification(BaseModel):
    """Notification queued for a single recipient."""
    recipient: str = Field(..., description="Recipient employee ID")
    type: str = Field(..., description="Notification type, e.g. task_updated")
    title: str = Field(..., description="Short title")
    message: str = Field(..., description="Message body")
    related_entity_id: Optional[str] = Field(None, description="Related task/project ID")
    read: bool = Field(default=False)
    created_at: Optional[str] = None
