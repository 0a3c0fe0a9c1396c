"""Task action models - typed sub-items of a task."""

from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field


class ActionType(str, Enum):
    """Action types."""
    TEXT = "text"
    LONG_TEXT = "long_text"
    INFO = "info"
    FILE_UPLOAD = "file_upload"
    DATE = "date"
    DOCUMENT = "document"


# Type-specific payload fields; everything else on an action is common.
ACTION_TYPE_FIELDS: dict[ActionType, tuple[str, ...]] = {
    ActionType.TEXT: ("description",),
    ActionType.LONG_TEXT: ("description",),
    ActionType.DATE: ("description",),
    ActionType.INFO: ("info_title", "info_description", "has_attachments", "attachments", "data"),
    ActionType.FILE_UPLOAD: ("attachments",),
    ActionType.DOCUMENT: ("description", "data"),
}

COMMON_ACTION_FIELDS: tuple[str, ...] = ("title", "type")


class TaskAction(BaseModel):
    """A required step inside a task."""
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Action ID, unique within the task")
    title: str = Field(..., description="Action title")
    type: ActionType = Field(..., description="Action type tag")
    completed: bool = Field(default=False)
    completed_at: Optional[str] = Field(None, description="Completion timestamp (ISO-8601)")
    completed_by: Optional[str] = Field(None, description="User ID that completed the action")
    description: Optional[str] = None
    info_title: Optional[str] = None
    info_description: Optional[str] = None
    has_attachments: bool = Field(default=False, description="Info actions: attachments required")
    attachments: list[str] = Field(default_factory=list)
    data: dict[str, Any] = Field(default_factory=dict, description="Result payload (steps, file_urls)")
    updated_at: Optional[str] = None

    @property
    def requires_attachments(self) -> bool:
        """True for info actions that collect files on completion."""
        return self.type == ActionType.INFO and self.has_attachments

    def payload(self) -> dict[str, Any]:
        """Return only the type-specific fields meaningful for this action's type."""
        fields = ACTION_TYPE_FIELDS.get(self.type, ())
        return {name: getattr(self, name) for name in fields}


class ActionUpdate(BaseModel):
    """Partial action edit. Only explicitly set fields are merged."""
    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    type: Optional[ActionType] = None
    description: Optional[str] = None
    info_title: Optional[str] = None
    info_description: Optional[str] = None
    has_attachments: Optional[bool] = None
    attachments: Optional[list[str]] = None
    data: Optional[dict[str, Any]] = None


class ActionCompletionData(BaseModel):
    """Data submitted when completing an action."""
    model_config = ConfigDict(extra="ignore")

    attachments: Optional[list[str]] = Field(None, description="File URLs collected for info actions")
