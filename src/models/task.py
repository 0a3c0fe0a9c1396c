"""Task models."""

from enum import Enum
from typing import Optional
from datetime import date
from pydantic import BaseModel, ConfigDict, Field

from src.models.action import TaskAction

MIN_DIFFICULTY = 2
MAX_DIFFICULTY = 9


class TaskPriority(str, Enum):
    """Task priority levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class TaskStatus(str, Enum):
    """Task status values."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TaskComment(BaseModel):
    """Comment on a task. Append-only."""
    id: str = Field(..., description="Comment ID")
    user_id: str = Field(..., description="Author user ID")
    text: str = Field(..., description="Comment text")
    created_at: str = Field(..., description="Creation timestamp (ISO-8601)")
    attachments: list[str] = Field(default_factory=list)


class Task(BaseModel):
    """Task model - a unit of assigned work within a project."""
    model_config = ConfigDict(extra="ignore")

    task_id: str = Field(..., description="Task ID (ULID)")
    title: str = Field(..., description="Task title")
    description: str = Field(default="", description="Task description")
    project_id: str = Field(..., description="Project ID (text FK)")
    assigned_to: Optional[str] = Field(None, description="Assignee employee ID")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM)
    status: TaskStatus = Field(default=TaskStatus.PENDING)
    start_date: Optional[date] = Field(None, description="Start date")
    due_date: Optional[date] = Field(None, description="Due date")
    difficulty_level: int = Field(default=5, ge=MIN_DIFFICULTY, le=MAX_DIFFICULTY)
    coins_reward: int = Field(default=0, ge=0, description="Coins awarded on completion")
    actions: list[TaskAction] = Field(default_factory=list)
    comments: list[TaskComment] = Field(default_factory=list)
    attachments: list[str] = Field(default_factory=list, description="Attachment URLs")
    created_by: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    version: int = Field(default=1, ge=1, description="Optimistic concurrency stamp")

    def find_action(self, action_id: str) -> Optional[TaskAction]:
        """Return the action with the given ID, if present."""
        return self.actions_by_id().get(action_id)

    def actions_by_id(self) -> dict[str, TaskAction]:
        """Map action ID to action."""
        return {action.id: action for action in self.actions}


class TaskCreate(BaseModel):
    """Fields supplied when creating a task."""
    title: str = Field(..., min_length=1)
    description: str = Field(default="")
    project_id: str = Field(..., min_length=1)
    assigned_to: Optional[str] = None
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM)
    start_date: Optional[date] = None
    due_date: Optional[date] = None
    difficulty_level: int = Field(default=5, ge=MIN_DIFFICULTY, le=MAX_DIFFICULTY)
    actions: list[TaskAction] = Field(default_factory=list)
    attachments: list[str] = Field(default_factory=list)


class TaskUpdate(BaseModel):
    """Partial task update. Only explicitly set fields are persisted.

    The coin reward is not settable; it follows difficulty_level.
    """
    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    description: Optional[str] = None
    project_id: Optional[str] = None
    assigned_to: Optional[str] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    start_date: Optional[date] = None
    due_date: Optional[date] = None
    difficulty_level: Optional[int] = Field(None, ge=MIN_DIFFICULTY, le=MAX_DIFFICULTY)
    actions: Optional[list[TaskAction]] = None


class TaskPage(BaseModel):
    """Page of tasks returned by a filtered listing."""
    data: list[Task] = Field(default_factory=list)
    total_pages: int = 0
    total_tasks: int = 0


class TaskUpdateResult(BaseModel):
    """Outcome of a task update, including secondary-effect failures."""
    task: Task
    previous_status: TaskStatus
    status_changed: bool = False
    notifications_sent: int = 0
    side_effect_errors: list[str] = Field(default_factory=list)
