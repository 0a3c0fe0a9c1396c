"""Task edit form - load, validate and submit administrator edits."""

import asyncio
from datetime import date
from typing import Optional
from pydantic import BaseModel, Field

from src.models.action import TaskAction
from src.models.employee import Caller
from src.models.task import MAX_DIFFICULTY, MIN_DIFFICULTY, Task, TaskPriority, TaskUpdate, TaskUpdateResult
from src.services.action_templates import fetch_action_templates
from src.services.projects import get_project_by_id
from src.services.rewards import reward_for_settings
from src.services.supabase_client import list_employee_rows
from src.services.system_settings import get_settings
from src.services.task_service import get_task_by_id, update_task
from src.utils.errors import TaskValidationError
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

REQUIRED_FIELD_MESSAGES = {
    "title": "Title is required",
    "description": "Description is required",
    "assigned_to": "An assignee is required",
    "start_date": "Start date is required",
    "due_date": "Due date is required",
}


class TaskEditForm(BaseModel):
    """Values as entered in the task edit form."""
    title: str = ""
    description: str = ""
    project_id: str = ""
    assigned_to: str = ""
    priority: TaskPriority = TaskPriority.MEDIUM
    start_date: str = Field(default="", description="YYYY-MM-DD")
    due_date: str = Field(default="", description="YYYY-MM-DD")
    difficulty_level: int = Field(default=5, ge=MIN_DIFFICULTY, le=MAX_DIFFICULTY)
    actions: list[TaskAction] = Field(default_factory=list)
    version: Optional[int] = Field(default=None, description="Task version the form was loaded from")

    @classmethod
    def from_task(cls, task: Task) -> "TaskEditForm":
        """Prefill the form from a stored task."""
        start = task.start_date or date.today()
        return cls(
            title=task.title,
            description=task.description,
            project_id=task.project_id,
            assigned_to=task.assigned_to or "",
            priority=task.priority,
            start_date=start.isoformat(),
            due_date=task.due_date.isoformat() if task.due_date else "",
            difficulty_level=task.difficulty_level,
            actions=list(task.actions),
            version=task.version,
        )

    def to_update(self) -> TaskUpdate:
        """Convert a validated form into a task update."""
        return TaskUpdate(
            title=self.title.strip(),
            description=self.description.strip(),
            assigned_to=self.assigned_to,
            priority=self.priority,
            start_date=date.fromisoformat(self.start_date),
            due_date=date.fromisoformat(self.due_date),
            difficulty_level=self.difficulty_level,
            actions=self.actions,
        )


class TaskFormContext(BaseModel):
    """Everything the edit page needs to render."""
    task_id: str
    form: TaskEditForm
    project_name: str
    coins_reward_preview: int
    version: int
    assignees: list[dict] = Field(default_factory=list)
    templates: list[dict] = Field(default_factory=list)


def _valid_date(value: str) -> bool:
    try:
        date.fromisoformat(value)
        return True
    except ValueError:
        return False


def validate_task_form(form: TaskEditForm) -> dict[str, str]:
    """Return field -> message for every invalid field; empty when valid."""
    errors = {}
    for field, message in REQUIRED_FIELD_MESSAGES.items():
        if not getattr(form, field).strip():
            errors[field] = message

    for field in ("start_date", "due_date"):
        value = getattr(form, field).strip()
        if value and not _valid_date(value):
            errors[field] = "Enter a valid date (YYYY-MM-DD)"

    return errors


async def load_task_form(task_id: str, project_id: Optional[str] = None) -> TaskFormContext:
    """Load a task with its project name, reward preview, assignees and templates."""
    if not task_id:
        raise TaskValidationError({"task_id": "Task ID is required"})

    task = await get_task_by_id(task_id)
    project, employees, settings, templates = await asyncio.gather(
        get_project_by_id(project_id or task.project_id),
        list_employee_rows(),
        get_settings(),
        fetch_action_templates(),
    )

    return TaskFormContext(
        task_id=task.task_id,
        form=TaskEditForm.from_task(task),
        project_name=project.name,
        coins_reward_preview=reward_for_settings(task.difficulty_level, settings),
        version=task.version,
        assignees=[{"id": e["employee_id"], "name": e["name"]} for e in employees],
        templates=[{"id": t.template_id, "title": t.title} for t in templates],
    )


async def preview_coins_reward(difficulty_level: int) -> int:
    """Coins a task of the given difficulty would award under current settings."""
    settings = await get_settings()
    return reward_for_settings(difficulty_level, settings)


async def submit_task_form(task_id: str, form: TaskEditForm, caller: Caller) -> TaskUpdateResult:
    """
    Validate the form and apply it as a task update.

    A form carrying the version it was loaded from is rejected with
    ConcurrencyConflictError when the task has changed since, so edits made
    elsewhere in the meantime (such as a completed action) are not overwritten.
    """
    if not task_id:
        raise TaskValidationError({"task_id": "Task ID is missing"})

    errors = validate_task_form(form)
    if errors:
        logger.info("Task form rejected", task_id=task_id, invalid_fields=sorted(errors))
        raise TaskValidationError(errors)

    return await update_task(task_id, form.to_update(), caller, expected_version=form.version)
