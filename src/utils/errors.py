"""Error handling utilities."""

from typing import Optional


class TaskCoinError(Exception):
    """Base exception for TaskCoin backend."""
    pass


class NotFoundError(TaskCoinError):
    """Requested entity does not exist."""
    pass


class TaskNotFoundError(NotFoundError):
    """Task not found."""

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task not found: {task_id}")


class ActionNotFoundError(NotFoundError):
    """Action not found inside a task's action list."""

    def __init__(self, task_id: str, action_id: str):
        self.task_id = task_id
        self.action_id = action_id
        super().__init__(f"Action not found: {action_id} (task {task_id})")


class ProjectNotFoundError(NotFoundError):
    """Project not found."""

    def __init__(self, project_id: str):
        self.project_id = project_id
        super().__init__(f"Project not found: {project_id}")


class TemplateNotFoundError(NotFoundError):
    """Action template not found."""

    def __init__(self, template_id: str):
        self.template_id = template_id
        super().__init__(f"Action template not found: {template_id}")


class TaskValidationError(TaskCoinError):
    """Required form fields missing or invalid."""

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        fields = ", ".join(sorted(self.errors))
        super().__init__(f"Invalid task form: {fields}")


class SupabaseError(TaskCoinError):
    """Supabase operation error."""
    pass


class PartialFailureError(TaskCoinError):
    """Primary effect succeeded but a follow-up write failed."""

    def __init__(self, message: str, result: Optional[str] = None):
        self.result = result
        super().__init__(message)


class ConcurrencyConflictError(TaskCoinError):
    """Task changed concurrently and retries were exhausted."""

    def __init__(self, task_id: str, attempts: int):
        self.task_id = task_id
        self.attempts = attempts
        super().__init__(f"Task {task_id} was modified concurrently ({attempts} attempts)")
