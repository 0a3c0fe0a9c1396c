"""Notification sink and task status fan-out."""

from datetime import datetime, timezone
from typing import Optional
from src.models.notification import Notification
from src.models.project import Project
from src.models.task import Task
from src.services.supabase_client import insert_notification
from src.utils.logging import get_structured_logger, mask_user_id

logger = get_structured_logger(__name__)

STATUS_UPDATE_TYPE = "task_updated"
STATUS_UPDATE_TITLE = "Task Status Updated"


async def create_notification(notification: Notification) -> dict:
    """Enqueue a notification for one recipient. Errors propagate."""
    if notification.created_at is None:
        notification = notification.model_copy(
            update={"created_at": datetime.now(timezone.utc).isoformat()}
        )
    return await insert_notification(notification.model_dump(mode="json"))


def status_change_message(task: Task, project_name: str) -> str:
    """Message sent when a task's status changes."""
    return (
        f"Task '{task.title}' in project '{project_name}' "
        f"has been updated to {task.status.value}"
    )


def status_change_recipients(task: Task, project: Optional[Project]) -> list[str]:
    """Assignee first, then every project manager."""
    recipients = []
    if task.assigned_to:
        recipients.append(task.assigned_to)
    if project is not None:
        recipients.extend(project.managers)
    return recipients


async def notify_task_status_change(task: Task, project: Optional[Project]) -> tuple[int, list[str]]:
    """
    Notify the assignee and every project manager that a task changed status.

    Each recipient is attempted independently; a failed enqueue is logged and
    reported, never raised. Returns (notifications sent, error messages).
    """
    project_name = project.name if project is not None else ""
    message = status_change_message(task, project_name)

    sent = 0
    errors: list[str] = []
    for recipient in status_change_recipients(task, project):
        try:
            await create_notification(Notification(
                recipient=recipient,
                type=STATUS_UPDATE_TYPE,
                title=STATUS_UPDATE_TITLE,
                message=message,
                related_entity_id=task.task_id,
            ))
            sent += 1
        except Exception as e:
            logger.error(
                "Failed to send status notification (non-fatal)",
                exc_info=True,
                task_id=task.task_id,
                recipient=mask_user_id(recipient),
                error=str(e)
            )
            errors.append(f"notification to {recipient} failed: {e}")

    logger.info(
        "Task status notifications dispatched",
        task_id=task.task_id,
        new_status=task.status.value,
        notifications_sent=sent,
        notifications_failed=len(errors)
    )
    return sent, errors
