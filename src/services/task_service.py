"""Task service - task CRUD, update workflow, and action mutations."""

import math
import re
import time
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

from pydantic import BaseModel, ValidationError

from src.models.action import ActionCompletionData, ActionType, ActionUpdate, TaskAction
from src.models.activity import ActivityLogEntry, ActivityType
from src.models.employee import Caller
from src.models.project import Project
from src.models.task import (
    Task,
    TaskComment,
    TaskCreate,
    TaskPage,
    TaskStatus,
    TaskUpdate,
    TaskUpdateResult,
)
from src.services.activity_log import log_activity
from src.services.notifications import notify_task_status_change
from src.services.projects import get_project_by_id
from src.services.rewards import reward_for_settings
from src.services.supabase_client import (
    delete_task_row,
    get_storage_public_url,
    get_task_row,
    insert_task_row,
    query_task_rows,
    update_task_row,
    upload_storage_object,
)
from src.services.system_settings import get_settings
from src.utils.config import AppConfig
from src.utils.errors import (
    ActionNotFoundError,
    ConcurrencyConflictError,
    NotFoundError,
    PartialFailureError,
    SupabaseError,
    TaskNotFoundError,
    TaskValidationError,
)
from src.utils.ids import generate_id
from src.utils.logging import get_structured_logger, log_timing, mask_user_id

logger = get_structured_logger(__name__)

# Columns that must never be written as null from a partial update
_NON_NULLABLE_TASK_FIELDS = {
    "title", "description", "project_id", "priority", "status",
    "difficulty_level", "actions",
}
_NON_NULLABLE_ACTION_FIELDS = {"title", "type", "has_attachments", "attachments", "data"}

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9.-]")

# distinguishes "not looked up yet" from a failed lookup
_UNSET: Any = object()

PatchBuilder = Callable[[Task], Awaitable[tuple[dict, Any]]]
ModelT = TypeVar("ModelT", bound=BaseModel)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _dump_actions(actions: list[TaskAction]) -> list[dict]:
    return [action.model_dump(mode="json") for action in actions]


def _parse(model: type[ModelT], data: Any) -> ModelT:
    """Validate a raw payload, surfacing pydantic errors as TaskValidationError."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise TaskValidationError({
            ".".join(str(part) for part in error["loc"]) or "payload": error["msg"]
            for error in e.errors()
        }) from e


async def _read_task(task_id: str) -> Task:
    row = await get_task_row(task_id)
    if row is None:
        raise TaskNotFoundError(task_id)
    return Task.model_validate(row)


async def _versioned_write(
    task_id: str,
    build_patch: PatchBuilder,
    expected_version: Optional[int] = None
) -> tuple[Task, dict, Any]:
    """
    Read-modify-write a task guarded by its version stamp.

    build_patch receives the freshly read task and returns (patch, value).
    On a version conflict the task is re-read and the patch rebuilt, up to
    TASK_WRITE_MAX_RETRIES attempts. When expected_version is given the
    caller edited that exact version, so any mismatch raises
    ConcurrencyConflictError without retrying. Returns (snapshot, written
    row, value).
    """
    attempts = max(1, AppConfig.TASK_WRITE_MAX_RETRIES)
    for attempt in range(1, attempts + 1):
        snapshot = await _read_task(task_id)
        if expected_version is not None and snapshot.version != expected_version:
            logger.warning(
                "Task changed since it was read",
                task_id=task_id,
                expected_version=expected_version,
                current_version=snapshot.version
            )
            raise ConcurrencyConflictError(task_id, attempt)
        patch, value = await build_patch(snapshot)
        patch["version"] = snapshot.version + 1

        row = await update_task_row(task_id, patch, expected_version=snapshot.version)
        if row is not None:
            return snapshot, row, value

        logger.warning(
            "Task write conflict",
            task_id=task_id,
            attempt=attempt,
            max_attempts=attempts,
            expected_version=snapshot.version
        )
    raise ConcurrencyConflictError(task_id, attempts)


async def _lookup_project(project_id: str, errors: list[str]) -> Optional[Project]:
    try:
        return await get_project_by_id(project_id)
    except Exception as e:
        logger.error(
            "Failed to load project for task side effects (non-fatal)",
            exc_info=True,
            project_id=project_id,
            error=str(e)
        )
        errors.append(f"project lookup failed: {e}")
        return None


async def _record_activity(
    task: Task,
    caller: Caller,
    activity_type: ActivityType,
    errors: list[str],
    project: Optional[Project] = _UNSET,
    **fields: Any
) -> None:
    """Log a task activity; failures are logged and appended to errors."""
    if project is _UNSET:
        project = await _lookup_project(task.project_id, errors)

    try:
        await log_activity(ActivityLogEntry(
            user_id=caller.user_id,
            user_name=caller.user_name,
            type=activity_type,
            project_id=task.project_id,
            project_name=project.name if project is not None else None,
            task_id=task.task_id,
            task_name=task.title,
            **fields
        ))
    except Exception as e:
        logger.error(
            "Failed to log task activity (non-fatal)",
            exc_info=True,
            task_id=task.task_id,
            activity_type=activity_type.value,
            error=str(e)
        )
        errors.append(f"activity log failed: {e}")


# Task CRUD
async def create_task(data: TaskCreate, caller: Caller) -> Task:
    """Create a task with a computed coin reward and status pending."""
    settings = await get_settings()
    now = _now()

    task = Task(
        task_id=generate_id(),
        **data.model_dump(),
        status=TaskStatus.PENDING,
        coins_reward=reward_for_settings(data.difficulty_level, settings),
        created_by=caller.user_id,
        created_at=now,
        updated_at=now,
        version=1,
    )

    with log_timing("create_task", logger, task_id=task.task_id):
        row = await insert_task_row(task.model_dump(mode="json"))
    created = Task.model_validate(row)

    logger.info(
        "Task created",
        task_id=created.task_id,
        project_id=created.project_id,
        assigned_to=mask_user_id(created.assigned_to) if created.assigned_to else None,
        coins_reward=created.coins_reward
    )
    await _record_activity(created, caller, ActivityType.TASK_CREATED, [])
    return created


async def get_task_by_id(task_id: str) -> Task:
    """Get a task by ID. Raises TaskNotFoundError if absent."""
    return await _read_task(task_id)


async def fetch_tasks(
    project_id: Optional[str] = None,
    status: Optional[Union[TaskStatus, str]] = None,
    assigned_to: Optional[str] = None,
    limit: Optional[int] = None,
    page: int = 1
) -> TaskPage:
    """List tasks by equality filters, newest first, one page at a time."""
    limit = max(1, limit or AppConfig.DEFAULT_PAGE_SIZE)
    page = max(1, page)

    filters = {}
    if project_id:
        filters["project_id"] = project_id
    if status:
        filters["status"] = TaskStatus(status).value
    if assigned_to:
        filters["assigned_to"] = assigned_to

    rows, total = await query_task_rows(filters, offset=(page - 1) * limit, limit=limit)
    return TaskPage(
        data=[Task.model_validate(row) for row in rows],
        total_pages=math.ceil(total / limit),
        total_tasks=total,
    )


async def update_task(
    task_id: str,
    updates: Union[TaskUpdate, dict],
    caller: Caller,
    expected_version: Optional[int] = None
) -> TaskUpdateResult:
    """
    Apply a partial update, then notify and log.

    The reward is recalculated only when difficulty_level is part of the
    patch. After the write the task is re-read; a status change notifies the
    assignee and each project manager and logs task_status_update, any other
    change logs task_updated. Notification and logging failures never undo
    the write; they are logged and returned in side_effect_errors.

    Pass expected_version when the updates were derived from a previously
    read task (the edit form); a stale version raises ConcurrencyConflictError.
    """
    if isinstance(updates, dict):
        updates = _parse(TaskUpdate, updates)

    changes = {
        key: value
        for key, value in updates.model_dump(mode="json", exclude_unset=True).items()
        if value is not None or key not in _NON_NULLABLE_TASK_FIELDS
    }

    settings_cache: dict = {}

    async def build_patch(current: Task) -> tuple[dict, None]:
        patch = dict(changes)
        if changes.get("difficulty_level") is not None:
            if "settings" not in settings_cache:
                settings_cache["settings"] = await get_settings()
            patch["coins_reward"] = reward_for_settings(
                changes["difficulty_level"], settings_cache["settings"]
            )
        patch["updated_at"] = _now()
        return patch, None

    with log_timing("update_task", logger, task_id=task_id):
        previous, _, _ = await _versioned_write(task_id, build_patch, expected_version)
        updated = await _read_task(task_id)

    errors: list[str] = []
    status_changed = previous.status != updated.status
    project = await _lookup_project(updated.project_id, errors)
    notifications_sent = 0

    if status_changed:
        notifications_sent, notify_errors = await notify_task_status_change(updated, project)
        errors.extend(notify_errors)
        await _record_activity(
            updated, caller, ActivityType.TASK_STATUS_UPDATE, errors,
            project=project,
            new_status=updated.status.value,
            details=f"Task status changed from {previous.status.value} to {updated.status.value}",
        )
    else:
        await _record_activity(
            updated, caller, ActivityType.TASK_UPDATED, errors,
            project=project,
            details="Task updated.",
        )

    logger.info(
        "Task updated",
        task_id=task_id,
        fields=sorted(changes),
        status_changed=status_changed,
        previous_status=previous.status.value,
        new_status=updated.status.value,
        notifications_sent=notifications_sent,
        side_effect_errors=len(errors)
    )
    return TaskUpdateResult(
        task=updated,
        previous_status=previous.status,
        status_changed=status_changed,
        notifications_sent=notifications_sent,
        side_effect_errors=errors,
    )


async def delete_task(task_id: str, caller: Caller) -> None:
    """Delete a task. Raises TaskNotFoundError if absent."""
    task = await _read_task(task_id)
    await delete_task_row(task_id)
    logger.info("Task deleted", task_id=task_id, user_id=mask_user_id(caller.user_id))
    await _record_activity(task, caller, ActivityType.TASK_DELETED, [])


# Comments and attachments
async def add_task_comment(
    task_id: str,
    text: str,
    caller: Caller,
    attachments: Optional[list[str]] = None
) -> TaskComment:
    """Append a comment to a task."""
    if not text or not text.strip():
        raise TaskValidationError({"text": "Comment text is required"})

    comment = TaskComment(
        id=generate_id(),
        user_id=caller.user_id,
        text=text,
        created_at=_now(),
        attachments=list(attachments or []),
    )

    async def build_patch(current: Task) -> tuple[dict, None]:
        comments = [c.model_dump(mode="json") for c in current.comments]
        comments.append(comment.model_dump(mode="json"))
        return {"comments": comments, "updated_at": _now()}, None

    snapshot, _, _ = await _versioned_write(task_id, build_patch)
    await _record_activity(snapshot, caller, ActivityType.TASK_COMMENT_ADDED, [])
    return comment


def build_attachment_key(task_id: str, filename: str) -> str:
    """Storage key: millisecond timestamp plus the sanitized original name."""
    timestamp = int(time.time() * 1000)
    safe_name = _UNSAFE_FILENAME_CHARS.sub("_", filename)
    return f"tasks/{task_id}/attachments/{timestamp}_{safe_name}"


async def upload_task_attachment(
    task_id: str,
    filename: str,
    content: bytes,
    caller: Caller,
    content_type: Optional[str] = None
) -> str:
    """
    Store a file and append its URL to the task's attachment list.

    The upload is not rolled back if the task is gone by the time the list
    is updated (TaskNotFoundError) or the list update fails
    (PartialFailureError carrying the URL).
    """
    key = build_attachment_key(task_id, filename)

    try:
        with log_timing("upload_task_attachment", logger, task_id=task_id, storage_key=key):
            await upload_storage_object(key, content, content_type)
            url = await get_storage_public_url(key)
    except SupabaseError as e:
        logger.error("Attachment upload failed", exc_info=True, task_id=task_id, storage_key=key, error=str(e))
        raise SupabaseError("Failed to upload file. Please try again.") from e

    async def build_patch(current: Task) -> tuple[dict, None]:
        return {"attachments": [*current.attachments, url], "updated_at": _now()}, None

    try:
        snapshot, _, _ = await _versioned_write(task_id, build_patch)
    except NotFoundError:
        logger.warning("Task missing after upload, stored file is orphaned", task_id=task_id, storage_key=key)
        raise
    except (SupabaseError, ConcurrencyConflictError) as e:
        logger.error("Attachment stored but task not updated", exc_info=True, task_id=task_id, storage_key=key, error=str(e))
        raise PartialFailureError(
            f"File uploaded but task {task_id} could not be updated: {e}",
            result=url,
        ) from e

    await _record_activity(
        snapshot, caller, ActivityType.TASK_ATTACHMENT_ADDED, [],
        details=f"Attachment added: {filename}",
    )
    return url


async def get_task_attachments(task_id: str) -> list[str]:
    """Attachment URLs of a task."""
    task = await _read_task(task_id)
    return list(task.attachments)


# Action list mutations
async def _mutate_action(
    task_id: str,
    action_id: str,
    transform: Callable[[TaskAction], TaskAction],
    operation: str
) -> TaskAction:
    """Replace one action by ID and write the whole list back."""

    async def build_patch(current: Task) -> tuple[dict, TaskAction]:
        by_id = current.actions_by_id()
        if action_id not in by_id:
            raise ActionNotFoundError(task_id, action_id)
        updated = transform(by_id[action_id])
        actions = [updated if action.id == action_id else action for action in current.actions]
        return {"actions": _dump_actions(actions), "updated_at": _now()}, updated

    _, _, action = await _versioned_write(task_id, build_patch)
    logger.info(
        f"Task action {operation}",
        task_id=task_id,
        action_id=action_id,
        action_type=action.type.value
    )
    return action


async def complete_task_action(
    task_id: str,
    action_id: str,
    caller: Caller,
    data: Optional[Union[ActionCompletionData, dict]] = None
) -> TaskAction:
    """
    Mark an action done.

    Info actions that require attachments record the supplied attachment URLs
    under data.file_urls; document actions always end up with steps and
    file_urls lists. Supplied attachments are ignored for every other type.
    """
    if data is not None and not isinstance(data, ActionCompletionData):
        data = _parse(ActionCompletionData, data)

    def transform(action: TaskAction) -> TaskAction:
        changes: dict[str, Any] = {
            "completed": True,
            "completed_at": _now(),
            "completed_by": caller.user_id,
        }
        if action.requires_attachments and data is not None and data.attachments is not None:
            changes["data"] = {**action.data, "file_urls": list(data.attachments)}
        elif action.type == ActionType.DOCUMENT:
            changes["data"] = {
                **action.data,
                "steps": action.data.get("steps") or [],
                "file_urls": action.data.get("file_urls") or [],
            }
        return action.model_copy(update=changes)

    return await _mutate_action(task_id, action_id, transform, "completed")


async def uncomplete_task_action(task_id: str, action_id: str, caller: Caller) -> TaskAction:
    """Reverse completion. Info actions requiring attachments lose their recorded files."""

    def transform(action: TaskAction) -> TaskAction:
        changes: dict[str, Any] = {
            "completed": False,
            "completed_at": None,
            "completed_by": None,
        }
        if action.requires_attachments:
            changes["attachments"] = []
            changes["data"] = {k: v for k, v in action.data.items() if k != "file_urls"}
        return action.model_copy(update=changes)

    action = await _mutate_action(task_id, action_id, transform, "uncompleted")
    logger.debug("Action reopened", task_id=task_id, action_id=action_id, user_id=mask_user_id(caller.user_id))
    return action


async def edit_task_action(
    task_id: str,
    action_id: str,
    updates: Union[ActionUpdate, dict],
    caller: Caller
) -> TaskAction:
    """Shallow-merge the explicitly set fields into an action."""
    if isinstance(updates, dict):
        updates = _parse(ActionUpdate, updates)

    fields = {
        key: value
        for key, value in updates.model_dump(exclude_unset=True).items()
        if value is not None or key not in _NON_NULLABLE_ACTION_FIELDS
    }

    def transform(action: TaskAction) -> TaskAction:
        merged = action.model_dump()
        merged.update(fields)
        merged["updated_at"] = _now()
        return TaskAction.model_validate(merged)

    action = await _mutate_action(task_id, action_id, transform, "edited")
    logger.debug("Action edited", task_id=task_id, action_id=action_id, user_id=mask_user_id(caller.user_id))
    return action


async def add_task_action(task_id: str, action: TaskAction, caller: Caller) -> TaskAction:
    """Append an action. Rejects an ID already used in the task."""

    async def build_patch(current: Task) -> tuple[dict, None]:
        if action.id in current.actions_by_id():
            raise TaskValidationError({"actions": f"Duplicate action id: {action.id}"})
        return {"actions": _dump_actions([*current.actions, action]), "updated_at": _now()}, None

    await _versioned_write(task_id, build_patch)
    logger.info(
        "Task action added",
        task_id=task_id,
        action_id=action.id,
        action_type=action.type.value,
        user_id=mask_user_id(caller.user_id)
    )
    return action


async def remove_task_action(task_id: str, action_id: str, caller: Caller) -> None:
    """Remove an action by ID."""

    async def build_patch(current: Task) -> tuple[dict, None]:
        if action_id not in current.actions_by_id():
            raise ActionNotFoundError(task_id, action_id)
        remaining = [action for action in current.actions if action.id != action_id]
        return {"actions": _dump_actions(remaining), "updated_at": _now()}, None

    await _versioned_write(task_id, build_patch)
    logger.info(
        "Task action removed",
        task_id=task_id,
        action_id=action_id,
        user_id=mask_user_id(caller.user_id)
    )
