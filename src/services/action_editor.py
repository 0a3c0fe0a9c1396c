"""Action editing - which fields an action of each type may carry."""

from typing import Any, Union
from src.models.action import (
    ACTION_TYPE_FIELDS,
    COMMON_ACTION_FIELDS,
    ActionType,
    ActionUpdate,
    TaskAction,
)
from src.models.employee import Caller
from src.services.task_service import edit_task_action


def editable_fields(action_type: Union[ActionType, str]) -> tuple[str, ...]:
    """Fields the editor exposes for an action type."""
    action_type = ActionType(action_type)
    return COMMON_ACTION_FIELDS + ACTION_TYPE_FIELDS[action_type]


def filter_action_changes(action: TaskAction, changes: dict[str, Any]) -> dict[str, Any]:
    """
    Keep only changes meaningful for the action's resulting type.

    A change of type is applied first, so fields of the new type are kept and
    fields that only belonged to the old type are dropped.
    """
    resulting_type = ActionType(changes.get("type", action.type))
    allowed = set(editable_fields(resulting_type))
    # result payloads are written by completion, not by the editor
    allowed.discard("data")
    return {key: value for key, value in changes.items() if key in allowed}


def apply_action_edits(action: TaskAction, changes: dict[str, Any]) -> TaskAction:
    """Return a copy of the action with the meaningful changes applied."""
    merged = action.model_dump()
    merged.update(filter_action_changes(action, changes))
    return TaskAction.model_validate(merged)


async def save_action_edits(
    task_id: str,
    action: TaskAction,
    changes: dict[str, Any],
    caller: Caller
) -> TaskAction:
    """Persist editor changes for an action."""
    filtered = filter_action_changes(action, changes)
    return await edit_task_action(task_id, action.id, ActionUpdate(**filtered), caller)
