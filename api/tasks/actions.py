"""Task action endpoint - complete, reopen, edit, add from template, or remove an action."""

import asyncio
from src.services.action_templates import add_action_from_template
from src.services.task_service import (
    complete_task_action,
    edit_task_action,
    remove_task_action,
    uncomplete_task_action,
)
from src.utils.errors import TaskValidationError
from src.utils.logging import correlation_context, get_structured_logger, mask_sensitive_data, setup_logging
from src.utils.logging_config import LoggingConfig
from src.utils.responses import (
    caller_from_request,
    error_response,
    get_header,
    json_response,
    parse_body,
)

setup_logging()
logger = get_structured_logger(__name__)

OPERATIONS = ("complete", "uncomplete", "edit", "add_from_template", "remove")


def _require(body: dict, *fields: str) -> None:
    missing = {field: f"{field} is required" for field in fields if not body.get(field)}
    if missing:
        raise TaskValidationError(missing)


async def _handle(request: dict) -> dict:
    caller = caller_from_request(request)
    body = parse_body(request)
    operation = body.get("operation", "")
    if operation not in OPERATIONS:
        raise TaskValidationError({"operation": f"operation must be one of: {', '.join(OPERATIONS)}"})

    _require(body, "task_id")
    task_id = body["task_id"]

    if operation == "add_from_template":
        _require(body, "template_id")
        action = await add_action_from_template(task_id, body["template_id"], caller)
        return json_response(201, {"action": action.model_dump(mode="json")})

    _require(body, "action_id")
    action_id = body["action_id"]

    if operation == "remove":
        await remove_task_action(task_id, action_id, caller)
        return json_response(200, {"ok": True})

    if operation == "complete":
        action = await complete_task_action(task_id, action_id, caller, body.get("data"))
    elif operation == "uncomplete":
        action = await uncomplete_task_action(task_id, action_id, caller)
    else:
        action = await edit_task_action(task_id, action_id, body.get("updates") or {}, caller)

    return json_response(200, {"action": action.model_dump(mode="json")})


def handler(request):
    """
    Mutate one action of a task.

    Body: {"operation": ..., "task_id": ..., "action_id": ..., "data"?: ..., "updates"?: ..., "template_id"?: ...}
    """
    correlation_id = get_header(request, LoggingConfig.LOG_CORRELATION_ID_HEADER)
    with correlation_context(correlation_id):
        try:
            return asyncio.run(_handle(request))
        except Exception as e:
            logger.error("Task action request failed", exc_info=True, error=mask_sensitive_data(str(e)))
            return error_response(e)
