"""Task edit endpoint - load the edit form (GET) or submit it (POST)."""

import asyncio
from src.services.task_form import TaskEditForm, load_task_form, submit_task_form
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


async def _handle(request: dict) -> dict:
    query = request.get("query", {}) or {}
    caller = caller_from_request(request)

    if request.get("method", "POST").upper() == "GET":
        task_id = query.get("task_id", "")
        context = await load_task_form(task_id, query.get("project_id") or None)
        return json_response(200, context.model_dump(mode="json"))

    body = dict(parse_body(request))
    task_id = body.pop("task_id", "") or query.get("task_id", "")
    try:
        form = TaskEditForm.model_validate(body)
    except ValueError as e:
        raise TaskValidationError({"form": str(e)})

    result = await submit_task_form(task_id, form, caller)
    return json_response(200, result.model_dump(mode="json"))


def handler(request):
    """
    Load or submit the task edit form.

    GET  ?task_id=...&project_id=...  -> form context
    POST {"task_id": ..., <form fields>} -> update result
    """
    correlation_id = get_header(request, LoggingConfig.LOG_CORRELATION_ID_HEADER)
    with correlation_context(correlation_id):
        try:
            return asyncio.run(_handle(request))
        except Exception as e:
            logger.error("Task edit request failed", exc_info=True, error=mask_sensitive_data(str(e)))
            return error_response(e)
