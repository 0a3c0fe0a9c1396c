"""Employee dashboard endpoint."""

import asyncio
from src.services.employee_dashboard import get_employee_dashboard
from src.utils.logging import correlation_context, get_structured_logger, mask_sensitive_data, setup_logging
from src.utils.logging_config import LoggingConfig
from src.utils.responses import caller_from_request, error_response, get_header, json_response

setup_logging()
logger = get_structured_logger(__name__)


def handler(request):
    """Return the caller's landing page data."""
    correlation_id = get_header(request, LoggingConfig.LOG_CORRELATION_ID_HEADER)
    with correlation_context(correlation_id):
        try:
            caller = caller_from_request(request)
            dashboard = asyncio.run(get_employee_dashboard(caller))
            return json_response(200, dashboard.model_dump(mode="json"))
        except Exception as e:
            logger.error("Dashboard request failed", exc_info=True, error=mask_sensitive_data(str(e)))
            return error_response(e)
