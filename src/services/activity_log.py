"""Activity log sink."""

from datetime import datetime, timezone
from src.models.activity import ActivityLogEntry
from src.services.supabase_client import insert_activity_log
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)


async def log_activity(entry: ActivityLogEntry) -> dict:
    """Append an activity entry. Errors propagate to the caller."""
    if entry.created_at is None:
        entry = entry.model_copy(update={"created_at": datetime.now(timezone.utc).isoformat()})

    row = await insert_activity_log(entry.model_dump(mode="json"))
    logger.debug(
        "Activity logged",
        activity_type=entry.type.value,
        task_id=entry.task_id,
        project_id=entry.project_id
    )
    return row
