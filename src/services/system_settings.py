"""System settings provider."""

import logging
from src.models.settings import SystemSettings
from src.services.supabase_client import get_settings_row
from src.utils.config import AppConfig

logger = logging.getLogger(__name__)


def default_settings() -> SystemSettings:
    """Settings used when no settings row has been saved yet."""
    return SystemSettings(
        task_completion_base=AppConfig.DEFAULT_TASK_COMPLETION_BASE,
        complexity_multiplier=AppConfig.DEFAULT_COMPLEXITY_MULTIPLIER,
    )


async def get_settings() -> SystemSettings:
    """Read reward settings, falling back to configured defaults."""
    row = await get_settings_row()
    if row is None:
        logger.info("No system settings row found, using defaults")
        return default_settings()
    return SystemSettings.model_validate(row)
