"""Application configuration read from environment variables."""

import os


class AppConfig:
    """Centralized application configuration."""

    SUPABASE_URL = os.environ.get("SUPABASE_URL", "")
    SUPABASE_SERVICE_ROLE_KEY = os.environ.get("SUPABASE_SERVICE_ROLE_KEY", "")

    # Tables
    TASKS_TABLE = os.environ.get("TASKS_TABLE", "tasks")
    PROJECTS_TABLE = os.environ.get("PROJECTS_TABLE", "projects")
    SETTINGS_TABLE = os.environ.get("SETTINGS_TABLE", "system_settings")
    TEMPLATES_TABLE = os.environ.get("TEMPLATES_TABLE", "action_templates")
    NOTIFICATIONS_TABLE = os.environ.get("NOTIFICATIONS_TABLE", "notifications")
    ACTIVITY_TABLE = os.environ.get("ACTIVITY_TABLE", "activity_logs")
    EMPLOYEES_TABLE = os.environ.get("EMPLOYEES_TABLE", "employees")

    STORAGE_BUCKET = os.environ.get("STORAGE_BUCKET", "task-files")
    SETTINGS_ROW_ID = os.environ.get("SETTINGS_ROW_ID", "global")

    # Reward defaults when no settings row exists
    DEFAULT_TASK_COMPLETION_BASE = float(os.environ.get("DEFAULT_TASK_COMPLETION_BASE", "10"))
    DEFAULT_COMPLEXITY_MULTIPLIER = float(os.environ.get("DEFAULT_COMPLEXITY_MULTIPLIER", "1.0"))

    DEFAULT_PAGE_SIZE = int(os.environ.get("DEFAULT_PAGE_SIZE", "10"))
    TASK_WRITE_MAX_RETRIES = int(os.environ.get("TASK_WRITE_MAX_RETRIES", "3"))

    @classmethod
    def supabase_credentials(cls) -> tuple[str, str]:
        """Return (url, key), re-reading the environment for late-set values."""
        url = os.environ.get("SUPABASE_URL") or cls.SUPABASE_URL
        key = os.environ.get("SUPABASE_SERVICE_ROLE_KEY") or cls.SUPABASE_SERVICE_ROLE_KEY
        return url, key
