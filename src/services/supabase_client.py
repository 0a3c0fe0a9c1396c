"""Supabase client wrapper with async context manager support."""

from typing import Optional
from supabase import create_client, Client
from supabase.client import ClientOptions
from src.utils.config import AppConfig
from src.utils.errors import SupabaseError
import logging

logger = logging.getLogger(__name__)

# Global client instance (singleton pattern)
_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """Get or create Supabase client singleton."""
    global _client

    if _client is None:
        url, key = AppConfig.supabase_credentials()

        if not url or not key:
            raise SupabaseError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")

        options = ClientOptions(
            auto_refresh_token=False,
            persist_session=False,
        )

        _client = create_client(url, key, options)
        logger.info("Supabase client initialized", extra={"url": url})

    return _client


async def close_supabase_client() -> None:
    """Close Supabase client connections."""
    global _client
    if _client:
        # supabase-py has no explicit close; dropping the reference is enough
        _client = None
        logger.info("Supabase client closed")


class SupabaseClient:
    """Async context manager for Supabase client."""

    def __init__(self):
        self.client: Optional[Client] = None

    async def __aenter__(self) -> Client:
        self.client = get_supabase_client()
        return self.client

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            logger.error(
                "Supabase operation error",
                extra={"error": str(exc_val), "type": exc_type.__name__}
            )
        return False


def _first(result) -> Optional[dict]:
    return result.data[0] if result.data and len(result.data) > 0 else None


# Tasks table operations
async def get_task_row(task_id: str) -> Optional[dict]:
    """Get a task row by ID."""
    async with SupabaseClient() as client:
        try:
            result = client.table(AppConfig.TASKS_TABLE).select("*").eq("task_id", task_id).execute()
        except Exception as e:
            raise SupabaseError(f"Failed to get task: {e}")
    return _first(result)


async def insert_task_row(task_data: dict) -> dict:
    """Insert a new task row."""
    async with SupabaseClient() as client:
        try:
            result = client.table(AppConfig.TASKS_TABLE).insert(task_data).execute()
        except Exception as e:
            raise SupabaseError(f"Failed to create task: {e}")
    row = _first(result)
    if row is None:
        raise SupabaseError("Failed to create task: no data returned")
    return row


async def update_task_row(
    task_id: str,
    updates: dict,
    expected_version: Optional[int] = None
) -> Optional[dict]:
    """
    Update a task row.

    When expected_version is given the write only applies if the stored
    version still matches; None is returned when no row was updated.
    """
    async with SupabaseClient() as client:
        try:
            query = client.table(AppConfig.TASKS_TABLE).update(updates).eq("task_id", task_id)
            if expected_version is not None:
                query = query.eq("version", expected_version)
            result = query.execute()
        except Exception as e:
            raise SupabaseError(f"Failed to update task {task_id}: {e}")
    return _first(result)


async def delete_task_row(task_id: str) -> None:
    """Delete a task row."""
    async with SupabaseClient() as client:
        try:
            client.table(AppConfig.TASKS_TABLE).delete().eq("task_id", task_id).execute()
        except Exception as e:
            raise SupabaseError(f"Failed to delete task {task_id}: {e}")


async def query_task_rows(
    filters: Optional[dict] = None,
    offset: int = 0,
    limit: int = 10
) -> tuple[list[dict], int]:
    """Query tasks by equality filters, newest first. Returns (rows, total count)."""
    async with SupabaseClient() as client:
        try:
            query = client.table(AppConfig.TASKS_TABLE).select("*", count="exact")
            for column, value in (filters or {}).items():
                query = query.eq(column, value)
            result = query.order("created_at", desc=True).range(offset, offset + limit - 1).execute()
        except Exception as e:
            raise SupabaseError(f"Failed to query tasks: {e}")
    rows = result.data if result.data else []
    total = result.count if result.count is not None else len(rows)
    return rows, total


# Projects, settings, templates, employees (read-only here)
async def get_project_row(project_id: str) -> Optional[dict]:
    """Get a project row by ID."""
    async with SupabaseClient() as client:
        try:
            result = client.table(AppConfig.PROJECTS_TABLE).select("*").eq("project_id", project_id).execute()
        except Exception as e:
            raise SupabaseError(f"Failed to get project: {e}")
    return _first(result)


async def get_settings_row() -> Optional[dict]:
    """Get the global system settings row."""
    async with SupabaseClient() as client:
        try:
            result = client.table(AppConfig.SETTINGS_TABLE).select("*").eq("id", AppConfig.SETTINGS_ROW_ID).execute()
        except Exception as e:
            raise SupabaseError(f"Failed to get system settings: {e}")
    return _first(result)


async def get_action_template_row(template_id: str) -> Optional[dict]:
    """Get an action template row by ID."""
    async with SupabaseClient() as client:
        try:
            result = client.table(AppConfig.TEMPLATES_TABLE).select("*").eq("template_id", template_id).execute()
        except Exception as e:
            raise SupabaseError(f"Failed to get action template: {e}")
    return _first(result)


async def list_action_template_rows() -> list[dict]:
    """List all action templates ordered by title."""
    async with SupabaseClient() as client:
        try:
            result = client.table(AppConfig.TEMPLATES_TABLE).select("*").order("title").execute()
            return result.data if result.data else []
        except Exception as e:
            raise SupabaseError(f"Failed to list action templates: {e}")


async def list_employee_rows(status: str = "active") -> list[dict]:
    """List employees with the given status ordered by name."""
    async with SupabaseClient() as client:
        try:
            result = client.table(AppConfig.EMPLOYEES_TABLE).select("*").eq("status", status).order("name").execute()
            return result.data if result.data else []
        except Exception as e:
            raise SupabaseError(f"Failed to list employees: {e}")


# Notifications and activity log (append-only)
async def insert_notification(notification_data: dict) -> dict:
    """Insert a notification row."""
    async with SupabaseClient() as client:
        try:
            result = client.table(AppConfig.NOTIFICATIONS_TABLE).insert(notification_data).execute()
        except Exception as e:
            raise SupabaseError(f"Failed to create notification: {e}")
    return _first(result) or notification_data


async def insert_activity_log(activity_data: dict) -> dict:
    """Append an activity log row."""
    async with SupabaseClient() as client:
        try:
            result = client.table(AppConfig.ACTIVITY_TABLE).insert(activity_data).execute()
        except Exception as e:
            raise SupabaseError(f"Failed to log activity: {e}")
    return _first(result) or activity_data


# Storage operations
async def upload_storage_object(path: str, content: bytes, content_type: Optional[str] = None) -> None:
    """Store a byte payload under the given key."""
    async with SupabaseClient() as client:
        try:
            file_options = {"content-type": content_type} if content_type else None
            client.storage.from_(AppConfig.STORAGE_BUCKET).upload(path, content, file_options)
        except Exception as e:
            raise SupabaseError(f"Failed to upload file: {e}")


async def get_storage_public_url(path: str) -> str:
    """Get a durable retrieval URL for a stored object."""
    async with SupabaseClient() as client:
        try:
            return client.storage.from_(AppConfig.STORAGE_BUCKET).get_public_url(path)
        except Exception as e:
            raise SupabaseError(f"Failed to get file URL: {e}")
