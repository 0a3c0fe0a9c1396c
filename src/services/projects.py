"""Project provider."""

from src.models.project import Project
from src.services.supabase_client import get_project_row
from src.utils.errors import ProjectNotFoundError


async def get_project_by_id(project_id: str) -> Project:
    """Get a project by ID. Raises ProjectNotFoundError if absent."""
    row = await get_project_row(project_id)
    if row is None:
        raise ProjectNotFoundError(project_id)
    return Project.model_validate(row)
