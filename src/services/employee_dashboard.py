"""Employee landing page data."""

from collections import Counter
from pydantic import BaseModel, Field

from src.models.employee import Caller
from src.models.task import Task, TaskStatus
from src.services.task_service import fetch_tasks

DEFAULT_DISPLAY_NAME = "Employee"
DASHBOARD_PAGE_SIZE = 100


class EmployeeDashboard(BaseModel):
    """Summary shown to an employee after sign-in."""
    greeting: str
    tasks: list[Task] = Field(default_factory=list)
    status_counts: dict[str, int] = Field(default_factory=dict)
    coins_earned: int = 0
    coins_pending: int = 0


def greeting_for(caller: Caller) -> str:
    name = caller.user_name.strip() if caller.user_name else ""
    if not name or name == "Unknown User":
        name = DEFAULT_DISPLAY_NAME
    return f"Hello, {name}!"


async def get_employee_dashboard(caller: Caller) -> EmployeeDashboard:
    """Tasks assigned to the caller with per-status counts and coin totals."""
    tasks: list[Task] = []
    page_number = 1
    while True:
        page = await fetch_tasks(assigned_to=caller.user_id, limit=DASHBOARD_PAGE_SIZE, page=page_number)
        tasks.extend(page.data)
        if page_number >= page.total_pages:
            break
        page_number += 1

    counts = Counter(task.status.value for task in tasks)
    earned = sum(t.coins_reward for t in tasks if t.status == TaskStatus.COMPLETED)
    pending = sum(t.coins_reward for t in tasks if t.status != TaskStatus.COMPLETED)

    return EmployeeDashboard(
        greeting=greeting_for(caller),
        tasks=tasks,
        status_counts={status.value: counts.get(status.value, 0) for status in TaskStatus},
        coins_earned=earned,
        coins_pending=pending,
    )
