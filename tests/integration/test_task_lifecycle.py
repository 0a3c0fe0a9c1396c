"""End-to-end task lifecycle against the in-memory backend."""

import pytest
from src.models.task import TaskCreate, TaskStatus
from src.services.action_templates import add_action_from_template
from src.services.employee_dashboard import get_employee_dashboard
from src.models.employee import Caller
from src.services.task_service import (
    complete_task_action,
    create_task,
    update_task,
    upload_task_attachment,
)
from tests.utils.factories import create_template_data


@pytest.mark.integration
@pytest.mark.asyncio
async def test_task_lifecycle(backend, project, caller, freeze_time_fixture):
    """Create, add a template action, attach a file, complete, and close a task."""
    backend.add_template(create_template_data(element_count=2, template_id="TPL-QA", title="QA sign-off"))

    task = await create_task(TaskCreate(
        title="Release 1.0",
        description="Cut and ship the release",
        project_id="P-APOLLO",
        assigned_to="E-100",
        difficulty_level=6,
    ), caller)
    assert task.coins_reward == 72

    action = await add_action_from_template(task.task_id, "TPL-QA", caller)
    url = await upload_task_attachment(task.task_id, "qa report.pdf", b"report", caller)
    completed = await complete_task_action(task.task_id, action.id, caller)
    assert completed.data["file_urls"] == []

    started = await update_task(task.task_id, {"status": "in_progress"}, caller)
    finished = await update_task(task.task_id, {"status": "completed"}, caller)

    assert started.notifications_sent == 3
    assert finished.previous_status == TaskStatus.IN_PROGRESS
    assert finished.task.attachments == [url]
    assert finished.task.actions[0].completed is True

    activity_types = [a["type"] for a in backend.activities]
    assert activity_types == [
        "task_created",
        "task_attachment_added",
        "task_status_update",
        "task_status_update",
    ]
    assert len(backend.notifications) == 6

    dashboard = await get_employee_dashboard(Caller(user_id="E-100", user_name="Bruno Lima"))
    assert dashboard.coins_earned == 72
    assert dashboard.status_counts["completed"] == 1
