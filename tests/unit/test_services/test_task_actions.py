"""Tests for per-action mutations on a task's action list."""

import copy
import pytest
from src.models.action import ActionType, TaskAction
from src.services.task_service import (
    add_task_action,
    complete_task_action,
    edit_task_action,
    remove_task_action,
    uncomplete_task_action,
)
from src.utils.errors import ActionNotFoundError, TaskNotFoundError, TaskValidationError
from tests.utils.assertions import assert_action_list_unchanged
from tests.utils.factories import create_action_data, create_task_data

FILE_URLS = [
    "https://test.supabase.co/storage/v1/object/public/task-files/a.pdf",
    "https://test.supabase.co/storage/v1/object/public/task-files/b.png",
]


@pytest.fixture
def task_with_actions(backend, project):
    """Task holding one action of each interesting kind."""
    return backend.add_task(create_task_data(
        task_id="T-100",
        project_id=project["project_id"],
        actions=[
            create_action_data("info", id="A-INFO", has_attachments=True, info_title="Safety sheet"),
            create_action_data("info", id="A-NOTE", has_attachments=False),
            create_action_data("text", id="A-TEXT"),
            create_action_data("document", id="A-DOC", data={}),
            create_action_data("file_upload", id="A-FILE"),
        ],
    ))


def _stored_action(backend, action_id):
    return next(a for a in backend.tasks["T-100"]["actions"] if a["id"] == action_id)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_complete_info_action_records_files(backend, task_with_actions, caller, freeze_time_fixture):
    """Info action requiring attachments stores the URLs under data.file_urls."""
    action = await complete_task_action("T-100", "A-INFO", caller, {"attachments": FILE_URLS})

    assert action.completed is True
    assert action.completed_by == "U123456"
    assert action.completed_at.startswith("2024-12-09T12:00:00")
    assert action.data["file_urls"] == FILE_URLS

    stored = _stored_action(backend, "A-INFO")
    assert stored["completed"] is True
    assert stored["data"]["file_urls"] == FILE_URLS


@pytest.mark.unit
@pytest.mark.asyncio
async def test_complete_ignores_attachments_for_other_types(backend, task_with_actions, caller):
    """Attachments are dropped for actions that do not collect them."""
    await complete_task_action("T-100", "A-TEXT", caller, {"attachments": FILE_URLS})
    await complete_task_action("T-100", "A-NOTE", caller, {"attachments": FILE_URLS})

    for action_id in ("A-TEXT", "A-NOTE"):
        stored = _stored_action(backend, action_id)
        assert stored["completed"] is True
        assert "file_urls" not in stored["data"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_complete_document_defaults_lists(backend, task_with_actions, caller):
    """Document completion always leaves steps and file_urls lists."""
    action = await complete_task_action("T-100", "A-DOC", caller)

    assert action.data == {"steps": [], "file_urls": []}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_complete_document_keeps_existing_steps(backend, project, caller):
    """Existing steps survive completion."""
    steps = [{"title": "Step 1", "description": "Open the valve"}]
    backend.add_task(create_task_data(
        task_id="T-100",
        project_id=project["project_id"],
        actions=[create_action_data("document", id="A-DOC", data={"steps": steps})],
    ))

    action = await complete_task_action("T-100", "A-DOC", caller)

    assert action.data["steps"] == steps
    assert action.data["file_urls"] == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_complete_leaves_other_actions_alone(backend, task_with_actions, caller):
    """Only the targeted action changes."""
    before = copy.deepcopy(backend.tasks["T-100"]["actions"])

    await complete_task_action("T-100", "A-TEXT", caller)

    after = backend.tasks["T-100"]["actions"]
    assert [a["id"] for a in after] == [a["id"] for a in before]
    for old, new in zip(before, after):
        if old["id"] != "A-TEXT":
            assert new["completed"] == old["completed"]
            assert new["data"] == old["data"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_uncomplete_info_clears_files(backend, task_with_actions, caller):
    """Reopening an attachment-collecting info action drops its files."""
    await complete_task_action("T-100", "A-INFO", caller, {"attachments": FILE_URLS})

    action = await uncomplete_task_action("T-100", "A-INFO", caller)

    assert action.completed is False
    assert action.completed_at is None
    assert action.completed_by is None
    assert action.attachments == []
    assert "file_urls" not in action.data


@pytest.mark.unit
@pytest.mark.asyncio
async def test_uncomplete_preserves_other_payloads(backend, project, caller):
    """Other action types keep their payload when reopened."""
    backend.add_task(create_task_data(
        task_id="T-100",
        project_id=project["project_id"],
        actions=[create_action_data(
            "file_upload", id="A-FILE", completed=True, attachments=FILE_URLS,
        )],
    ))

    action = await uncomplete_task_action("T-100", "A-FILE", caller)

    assert action.completed is False
    assert action.attachments == FILE_URLS


@pytest.mark.unit
@pytest.mark.asyncio
@pytest.mark.parametrize("operation", ["complete", "uncomplete", "edit", "remove"])
async def test_unknown_action_id_writes_nothing(backend, task_with_actions, caller, operation):
    """An unmatched action ID raises and leaves the stored list untouched."""
    before = copy.deepcopy(backend.tasks["T-100"])

    with pytest.raises(ActionNotFoundError):
        if operation == "complete":
            await complete_task_action("T-100", "A-MISSING", caller)
        elif operation == "uncomplete":
            await uncomplete_task_action("T-100", "A-MISSING", caller)
        elif operation == "edit":
            await edit_task_action("T-100", "A-MISSING", {"title": "x"}, caller)
        else:
            await remove_task_action("T-100", "A-MISSING", caller)

    assert backend.task_writes == []
    assert_action_list_unchanged(before, backend.tasks["T-100"])


@pytest.mark.unit
@pytest.mark.asyncio
async def test_action_on_missing_task(backend, caller):
    """Missing task is reported as such."""
    with pytest.raises(TaskNotFoundError):
        await complete_task_action("T-NOPE", "A-1", caller)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_edit_merges_fields(backend, task_with_actions, caller):
    """Only provided fields change; ID is preserved."""
    original = _stored_action(backend, "A-TEXT")

    action = await edit_task_action("T-100", "A-TEXT", {"title": "Call the supplier"}, caller)

    assert action.id == "A-TEXT"
    assert action.title == "Call the supplier"
    assert action.description == original["description"]
    assert action.updated_at is not None
    assert _stored_action(backend, "A-TEXT")["title"] == "Call the supplier"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_edit_rejects_unknown_type(backend, task_with_actions, caller):
    """Edits are validated."""
    with pytest.raises(TaskValidationError):
        await edit_task_action("T-100", "A-TEXT", {"type": "video"}, caller)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_add_action_appends(backend, task_with_actions, caller):
    """New action goes to the end of the list."""
    new_action = TaskAction(id="A-NEW", title="Sign off", type=ActionType.TEXT)

    await add_task_action("T-100", new_action, caller)

    assert backend.tasks["T-100"]["actions"][-1]["id"] == "A-NEW"
    assert len(backend.tasks["T-100"]["actions"]) == 6


@pytest.mark.unit
@pytest.mark.asyncio
async def test_add_action_rejects_duplicate_id(backend, task_with_actions, caller):
    """Action IDs stay unique within a task."""
    duplicate = TaskAction(id="A-TEXT", title="Again", type=ActionType.TEXT)

    with pytest.raises(TaskValidationError):
        await add_task_action("T-100", duplicate, caller)

    assert backend.task_writes == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_remove_action(backend, task_with_actions, caller):
    """Removed action disappears; order of the rest is kept."""
    await remove_task_action("T-100", "A-NOTE", caller)

    assert [a["id"] for a in backend.tasks["T-100"]["actions"]] == ["A-INFO", "A-TEXT", "A-DOC", "A-FILE"]


@pytest.mark.unit
@pytest.mark.asyncio
@pytest.mark.parametrize("data", [["a.pdf"], "a.pdf", 42])
async def test_complete_rejects_malformed_data(backend, task_with_actions, caller, data):
    """Completion data that is not an object is a validation error, not a crash."""
    with pytest.raises(TaskValidationError) as exc_info:
        await complete_task_action("T-100", "A-INFO", caller, data)

    assert "payload" in exc_info.value.errors
    assert backend.task_writes == []
