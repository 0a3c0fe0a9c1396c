"""Tests for the task edit and task action endpoints."""

import pytest
from api.tasks.actions import handler as actions_handler
from api.tasks.update import handler as update_handler
from tests.utils.assertions import assert_valid_response
from tests.utils.factories import create_action_data, create_task_data, create_template_data
from tests.utils.helpers import create_request, response_json

FORM = {
    "task_id": "T-001",
    "title": "Prepare launch checklist",
    "description": "Everything needed before launch day",
    "project_id": "P-APOLLO",
    "assigned_to": "E-100",
    "priority": "high",
    "start_date": "2024-12-10",
    "due_date": "2024-12-20",
    "difficulty_level": 8,
}


@pytest.fixture
def task_with_action(backend, project):
    """Task with a single text action A-1."""
    return backend.add_task(create_task_data(
        task_id="T-300",
        project_id=project["project_id"],
        actions=[create_action_data("text", id="A-1")],
    ))


@pytest.mark.unit
def test_get_form(backend, task):
    """GET returns the form context."""
    response = update_handler(create_request("GET", query={"task_id": "T-001"}))

    assert_valid_response(response, 200)
    body = response_json(response)
    assert body["project_name"] == "Apollo Launch"
    assert body["form"]["title"] == "Prepare launch checklist"
    assert body["coins_reward_preview"] == 60


@pytest.mark.unit
def test_submit_form(backend, task):
    """POST applies the form and returns the update result."""
    response = update_handler(create_request("POST", body=FORM))

    assert_valid_response(response, 200)
    body = response_json(response)
    assert body["task"]["coins_reward"] == 96
    assert body["status_changed"] is False
    assert backend.tasks["T-001"]["priority"] == "high"


@pytest.mark.unit
def test_submit_form_missing_fields(backend, task):
    """Missing required fields map to 400 with per-field messages."""
    response = update_handler(create_request("POST", body={**FORM, "title": "", "due_date": ""}))

    assert_valid_response(response, 400)
    assert set(response_json(response)["fields"]) == {"title", "due_date"}
    assert backend.task_writes == []


@pytest.mark.unit
def test_submit_form_unknown_task(backend):
    """Unknown task maps to 404."""
    response = update_handler(create_request("POST", body={**FORM, "task_id": "T-NOPE"}))
    assert_valid_response(response, 404)


@pytest.mark.unit
def test_invalid_json_body(backend):
    """Malformed JSON is a 400."""
    response = update_handler(create_request("POST", body="{not json"))
    assert_valid_response(response, 400)


@pytest.mark.unit
def test_missing_caller(backend, task):
    """No caller identity is a 401."""
    response = update_handler(create_request("POST", body=FORM, user_id=None))
    assert_valid_response(response, 401)


@pytest.mark.unit
def test_store_failure_maps_to_502(backend, task):
    """Backend errors surface as 502."""
    backend.fail_task_update = True
    response = update_handler(create_request("POST", body=FORM))
    assert_valid_response(response, 502)


@pytest.mark.unit
def test_complete_action(backend, task_with_action):
    """complete marks the action done."""
    response = actions_handler(create_request(body={
        "operation": "complete", "task_id": "T-300", "action_id": "A-1",
    }))

    assert_valid_response(response, 200)
    assert response_json(response)["action"]["completed"] is True
    assert response_json(response)["action"]["completed_by"] == "U123456"


@pytest.mark.unit
def test_unknown_action_is_404(backend, task_with_action):
    """Unmatched action id maps to 404 and writes nothing."""
    response = actions_handler(create_request(body={
        "operation": "complete", "task_id": "T-300", "action_id": "A-404",
    }))

    assert_valid_response(response, 404)
    assert backend.task_writes == []


@pytest.mark.unit
def test_edit_action(backend, task_with_action):
    """edit merges the updates."""
    response = actions_handler(create_request(body={
        "operation": "edit", "task_id": "T-300", "action_id": "A-1",
        "updates": {"title": "Renamed"},
    }))

    assert_valid_response(response, 200)
    assert backend.tasks["T-300"]["actions"][0]["title"] == "Renamed"


@pytest.mark.unit
def test_add_from_template(backend, task_with_action):
    """add_from_template creates a document action."""
    backend.add_template(create_template_data(template_id="TPL-1"))

    response = actions_handler(create_request(body={
        "operation": "add_from_template", "task_id": "T-300", "template_id": "TPL-1",
    }))

    assert_valid_response(response, 201)
    assert response_json(response)["action"]["type"] == "document"
    assert len(backend.tasks["T-300"]["actions"]) == 2


@pytest.mark.unit
def test_remove_action(backend, task_with_action):
    """remove drops the action."""
    response = actions_handler(create_request(body={
        "operation": "remove", "task_id": "T-300", "action_id": "A-1",
    }))

    assert_valid_response(response, 200)
    assert response_json(response) == {"ok": True}
    assert backend.tasks["T-300"]["actions"] == []


@pytest.mark.unit
@pytest.mark.parametrize("body", [
    {"operation": "archive", "task_id": "T-300", "action_id": "A-1"},
    {"operation": "complete", "action_id": "A-1"},
    {"operation": "complete", "task_id": "T-300"},
    {"operation": "add_from_template", "task_id": "T-300"},
])
def test_bad_action_requests(backend, task_with_action, body):
    """Unknown operations and missing ids are 400s."""
    response = actions_handler(create_request(body=body))
    assert_valid_response(response, 400)


@pytest.mark.unit
def test_submit_stale_form_is_409(backend, task):
    """A form loaded before another write is rejected with 409."""
    loaded = response_json(update_handler(create_request("GET", query={"task_id": "T-001"})))
    backend.tasks["T-001"]["version"] = 2

    response = update_handler(create_request("POST", body={**FORM, "version": loaded["version"]}))

    assert_valid_response(response, 409)
    assert backend.task_writes == []


@pytest.mark.unit
def test_submit_does_not_mutate_parsed_body(backend, task):
    """A body already decoded to a dict is left as the caller passed it."""
    request = create_request("POST")
    request["body"] = dict(FORM)

    response = update_handler(request)

    assert_valid_response(response, 200)
    assert request["body"]["task_id"] == "T-001"


@pytest.mark.unit
def test_complete_with_malformed_data_is_400(backend, task_with_action):
    """Non-object completion data maps to 400 and writes nothing."""
    response = actions_handler(create_request(body={
        "operation": "complete", "task_id": "T-300", "action_id": "A-1", "data": ["a.pdf"],
    }))

    assert_valid_response(response, 400)
    assert backend.task_writes == []
