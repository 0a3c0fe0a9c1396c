"""Action templates - instantiate document actions from reusable blueprints."""

import copy
import logging
from src.models.action import ActionType, TaskAction
from src.models.employee import Caller
from src.models.template import ActionTemplate
from src.services.supabase_client import get_action_template_row, list_action_template_rows
from src.services.task_service import add_task_action
from src.utils.errors import TemplateNotFoundError
from src.utils.ids import generate_id

logger = logging.getLogger(__name__)


async def get_action_template_by_id(template_id: str) -> ActionTemplate:
    """Get a template by ID. Raises TemplateNotFoundError if absent."""
    row = await get_action_template_row(template_id)
    if row is None:
        raise TemplateNotFoundError(template_id)
    return ActionTemplate.model_validate(row)


async def fetch_action_templates() -> list[ActionTemplate]:
    """All templates ordered by title."""
    rows = await list_action_template_rows()
    return [ActionTemplate.model_validate(row) for row in rows]


def build_action_from_template(template: ActionTemplate) -> TaskAction:
    """
    Build a new document action from a template.

    The description joins every element description with spaces. The steps
    are a deep copy of the template elements, so editing the action never
    touches the template.
    """
    elements = [element.model_dump() for element in template.elements]
    return TaskAction(
        id=generate_id(),
        title=template.title,
        type=ActionType.DOCUMENT,
        completed=False,
        description=" ".join(element.description for element in template.elements),
        data={"steps": copy.deepcopy(elements)},
    )


async def instantiate_template_action(template_id: str) -> TaskAction:
    """Fetch a template and build a document action from it."""
    template = await get_action_template_by_id(template_id)
    action = build_action_from_template(template)
    logger.info(
        "Action instantiated from template",
        extra={"template_id": template_id, "action_id": action.id, "steps": len(template.elements)}
    )
    return action


async def add_action_from_template(task_id: str, template_id: str, caller: Caller) -> TaskAction:
    """Instantiate a template and append the action to a task."""
    action = await instantiate_template_action(template_id)
    return await add_task_action(task_id, action, caller)
