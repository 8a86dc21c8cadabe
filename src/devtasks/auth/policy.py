"""Authorization policy — who may do what to which project or task.

Learn: This is the part of the system with real invariants. Every read
or write on a Project or Task goes through authorize() before the
service touches the database.

The rules:

  Project  create           any authenticated principal (becomes owner)
  Project  read/update/del  principal is the owner
  Project  list             implicit: only the principal's own projects
  Project  list tasks       owner, OR assignee of at least one task in it
  Task     create           principal owns the parent project
  Task     read/update/del  principal owns the task's project

An assignee who doesn't own the project only gets the project's task
list view. They can't fetch, edit or delete a single task, can't create
tasks and can't touch the project itself.

Existence is the caller's job: services raise NotFound before calling
in here, so a missing id is never reported as Forbidden.

Resources are plain snapshots (ids only) so the policy is a pure
function and trivially unit-testable.
"""

import enum
from dataclasses import dataclass, field
from typing import Union

import structlog

from devtasks.auth.jwt import Principal
from devtasks.errors import Forbidden

logger = structlog.get_logger()


class Action(str, enum.Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    LIST_TASKS = "list_tasks"


@dataclass(frozen=True)
class ProjectScope:
    """A project as the policy sees it. project_id is None before creation."""

    project_id: int | None
    owner_id: int | None


@dataclass(frozen=True)
class TaskScope:
    """A task (or a task about to be created) and its parent's owner."""

    task_id: int | None
    project_id: int
    project_owner_id: int


@dataclass(frozen=True)
class ProjectTaskView:
    """The task list of a project, with who is assigned to anything in it."""

    project_id: int
    owner_id: int
    assignee_ids: frozenset[int] = field(default_factory=frozenset)


Resource = Union[ProjectScope, TaskScope, ProjectTaskView]


# ─── Decisions ───────────────────────────────────────────


def can_access_project(principal: Principal, action: Action, project: ProjectScope) -> bool:
    if action is Action.CREATE:
        return True
    if action in (Action.READ, Action.UPDATE, Action.DELETE):
        return project.owner_id == principal.user_id
    return False


def can_access_task(principal: Principal, action: Action, task: TaskScope) -> bool:
    if action in (Action.CREATE, Action.READ, Action.UPDATE, Action.DELETE):
        return task.project_owner_id == principal.user_id
    return False


def can_view_project_tasks(principal: Principal, view: ProjectTaskView) -> bool:
    return view.owner_id == principal.user_id or principal.user_id in view.assignee_ids


def is_allowed(principal: Principal, action: Action, resource: Resource) -> bool:
    """Pure allow/deny decision."""
    if isinstance(resource, ProjectTaskView):
        return action is Action.LIST_TASKS and can_view_project_tasks(principal, resource)
    if isinstance(resource, TaskScope):
        return can_access_task(principal, action, resource)
    if isinstance(resource, ProjectScope):
        return can_access_project(principal, action, resource)
    return False


def authorize(principal: Principal, action: Action, resource: Resource) -> None:
    """Raise Forbidden unless the principal may perform action on resource."""
    if is_allowed(principal, action, resource):
        return

    logger.info(
        "authz.denied",
        user_id=principal.user_id,
        action=action.value,
        resource=type(resource).__name__,
        resource_id=_resource_id(resource),
    )
    raise Forbidden("You do not have access to this resource")


def _resource_id(resource: Resource) -> int | None:
    if isinstance(resource, TaskScope):
        return resource.task_id
    return resource.project_id
