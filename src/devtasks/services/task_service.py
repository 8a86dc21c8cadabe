"""Task service — business logic for tasks inside owned projects.

Learn: A task's rights come from its project: only the project owner
can create, read, update or delete individual tasks. The service loads
the task (404), then its project by id (the explicit "owning project"
lookup, not a back-pointer), then asks the policy (403).

Updates are sparse. The caller passes only the fields that were present
in the request; everything else is left exactly as it was.
"""

from typing import Any, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from devtasks.auth.jwt import Principal
from devtasks.auth.policy import Action, TaskScope, authorize
from devtasks.db.models import DEFAULT_TASK_STATUS, Project, Task, TaskStatus, User
from devtasks.errors import NotFound, ValidationFailed

logger = structlog.get_logger()


def parse_status(value: Any) -> TaskStatus:
    """Accept only the three board columns, by exact value."""
    if isinstance(value, TaskStatus):
        return value
    try:
        return TaskStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in TaskStatus)
        raise ValidationFailed(f"Invalid status '{value}'. Must be one of: {allowed}")


class TaskService:
    """Business logic for task CRUD."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Lookups ─────────────────────────────────────────

    async def _project(self, project_id: int) -> Project:
        project = await self.db.get(Project, project_id)
        if project is None:
            raise NotFound("Project not found")
        return project

    async def _owned_task(self, principal: Principal, task_id: int, action: Action) -> Task:
        task = await self.db.get(Task, task_id)
        if task is None:
            raise NotFound("Task not found")
        project = await self._project(task.project_id)
        authorize(
            principal,
            action,
            TaskScope(task_id=task.id, project_id=project.id, project_owner_id=project.owner_id),
        )
        return task

    async def _check_assignee(self, user_id: Optional[int]) -> None:
        if user_id is None:
            return
        if await self.db.get(User, user_id) is None:
            raise ValidationFailed(f"Assigned user {user_id} does not exist")

    # ─── Create ──────────────────────────────────────────

    async def create_task(
        self,
        principal: Principal,
        project_id: int,
        title: str,
        description: Optional[str] = None,
        assigned_to_user_id: Optional[int] = None,
        status: TaskStatus | str | None = None,
    ) -> Task:
        """Create a task in a project the principal owns. Status defaults to ToDo."""
        project = await self._project(project_id)
        authorize(
            principal,
            Action.CREATE,
            TaskScope(task_id=None, project_id=project.id, project_owner_id=project.owner_id),
        )

        task_status = DEFAULT_TASK_STATUS if status is None else parse_status(status)
        await self._check_assignee(assigned_to_user_id)

        task = Task(
            title=title,
            description=description,
            status=task_status.value,
            project_id=project.id,
            assigned_to_user_id=assigned_to_user_id,
        )
        self.db.add(task)
        await self.db.commit()

        logger.info("task.created", task_id=task.id, project_id=project.id)
        return task

    # ─── Read ────────────────────────────────────────────

    async def get_task(self, principal: Principal, task_id: int) -> Task:
        return await self._owned_task(principal, task_id, Action.READ)

    async def list_tasks_for_project(self, principal: Principal, project_id: int) -> list[Task]:
        """Owner-only task listing (GET /api/tasks/project/{id})."""
        project = await self._project(project_id)
        authorize(
            principal,
            Action.READ,
            TaskScope(task_id=None, project_id=project.id, project_owner_id=project.owner_id),
        )
        result = await self.db.execute(
            select(Task).where(Task.project_id == project.id).order_by(Task.id)
        )
        return list(result.scalars().all())

    # ─── Update ──────────────────────────────────────────

    async def update_task(self, principal: Principal, task_id: int, changes: dict) -> Task:
        """Apply a sparse update.

        changes holds only the fields the caller actually sent, keyed by
        attribute name: title, description, status, assigned_to_user_id.
        """
        task = await self._owned_task(principal, task_id, Action.UPDATE)

        # validate everything before touching the row
        if "title" in changes and not changes["title"]:
            raise ValidationFailed("Title cannot be empty")
        new_status = parse_status(changes["status"]) if "status" in changes else None
        if "assigned_to_user_id" in changes:
            await self._check_assignee(changes["assigned_to_user_id"])

        if "title" in changes:
            task.title = changes["title"]
        if "description" in changes:
            task.description = changes["description"]
        if new_status is not None:
            task.status = new_status.value
        if "assigned_to_user_id" in changes:
            task.assigned_to_user_id = changes["assigned_to_user_id"]

        await self.db.commit()

        if changes:
            logger.info("task.updated", task_id=task.id, fields=sorted(changes))
        return task

    # ─── Delete ──────────────────────────────────────────

    async def delete_task(self, principal: Principal, task_id: int) -> None:
        task = await self._owned_task(principal, task_id, Action.DELETE)
        await self.db.delete(task)
        await self.db.commit()

        logger.info("task.deleted", task_id=task_id)
