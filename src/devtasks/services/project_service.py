"""Project service — ownership-scoped CRUD for projects.

Learn: Every method that takes a project id follows the same order:
1. Load the project → NotFound if it doesn't exist
2. Ask the policy → Forbidden if the principal may not act on it
3. Read or write

Step 1 always comes first, so a caller can never learn "this id
exists but isn't yours" from a 403 on an id that doesn't exist.

Deleting a project removes its tasks in the same transaction. The
tasks.project_id FK also says ON DELETE CASCADE, but the explicit
DELETE keeps the behaviour identical on engines that don't enforce it.
"""

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from devtasks.auth.jwt import Principal
from devtasks.auth.policy import (
    Action,
    ProjectScope,
    ProjectTaskView,
    authorize,
)
from devtasks.db.models import Project, Task, User
from devtasks.errors import NotFound, Unauthenticated

logger = structlog.get_logger()


def project_scope(project: Project) -> ProjectScope:
    return ProjectScope(project_id=project.id, owner_id=project.owner_id)


class ProjectService:
    """Business logic for projects owned by a principal."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Lookups ─────────────────────────────────────────

    async def find(self, project_id: int) -> Project:
        """Load a project or raise NotFound. No ownership check."""
        project = await self.db.get(Project, project_id)
        if project is None:
            raise NotFound("Project not found")
        return project

    async def get_owned(self, principal: Principal, project_id: int, action: Action) -> Project:
        project = await self.find(project_id)
        authorize(principal, action, project_scope(project))
        return project

    # ─── Create / list ───────────────────────────────────

    async def create_project(self, principal: Principal, name: str) -> Project:
        authorize(principal, Action.CREATE, ProjectScope(project_id=None, owner_id=None))
        # A token can outlive its user row; the owner FK would reject the insert
        if await self.db.get(User, principal.user_id) is None:
            raise Unauthenticated("User no longer exists")

        project = Project(name=name, owner_id=principal.user_id)
        self.db.add(project)
        await self.db.commit()

        logger.info("project.created", project_id=project.id, owner_id=principal.user_id)
        return project

    async def list_projects(self, principal: Principal) -> list[Project]:
        """Only the principal's own projects. There is no global listing."""
        result = await self.db.execute(
            select(Project)
            .where(Project.owner_id == principal.user_id)
            .order_by(Project.id)
        )
        return list(result.scalars().all())

    # ─── Read / update / delete ──────────────────────────

    async def get_project(self, principal: Principal, project_id: int) -> Project:
        return await self.get_owned(principal, project_id, Action.READ)

    async def rename_project(self, principal: Principal, project_id: int, name: str) -> Project:
        project = await self.get_owned(principal, project_id, Action.UPDATE)
        project.name = name
        await self.db.commit()

        logger.info("project.renamed", project_id=project.id)
        return project

    async def delete_project(self, principal: Principal, project_id: int) -> None:
        """Delete a project and all of its tasks atomically."""
        project = await self.get_owned(principal, project_id, Action.DELETE)

        try:
            result = await self.db.execute(
                delete(Task).where(Task.project_id == project.id)
            )
            await self.db.delete(project)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info("project.deleted", project_id=project_id, task_count=result.rowcount)

    # ─── Task list view ──────────────────────────────────

    async def list_project_tasks(self, principal: Principal, project_id: int) -> list[Task]:
        """Task list for a project: visible to its owner and to its assignees."""
        project = await self.find(project_id)

        tasks = await self._tasks_of(project.id)
        view = ProjectTaskView(
            project_id=project.id,
            owner_id=project.owner_id,
            assignee_ids=frozenset(
                t.assigned_to_user_id for t in tasks if t.assigned_to_user_id is not None
            ),
        )
        authorize(principal, Action.LIST_TASKS, view)
        return tasks

    async def _tasks_of(self, project_id: int) -> list[Task]:
        result = await self.db.execute(
            select(Task).where(Task.project_id == project_id).order_by(Task.id)
        )
        return list(result.scalars().all())
