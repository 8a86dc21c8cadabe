"""Task API routes.

Learn: These routes are the HTTP interface to tasks. Only the owner
of a task's project gets through the service's policy check.

Key patterns:
- POST for creation (201 + Location)
- PUT with sparse semantics: fields absent from the body are untouched
- DELETE returns 204 with no body
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Response
from sqlalchemy.ext.asyncio import AsyncSession

from devtasks.auth.dependencies import get_current_user
from devtasks.auth.jwt import Principal
from devtasks.db.engine import get_db
from devtasks.db.models import MAX_ID
from devtasks.schemas.task import TaskCreate, TaskRead, TaskUpdate
from devtasks.services.task_service import TaskService

router = APIRouter(prefix="/tasks")

# Out-of-range ids fail validation (400) before reaching the store
ProjectId = Annotated[int, Path(ge=1, le=MAX_ID)]
TaskId = Annotated[int, Path(ge=1, le=MAX_ID)]


def _svc(db: AsyncSession = Depends(get_db)) -> TaskService:
    return TaskService(db)


@router.post("", response_model=TaskRead, status_code=201)
async def create_task(
    body: TaskCreate,
    response: Response,
    principal: Principal = Depends(get_current_user),
    svc: TaskService = Depends(_svc),
):
    """Create a task in one of the caller's projects."""
    task = await svc.create_task(
        principal,
        project_id=body.project_id,
        title=body.title,
        description=body.description,
        assigned_to_user_id=body.assigned_to_user_id,
        status=body.status,
    )
    response.headers["Location"] = f"/api/tasks/{task.id}"
    return task


@router.get("/project/{project_id}", response_model=list[TaskRead])
async def list_tasks_for_project(
    project_id: ProjectId,
    principal: Principal = Depends(get_current_user),
    svc: TaskService = Depends(_svc),
):
    """Owner-only listing of a project's tasks."""
    return await svc.list_tasks_for_project(principal, project_id)


@router.get("/{task_id}", response_model=TaskRead)
async def get_task(
    task_id: TaskId,
    principal: Principal = Depends(get_current_user),
    svc: TaskService = Depends(_svc),
):
    return await svc.get_task(principal, task_id)


@router.put("/{task_id}", response_model=TaskRead)
async def update_task(
    task_id: TaskId,
    body: TaskUpdate,
    principal: Principal = Depends(get_current_user),
    svc: TaskService = Depends(_svc),
):
    """Sparse update of title, description, status and assignee."""
    return await svc.update_task(principal, task_id, body.changes())


@router.delete("/{task_id}", status_code=204)
async def delete_task(
    task_id: TaskId,
    principal: Principal = Depends(get_current_user),
    svc: TaskService = Depends(_svc),
):
    await svc.delete_task(principal, task_id)
    return Response(status_code=204)
