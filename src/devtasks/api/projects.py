"""Project API routes.

Learn: FastAPI routers define HTTP endpoints. Each route function
receives dependencies (principal, service) via Depends() and delegates
to the service layer. The service raises NotFound / Forbidden; the
error handlers in devtasks.errors turn those into 404 / 403.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Response
from sqlalchemy.ext.asyncio import AsyncSession

from devtasks.auth.dependencies import get_current_user
from devtasks.auth.jwt import Principal
from devtasks.db.engine import get_db
from devtasks.db.models import MAX_ID
from devtasks.schemas.project import ProjectCreate, ProjectRead
from devtasks.schemas.task import TaskRead
from devtasks.services.project_service import ProjectService

router = APIRouter(prefix="/projects")

ProjectId = Annotated[int, Path(ge=1, le=MAX_ID)]


def _svc(db: AsyncSession = Depends(get_db)) -> ProjectService:
    return ProjectService(db)


@router.get("", response_model=list[ProjectRead])
async def list_projects(
    principal: Principal = Depends(get_current_user),
    svc: ProjectService = Depends(_svc),
):
    """Projects owned by the caller."""
    return await svc.list_projects(principal)


@router.post("", response_model=ProjectRead, status_code=201)
async def create_project(
    body: ProjectCreate,
    response: Response,
    principal: Principal = Depends(get_current_user),
    svc: ProjectService = Depends(_svc),
):
    project = await svc.create_project(principal, body.name)
    response.headers["Location"] = f"/api/projects/{project.id}"
    return project


@router.get("/{project_id}", response_model=ProjectRead)
async def get_project(
    project_id: ProjectId,
    principal: Principal = Depends(get_current_user),
    svc: ProjectService = Depends(_svc),
):
    return await svc.get_project(principal, project_id)


@router.put("/{project_id}", response_model=ProjectRead)
async def rename_project(
    project_id: ProjectId,
    body: ProjectCreate,
    principal: Principal = Depends(get_current_user),
    svc: ProjectService = Depends(_svc),
):
    return await svc.rename_project(principal, project_id, body.name)


@router.delete("/{project_id}", status_code=204)
async def delete_project(
    project_id: ProjectId,
    principal: Principal = Depends(get_current_user),
    svc: ProjectService = Depends(_svc),
):
    """Delete a project together with all of its tasks."""
    await svc.delete_project(principal, project_id)
    return Response(status_code=204)


@router.get("/{project_id}/tasks", response_model=list[TaskRead])
async def list_project_tasks(
    project_id: ProjectId,
    principal: Principal = Depends(get_current_user),
    svc: ProjectService = Depends(_svc),
):
    """Task list for the board. Open to the owner and to anyone assigned a task here."""
    return await svc.list_project_tasks(principal, project_id)
