"""Pydantic schemas for projects."""

from pydantic import Field

from devtasks.db.models import PROJECT_NAME_MAX
from devtasks.schemas.base import ApiModel


class ProjectCreate(ApiModel):
    """Body for both POST (create) and PUT (rename)."""
    name: str = Field(..., min_length=1, max_length=PROJECT_NAME_MAX)


class ProjectRead(ApiModel):
    id: int
    name: str
    owner_id: int
