"""Pydantic schemas for tasks.

Learn: Separate schemas for create/update/read keeps the API clean.
- TaskCreate: what you POST to create a task (status defaults to ToDo)
- TaskUpdate: what you PUT to modify a task (sparse, see below)
- TaskRead: the TaskDto the API returns

TaskUpdate is sparse: only fields present in the JSON body are applied.
model_fields_set tells "absent" apart from "sent as null", so
{"description": null} clears the description while {} leaves it alone.
"""

from typing import Optional

from pydantic import Field, field_validator, model_validator

from devtasks.db.models import (
    DEFAULT_TASK_STATUS,
    TASK_DESCRIPTION_MAX,
    TASK_TITLE_MAX,
    TaskStatus,
)
from devtasks.schemas.base import ApiModel, EntityId

# Fields a TaskUpdate may carry.
UPDATABLE_FIELDS = ("title", "description", "status", "assigned_to_user_id")


class TaskCreate(ApiModel):
    title: str = Field(..., min_length=1, max_length=TASK_TITLE_MAX)
    description: Optional[str] = Field(None, max_length=TASK_DESCRIPTION_MAX)
    project_id: EntityId
    assigned_to_user_id: Optional[EntityId] = None
    status: TaskStatus = DEFAULT_TASK_STATUS

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, v):
        # "status": null means "use the default", same as leaving it out
        return DEFAULT_TASK_STATUS if v is None else v


class TaskUpdate(ApiModel):
    """Sparse update: only fields present in the request are applied."""
    title: Optional[str] = Field(None, min_length=1, max_length=TASK_TITLE_MAX)
    description: Optional[str] = Field(None, max_length=TASK_DESCRIPTION_MAX)
    status: Optional[TaskStatus] = None
    assigned_to_user_id: Optional[EntityId] = None

    @model_validator(mode="after")
    def reject_null_required_fields(self):
        for name in ("title", "status"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict:
        """The explicitly-sent fields, keyed by attribute name."""
        return {
            name: getattr(self, name)
            for name in UPDATABLE_FIELDS
            if name in self.model_fields_set
        }


class TaskRead(ApiModel):
    """TaskDto."""
    id: int
    title: str
    description: Optional[str]
    status: TaskStatus
    project_id: int
    assigned_to_user_id: Optional[int]
