"""Shared pydantic config for the public API.

Learn: The JSON wire format is camelCase (ownerId, assignedToUserId)
while Python attributes stay snake_case. alias_generator handles the
mapping; populate_by_name lets callers send either spelling.
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from devtasks.db.models import MAX_ID

# A reference to a row: positive and within the id column's range.
EntityId = Annotated[int, Field(ge=1, le=MAX_ID)]


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
