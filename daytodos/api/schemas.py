"""
Pydantic schemas for API responses.

Request bodies and task lists use :class:`daytodos.core.models.Todo` and
:class:`daytodos.core.models.TaskList` directly.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from daytodos.core.models import TaskList


class CreateTodoResponse(BaseModel):
    """Response schema for storing a todo."""

    key: str = Field(..., description="Key the todo was stored under")
    day: str = Field(..., description="Day the todo was filed under")
    task: str = Field(..., description="Task text")
    message: str = Field(..., description="Human readable receipt")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "key": "1/2024-01-15T10:23:45.123456Z",
                    "day": "mon",
                    "task": "milk cows",
                    "message": "put todo for 1/2024-01-15T10:23:45.123456Z: milk cows",
                }
            ]
        }
    }


class WeekResponse(BaseModel):
    """Response schema for the whole week grouped by day."""

    days: List[TaskList] = Field(..., description="One task list per day, Monday first")


class ClearDayResponse(BaseModel):
    """Response schema for clearing a day."""

    day: str = Field(..., description="Day that was cleared")
    deleted: int = Field(..., description="Number of todos deleted")


class HealthCheckResponse(BaseModel):
    """Response schema for health checks."""

    status: str = Field(..., description="Overall health status (healthy/unhealthy)")
    checks: Optional[Dict[str, Any]] = Field(default=None, description="Individual service checks")
    message: Optional[str] = Field(default=None, description="Status message")
