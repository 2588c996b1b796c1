"""
Data models for day todos.

Stored records and HTTP payloads share one JSON shape with capitalised
field names (``Task``, ``Day``, ``Created``; ``When``, ``Tasks``). Lower-case
names are accepted on input.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from daytodos.core.calendar import format_created


class TodoError(Exception):
    """Base exception for todo handling errors."""

    pass


class TodoDecodeError(TodoError):
    """Raised when a stored record cannot be decoded into a Todo."""

    pass


class Todo(BaseModel):
    """A task to be done on a day of the week."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {"Task": "milk cows", "Day": "mon", "Created": "2024-01-15T10:23:45.123456Z"},
                {"Task": "have beer"},
            ]
        },
    )

    task: str = Field(..., alias="Task", min_length=1, description="Task to be done")
    day: str = Field(default="", alias="Day", description="Day to do the task")
    created: Optional[datetime] = Field(
        default=None, alias="Created", description="When the todo was created"
    )

    @field_validator("task")
    @classmethod
    def validate_task(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Task must not be blank")
        return v

    @field_validator("created")
    @classmethod
    def validate_created(cls, v: Optional[datetime]) -> Optional[datetime]:
        # Keys hold the time in UTC, which must stay within datetime's range.
        if v is not None:
            try:
                format_created(v)
            except (OverflowError, ValueError) as e:
                raise ValueError("Created is out of range once converted to UTC") from e
        return v

    def encode(self) -> bytes:
        """Marshal into the JSON stored as a bucket value."""
        return self.model_dump_json(by_alias=True).encode("utf-8")

    @classmethod
    def decode(cls, data: bytes) -> "Todo":
        """
        Unmarshal a stored JSON record.

        Raises:
            TodoDecodeError: If ``data`` is not a valid todo record
        """
        try:
            return cls.model_validate_json(data)
        except ValidationError as e:
            raise TodoDecodeError(f"Invalid todo record: {e}") from e


class TaskList(BaseModel):
    """Tasks for one day ("mon") or a set of days ("weekdays", "weekend")."""

    model_config = ConfigDict(populate_by_name=True)

    when: str = Field(..., alias="When")
    tasks: List[str] = Field(default_factory=list, alias="Tasks")
