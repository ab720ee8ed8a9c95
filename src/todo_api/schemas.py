from __future__ import annotations

from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _require_title(value: Optional[str]) -> str:
    """Reject a missing or blank title; the title itself is kept as sent."""
    if value is None or not value.strip():
        raise ValueError("title is required")
    return value


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new Todo item.

    ``completed`` is accepted for symmetry with updates but ignored: new items
    always start out not completed.
    """

    model_config = ConfigDict(json_schema_extra={"example": {"title": "buy milk"}})

    title: str = Field(..., description="Short title for the todo item")
    completed: Optional[Any] = Field(default=None, description="Ignored on create, whatever its type")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _require_title(v)


# PUBLIC_INTERFACE
class TodoUpdate(BaseModel):
    """
    Schema for updating an existing Todo item.

    Both fields are written; an absent ``completed`` resets it to false.
    The wire text form ("true"/"false") is accepted for ``completed``.
    """

    model_config = ConfigDict(
        json_schema_extra={"example": {"title": "buy milk", "completed": True}}
    )

    title: str = Field(..., description="Short title for the todo item")
    completed: bool = Field(default=False, description="Completion status flag")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _require_title(v)


# PUBLIC_INTERFACE
class TodoView(BaseModel):
    """
    Schema returned by the API for a Todo item.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "65f1c0ffee00000000000001",
                "title": "buy milk",
                "completed": "false",
                "created_at": "2025-01-25T10:15:30.123000Z",
            }
        }
    )

    id: str = Field(..., description="Hex ObjectId of the todo item")
    title: str = Field(..., description="Short title for the todo item")
    completed: Literal["true", "false"] = Field(..., description="Completion status as text")
    created_at: datetime = Field(..., description="Creation timestamp")


class TodoListResponse(BaseModel):
    data: List[TodoView]


class TodoResponse(BaseModel):
    data: TodoView


class MessageResponse(BaseModel):
    message: str


class CreatedResponse(BaseModel):
    message: str
    todo_id: str


class ErrorResponse(BaseModel):
    """Envelope returned for every failed request."""

    message: str
    error: str
