from __future__ import annotations

from bson import ObjectId
from fastapi import APIRouter, Depends, status

from ..errors import InvalidRequestError, TodoNotFoundError
from ..models import to_view
from ..repositories import Repository, get_repository
from ..schemas import (
    CreatedResponse,
    ErrorResponse,
    MessageResponse,
    TodoCreate,
    TodoListResponse,
    TodoResponse,
    TodoUpdate,
    TodoView,
)

router = APIRouter(
    prefix="/todo",
    tags=["todos"],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request or id"},
        503: {"model": ErrorResponse, "description": "Store unavailable"},
    },
)

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Todo not found"}}


def _get_repo(repo: Repository = Depends(get_repository)) -> Repository:
    """
    Dependency wrapper for repository to keep signatures clean.
    """
    return repo


def _todo_id(todo_id: str) -> ObjectId:
    """
    Parse the ``{todo_id}`` path segment. Runs before the body is read and
    before any store call.
    """
    if not ObjectId.is_valid(todo_id):
        raise InvalidRequestError("invalid id")
    return ObjectId(todo_id)


# PUBLIC_INTERFACE
@router.get("", response_model=TodoListResponse, include_in_schema=False)
@router.get(
    "/",
    response_model=TodoListResponse,
    summary="List Todos",
    description="List every todo item in the store's natural order.",
)
def list_todos(repo: Repository = Depends(_get_repo)) -> TodoListResponse:
    """
    List all todos.
    """
    return TodoListResponse(data=[TodoView(**to_view(t)) for t in repo.list()])


# PUBLIC_INTERFACE
@router.post("", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED, include_in_schema=False)
@router.post(
    "/",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Todo",
    description="Create a new, not completed todo item and return its id.",
)
def create_todo(payload: TodoCreate, repo: Repository = Depends(_get_repo)) -> CreatedResponse:
    """
    Create a new Todo. ``completed`` in the payload is ignored.
    """
    created = repo.create(payload.title)
    return CreatedResponse(message="todo created successfully", todo_id=str(created["_id"]))


# PUBLIC_INTERFACE
@router.get(
    "/{todo_id}",
    response_model=TodoResponse,
    summary="Get Todo",
    description="Get a single todo item by id.",
    responses=_NOT_FOUND,
)
def get_todo(oid: ObjectId = Depends(_todo_id), repo: Repository = Depends(_get_repo)) -> TodoResponse:
    """
    Retrieve a single Todo item by its id.
    """
    item = repo.get(oid)
    if item is None:
        raise TodoNotFoundError("could not fetch todo")
    return TodoResponse(data=TodoView(**to_view(item)))


# PUBLIC_INTERFACE
@router.put(
    "/{todo_id}",
    response_model=MessageResponse,
    summary="Update Todo",
    description="Overwrite the title and completion flag of a todo item.",
    responses=_NOT_FOUND,
)
def update_todo(
    payload: TodoUpdate,
    oid: ObjectId = Depends(_todo_id),
    repo: Repository = Depends(_get_repo),
) -> MessageResponse:
    """
    Update title and completed; id and creation time stay as they are.
    """
    if not repo.update(oid, payload.title, payload.completed):
        raise TodoNotFoundError("could not update todo")
    return MessageResponse(message="todo updated successfully")


# PUBLIC_INTERFACE
@router.delete(
    "/{todo_id}",
    response_model=MessageResponse,
    summary="Delete Todo",
    description="Delete a todo item by id.",
    responses=_NOT_FOUND,
)
def delete_todo(oid: ObjectId = Depends(_todo_id), repo: Repository = Depends(_get_repo)) -> MessageResponse:
    """
    Delete a Todo. Returns 200 on success, 404 if not found.
    """
    if not repo.delete(oid):
        raise TodoNotFoundError("could not delete todo")
    return MessageResponse(message="todo deleted successfully")
