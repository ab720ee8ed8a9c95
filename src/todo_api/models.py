from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional, TypedDict

from bson import ObjectId


# PUBLIC_INTERFACE
class TodoRecord(TypedDict):
    """
    A todo item as persisted in the document store.

    Fields:
    - _id: ObjectId assigned on insert, never changed
    - title: Non-empty title (checked by the request schemas before insert)
    - completed: Boolean completion flag, False at creation
    - createAt: UTC creation timestamp, never changed
    """

    _id: ObjectId
    title: str
    completed: bool
    createAt: datetime


def utcnow() -> datetime:
    """
    Current UTC time truncated to milliseconds, the precision BSON dates keep,
    so a record reads back the same from every backend.
    """
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


# PUBLIC_INTERFACE
def new_record(title: str, now: Optional[datetime] = None) -> TodoRecord:
    """Build the document for a freshly created todo: new id, not completed."""
    return {
        "_id": ObjectId(),
        "title": title,
        "completed": False,
        "createAt": now or utcnow(),
    }


# PUBLIC_INTERFACE
def decode_record(document: Dict[str, Any]) -> TodoRecord:
    """
    Check a raw store document against the record shape.

    Raises:
        ValueError if a field is missing or has the wrong type.
    """
    expected = (("_id", ObjectId), ("title", str), ("completed", bool), ("createAt", datetime))
    for key, kind in expected:
        if key not in document:
            raise ValueError(f"document {document.get('_id')!s} has no field '{key}'")
        if not isinstance(document[key], kind):
            raise ValueError(
                f"document {document.get('_id')!s} field '{key}' is "
                f"{type(document[key]).__name__}, expected {kind.__name__}"
            )
    return {
        "_id": document["_id"],
        "title": document["title"],
        "completed": document["completed"],
        "createAt": document["createAt"],
    }


# PUBLIC_INTERFACE
def update_fields(title: str, completed: bool) -> Dict[str, Any]:
    """Return the ``$set`` payload for an update; id and createAt are never touched."""
    return {"title": title, "completed": completed}


# PUBLIC_INTERFACE
def to_view(record: TodoRecord) -> Dict[str, Any]:
    """
    Render a stored record in wire form.

    ``completed`` goes out as the text "true"/"false" and the timestamp key is
    ``created_at`` (stored as ``createAt``).
    """
    return {
        "id": str(record["_id"]),
        "title": record["title"],
        "completed": "true" if record["completed"] else "false",
        "created_at": record["createAt"],
    }
