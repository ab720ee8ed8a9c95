from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from threading import RLock
from typing import Dict, List, Optional

from bson import ObjectId
from fastapi import Request

from .models import TodoRecord, new_record, update_fields
from .settings import Settings

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for todo storage backends."""

    name: str = "abstract"

    @abstractmethod
    def ping(self) -> None:
        """Verify the store is reachable. Raise StoreError otherwise."""

    @abstractmethod
    def close(self) -> None:
        """Release the store connection."""

    @abstractmethod
    def list(self) -> List[TodoRecord]:
        """Return every record, in the store's natural order."""

    @abstractmethod
    def get(self, todo_id: ObjectId) -> Optional[TodoRecord]:
        """Return a record by id, or None if not found."""

    @abstractmethod
    def create(self, title: str) -> TodoRecord:
        """Insert a new, not completed record and return it."""

    @abstractmethod
    def update(self, todo_id: ObjectId, title: str, completed: bool) -> bool:
        """Overwrite title and completed. Return False if no record matched."""

    @abstractmethod
    def delete(self, todo_id: ObjectId) -> bool:
        """Delete a record by id. Return True if deleted, False if not found."""


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and local runs.
    """

    name = "memory"

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: Dict[ObjectId, TodoRecord] = {}

    def ping(self) -> None:
        return None

    def close(self) -> None:
        return None

    def list(self) -> List[TodoRecord]:
        with self._lock:
            # Return copies to avoid external mutation
            return [t.copy() for t in self._items.values()]

    def get(self, todo_id: ObjectId) -> Optional[TodoRecord]:
        with self._lock:
            item = self._items.get(todo_id)
            return None if item is None else item.copy()

    def create(self, title: str) -> TodoRecord:
        record = new_record(title)
        with self._lock:
            self._items[record["_id"]] = record
        return record.copy()

    def update(self, todo_id: ObjectId, title: str, completed: bool) -> bool:
        with self._lock:
            existing = self._items.get(todo_id)
            if existing is None:
                return False
            updated = existing.copy()
            updated.update(update_fields(title, completed))  # type: ignore[typeddict-item]
            self._items[todo_id] = updated
            return True

    def delete(self, todo_id: ObjectId) -> bool:
        with self._lock:
            return self._items.pop(todo_id, None) is not None


# PUBLIC_INTERFACE
def build_repository(settings: Settings) -> Repository:
    """
    Factory returning a connected repository for the configured backend.
    - memory: InMemoryRepository
    - mongo: MongoRepository (connects and pings; raises StoreError on failure)
    """
    if settings.persistence_backend == "memory":
        logger.info("Using in-memory todo store")
        return InMemoryRepository()

    from .db import MongoRepository

    return MongoRepository.connect(settings)


# PUBLIC_INTERFACE
def get_repository(request: Request) -> Repository:
    """FastAPI dependency returning the repository opened by the application lifespan."""
    return request.app.state.repository
