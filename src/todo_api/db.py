from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Generator, List, Optional

import pymongo
from bson import ObjectId
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from .errors import StoreError
from .models import TodoRecord, decode_record, new_record, update_fields
from .repositories import Repository
from .settings import Settings

logger = logging.getLogger(__name__)


class MongoRepository(Repository):
    """
    MongoDB repository implementing the Repository interface.

    A single MongoClient (and its connection pool) is shared by all requests.
    Each operation is bounded by ``operation_timeout`` seconds; driver errors,
    timeouts included, are raised as StoreError without retrying.
    """

    name = "mongo"

    def __init__(
        self,
        collection: Collection,
        operation_timeout: float = 5.0,
        client: Optional[MongoClient] = None,
    ) -> None:
        self._collection = collection
        self._timeout = operation_timeout
        self._client = client

    @classmethod
    def connect(cls, settings: Settings) -> "MongoRepository":
        """
        Open a client for ``settings.mongo_uri`` and ping it, allowing
        ``connect_timeout`` seconds for both.

        Raises:
            StoreError if the server cannot be reached in time.
        """
        timeout_ms = int(settings.connect_timeout * 1000)
        client: MongoClient = MongoClient(
            settings.mongo_uri,
            tz_aware=True,
            serverSelectionTimeoutMS=timeout_ms,
            connectTimeoutMS=timeout_ms,
        )
        try:
            with pymongo.timeout(settings.connect_timeout):
                client.admin.command("ping")
        except PyMongoError as exc:
            client.close()
            raise StoreError("could not connect to MongoDB", str(exc)) from exc

        logger.info("Connected to MongoDB at %s (database=%s)", settings.mongo_uri, settings.mongo_db_name)
        collection = client[settings.mongo_db_name][settings.mongo_collection]
        return cls(collection, settings.operation_timeout, client=client)

    @contextmanager
    def _op(self, message: str) -> Generator[None, None, None]:
        """Bound one store call by the operation timeout and translate driver errors."""
        try:
            with pymongo.timeout(self._timeout):
                yield
        except PyMongoError as exc:
            raise StoreError(message, str(exc)) from exc

    def ping(self) -> None:
        with self._op("could not reach the store"):
            self._collection.database.command("ping")

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            logger.info("Closed MongoDB connection")

    def _decode(self, document: Any, message: str) -> TodoRecord:
        try:
            return decode_record(document)
        except ValueError as exc:
            raise StoreError(message, str(exc)) from exc

    def list(self) -> List[TodoRecord]:
        with self._op("could not fetch todos"):
            documents = list(self._collection.find({}))
        return [self._decode(doc, "could not decode todos") for doc in documents]

    def get(self, todo_id: ObjectId) -> Optional[TodoRecord]:
        with self._op("could not fetch todo"):
            document = self._collection.find_one({"_id": todo_id})
        return None if document is None else self._decode(document, "could not decode todo")

    def create(self, title: str) -> TodoRecord:
        record = new_record(title)
        with self._op("could not create todo"):
            self._collection.insert_one(dict(record))
        return record

    def update(self, todo_id: ObjectId, title: str, completed: bool) -> bool:
        with self._op("could not update todo"):
            res = self._collection.update_one(
                {"_id": todo_id}, {"$set": update_fields(title, completed)}
            )
        return res.matched_count > 0

    def delete(self, todo_id: ObjectId) -> bool:
        with self._op("could not delete todo"):
            res = self._collection.delete_one({"_id": todo_id})
        return res.deleted_count > 0
