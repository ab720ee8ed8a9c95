from datetime import datetime, timezone

import pytest
from bson import ObjectId

from todo_api.models import decode_record, new_record, to_view, update_fields
from todo_api.settings import Settings, get_settings

ENV_VARS = [
    "PERSISTENCE_BACKEND",
    "MONGO_URI",
    "MONGO_DB_NAME",
    "MONGO_COLLECTION",
    "CONNECT_TIMEOUT",
    "OPERATION_TIMEOUT",
    "HOST",
    "PORT",
    "SHUTDOWN_TIMEOUT",
    "LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSettings:
    def test_defaults(self, clean_env):
        assert get_settings() == Settings()
        s = get_settings()
        assert s.mongo_uri == "mongodb://127.0.0.1:27017"
        assert s.mongo_db_name == "demo_todo"
        assert s.mongo_collection == "todo"
        assert s.port == 9000

    def test_env_overrides(self, clean_env):
        clean_env.setenv("PERSISTENCE_BACKEND", "Memory")
        clean_env.setenv("MONGO_URI", "mongodb://db:27017")
        clean_env.setenv("PORT", "8080")
        clean_env.setenv("OPERATION_TIMEOUT", "2.5")
        clean_env.setenv("LOG_LEVEL", "debug")
        s = get_settings()
        assert s.persistence_backend == "memory"
        assert s.mongo_uri == "mongodb://db:27017"
        assert s.port == 8080
        assert s.operation_timeout == 2.5
        assert s.log_level == "DEBUG"

    def test_bad_values_fall_back(self, clean_env):
        clean_env.setenv("PERSISTENCE_BACKEND", "sqlite")
        clean_env.setenv("PORT", "not-a-port")
        clean_env.setenv("CONNECT_TIMEOUT", "-1")
        clean_env.setenv("LOG_LEVEL", "verbose")
        s = get_settings()
        assert s.persistence_backend == "mongo"
        assert s.port == 9000
        assert s.connect_timeout == 10.0
        assert s.log_level == "INFO"


class TestRecordCodec:
    def test_new_record(self):
        now = datetime(2025, 1, 25, 10, 15, 30, 123000, tzinfo=timezone.utc)
        record = new_record("buy milk", now=now)
        assert isinstance(record["_id"], ObjectId)
        assert record["title"] == "buy milk"
        assert record["completed"] is False
        assert record["createAt"] == now

    def test_new_record_timestamp_has_millisecond_precision(self):
        record = new_record("t")
        assert record["createAt"].microsecond % 1000 == 0
        assert record["createAt"].tzinfo is not None

    def test_to_view(self):
        oid = ObjectId()
        created = datetime(2025, 1, 1, tzinfo=timezone.utc)
        view = to_view({"_id": oid, "title": "x", "completed": True, "createAt": created})
        assert view == {"id": str(oid), "title": "x", "completed": "true", "created_at": created}
        assert to_view({"_id": oid, "title": "x", "completed": False, "createAt": created})["completed"] == "false"

    def test_update_fields_touch_only_mutable_keys(self):
        assert update_fields("t", True) == {"title": "t", "completed": True}

    def test_decode_record_drops_unknown_keys(self):
        oid = ObjectId()
        created = datetime(2025, 1, 1)
        doc = {"_id": oid, "title": "x", "completed": False, "createAt": created, "extra": 1}
        assert decode_record(doc) == {"_id": oid, "title": "x", "completed": False, "createAt": created}

    def test_decode_record_rejects_wrong_types(self):
        doc = {"_id": ObjectId(), "title": "x", "completed": "yes", "createAt": datetime(2025, 1, 1)}
        with pytest.raises(ValueError, match="completed"):
            decode_record(doc)
