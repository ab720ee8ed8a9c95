import logging

import pytest
from fastapi.testclient import TestClient

from todo_api import server as server_module
from todo_api.errors import StoreError
from todo_api.main import create_app
from todo_api.repositories import InMemoryRepository
from todo_api.server import build_server, main
from todo_api.settings import Settings


class RecordingRepository(InMemoryRepository):
    def __init__(self) -> None:
        super().__init__()
        self.closed = False

    def close(self) -> None:
        self.closed = True


class TestLifespan:
    def test_store_closed_on_shutdown(self):
        repo = RecordingRepository()
        app = create_app(Settings(persistence_backend="memory"), repository=repo)
        with TestClient(app) as client:
            assert client.get("/todo/").status_code == 200
            assert repo.closed is False
        assert repo.closed is True

    def test_repository_built_at_startup(self):
        app = create_app(Settings(persistence_backend="memory"))
        assert app.state.repository is None
        with TestClient(app):
            assert isinstance(app.state.repository, InMemoryRepository)

    def test_unreachable_store_aborts_startup(self):
        settings = Settings(
            persistence_backend="mongo",
            mongo_uri="mongodb://127.0.0.1:1",
            connect_timeout=0.2,
        )
        app = create_app(settings)
        with pytest.raises(StoreError):
            with TestClient(app):
                pass


class TestBuildServer:
    def test_config_follows_settings(self):
        settings = Settings(persistence_backend="memory", host="127.0.0.1", port=9123, shutdown_timeout=3.0)
        server = build_server(settings)
        assert server.config.host == "127.0.0.1"
        assert server.config.port == 9123
        assert server.config.lifespan == "on"
        assert server.config.timeout_graceful_shutdown == 3.0
        assert server.config.access_log is False

    def test_unknown_log_level_falls_back_to_info(self):
        server = build_server(Settings(persistence_backend="memory", log_level="VERBOSE"))
        assert server.config.log_level == "info"


class TestEntryPoint:
    def test_main_serves_given_settings(self, monkeypatch):
        served = []

        async def fake_serve(settings):
            served.append(settings)

        monkeypatch.setattr(server_module, "serve", fake_serve)
        settings = Settings(persistence_backend="memory")
        main(settings)
        assert served == [settings]

    def test_main_swallows_interrupt(self, monkeypatch):
        async def interrupted(settings):
            raise KeyboardInterrupt

        monkeypatch.setattr(server_module, "serve", interrupted)
        main(Settings(persistence_backend="memory"))


class TestRequestLogging:
    def test_each_request_logged(self, caplog):
        caplog.set_level(logging.INFO, logger="todo_api.access")
        app = create_app(Settings(persistence_backend="memory"))
        with TestClient(app) as client:
            client.post("/todo/", json={"title": "log me"})
            client.delete("/todo/nope")

        lines = [r.getMessage() for r in caplog.records if r.name == "todo_api.access"]
        assert len(lines) == 2
        assert lines[0].startswith('"POST /todo/" 201 ')
        assert lines[1].startswith('"DELETE /todo/nope" 400 ')
        assert all(line.endswith("ms") for line in lines)
