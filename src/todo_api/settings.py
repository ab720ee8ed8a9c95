from __future__ import annotations

import os
from dataclasses import dataclass

# Levels understood by both logging and uvicorn
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PERSISTENCE_BACKEND: 'mongo' (default) or 'memory'
    - MONGO_URI: MongoDB connection string. Default 'mongodb://127.0.0.1:27017'
    - MONGO_DB_NAME: database holding the todo collection. Default 'demo_todo'
    - MONGO_COLLECTION: collection name. Default 'todo'
    - CONNECT_TIMEOUT: seconds allowed to connect and ping at startup (default: 10)
    - OPERATION_TIMEOUT: seconds allowed for each store operation (default: 5)
    - HOST / PORT: listen address (default: 0.0.0.0:9000)
    - SHUTDOWN_TIMEOUT: seconds in-flight requests get to drain on shutdown (default: 5)
    - LOG_LEVEL: root log level (default: INFO)
    """

    persistence_backend: str = "mongo"
    mongo_uri: str = "mongodb://127.0.0.1:27017"
    mongo_db_name: str = "demo_todo"
    mongo_collection: str = "todo"
    connect_timeout: float = 10.0
    operation_timeout: float = 5.0
    host: str = "0.0.0.0"
    port: int = 9000
    shutdown_timeout: float = 5.0
    log_level: str = "INFO"


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_float(value: str, default: float) -> float:
    try:
        parsed = float(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _parse_log_level(value: str, default: str) -> str:
    level = value.strip().upper()
    return level if level in LOG_LEVELS else default


def _parse_port(value: str, default: int) -> int:
    try:
        parsed = int(value)
    except ValueError:
        return default
    return parsed if 0 < parsed < 65536 else default


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    defaults = Settings()

    backend = _get_env("PERSISTENCE_BACKEND", defaults.persistence_backend).strip().lower()
    if backend not in {"mongo", "memory"}:
        # Fallback to mongo if unsupported
        backend = "mongo"

    return Settings(
        persistence_backend=backend,
        mongo_uri=_get_env("MONGO_URI", defaults.mongo_uri).strip(),
        mongo_db_name=_get_env("MONGO_DB_NAME", defaults.mongo_db_name).strip(),
        mongo_collection=_get_env("MONGO_COLLECTION", defaults.mongo_collection).strip(),
        connect_timeout=_parse_float(_get_env("CONNECT_TIMEOUT", ""), defaults.connect_timeout),
        operation_timeout=_parse_float(_get_env("OPERATION_TIMEOUT", ""), defaults.operation_timeout),
        host=_get_env("HOST", defaults.host).strip(),
        port=_parse_port(_get_env("PORT", ""), defaults.port),
        shutdown_timeout=_parse_float(_get_env("SHUTDOWN_TIMEOUT", ""), defaults.shutdown_timeout),
        log_level=_parse_log_level(_get_env("LOG_LEVEL", ""), defaults.log_level),
    )
