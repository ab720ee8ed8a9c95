"""
Todo Service package.

A FastAPI service exposing CRUD over a MongoDB collection of todo items.
Build the application with ``create_app`` or run it with ``python -m todo_api``.
"""

from .main import create_app  # noqa: F401

__all__ = ["create_app"]
