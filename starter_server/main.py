"""ASGI entry point: ``uvicorn starter_server.main:app``."""

from __future__ import annotations

from starter_server.app.main import create_app

app = create_app()
