"""Web API (FastAPI). Build the app with ``create_app()``."""

from promptwatt.web.server import create_app

__all__ = ["create_app"]
