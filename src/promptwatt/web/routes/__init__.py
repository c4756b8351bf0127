"""Routes package for the PromptWatt web API."""

from promptwatt.web.routes import compare, providers, route

__all__ = ["compare", "providers", "route"]
