"""FastAPI dependencies shared by the route modules.

Tests swap these out with ``app.dependency_overrides``.
"""

from typing import AsyncIterator

from fastapi import Depends

from promptwatt.config import Settings, get_settings
from promptwatt.providers.client import ProviderClient
from promptwatt.routing.classifier import ComplexityClassifier


def settings_dependency() -> Settings:
    return get_settings()


async def get_provider_client(
    settings: Settings = Depends(settings_dependency),
) -> AsyncIterator[ProviderClient]:
    """One ProviderClient (and HTTP connection pool) per request."""
    async with ProviderClient(settings) as client:
        yield client


def get_classifier(
    settings: Settings = Depends(settings_dependency),
) -> ComplexityClassifier:
    return ComplexityClassifier(model=settings.classifier_model)
