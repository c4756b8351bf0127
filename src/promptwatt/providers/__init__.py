"""Model and search providers.

- registry: static table of providers (names, energy profiles)
- client: bounded HTTP call to one chat-completions model
- search: zero-cost simulated web search
"""

from promptwatt.providers.client import (
    ERROR_MARKER,
    ProviderClient,
    ProviderResult,
    Timing,
    error_result,
)
from promptwatt.providers.registry import (
    COMPARISON_PROVIDERS,
    PROVIDER_REGISTRY,
    ProviderId,
    ProviderSpec,
    get_provider,
)
from promptwatt.providers.search import simulate_search

__all__ = [
    "ERROR_MARKER",
    "ProviderClient",
    "ProviderResult",
    "Timing",
    "error_result",
    "COMPARISON_PROVIDERS",
    "PROVIDER_REGISTRY",
    "ProviderId",
    "ProviderSpec",
    "get_provider",
    "simulate_search",
]
