"""Static provider registry.

Every model or service PromptWatt can send a prompt to is listed here
once, keyed by a closed enum of identifiers. The registry is built at
import time and never mutated afterwards.

Energy figures are Wh per 1000 tokens. A provider without a known
energy profile has ``energy_per_k_token_wh=None`` - that means
"unknown", not "free".
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping


class ProviderId(str, Enum):
    """Identifiers of every provider the app knows about."""
    GOOGLE_SEARCH = "google-search"                      # Simulated, no network
    LLAMA_2 = "meta-llama/llama-2-70b-chat"
    LLAMA_3 = "meta-llama/llama-3.1-405b:free"
    DEEPSEEK_R1 = "deepseek/deepseek-r1:free"


@dataclass(frozen=True)
class ProviderSpec:
    """One registry entry."""
    provider_id: ProviderId
    display_name: str
    description: str = ""
    parameters: str | None = None           # Parameter count label, e.g. "70B"
    energy_per_k_token_wh: float | None = None
    simulated: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.provider_id.value,
            "name": self.display_name,
            "description": self.description,
            "parameters": self.parameters,
            "energyPerKTokenWh": self.energy_per_k_token_wh,
            "simulated": self.simulated,
        }


PROVIDER_REGISTRY: Mapping[ProviderId, ProviderSpec] = MappingProxyType({
    ProviderId.GOOGLE_SEARCH: ProviderSpec(
        ProviderId.GOOGLE_SEARCH, "Google Search",
        description="Fast, efficient web search for simple queries",
        simulated=True,
    ),
    ProviderId.LLAMA_2: ProviderSpec(
        ProviderId.LLAMA_2, "Llama 2",
        description="Balanced performance for simple to moderate queries",
        parameters="70B",
        energy_per_k_token_wh=1.12,
    ),
    ProviderId.LLAMA_3: ProviderSpec(
        ProviderId.LLAMA_3, "Llama 3",
        description="Advanced capabilities for moderate complexity queries",
        parameters="405B",
        energy_per_k_token_wh=15.33,
    ),
    ProviderId.DEEPSEEK_R1: ProviderSpec(
        ProviderId.DEEPSEEK_R1, "DeepSeek R1",
        description="Powerful reasoning for complex queries",
        parameters="671B",
        energy_per_k_token_wh=2.72,
    ),
})

# Models queried side by side in comparison mode, in dispatch order
COMPARISON_PROVIDERS: tuple[ProviderId, ...] = (
    ProviderId.LLAMA_2,
    ProviderId.LLAMA_3,
    ProviderId.DEEPSEEK_R1,
)


def check_registry(registry: Mapping[ProviderId, ProviderSpec]) -> None:
    """Raise RuntimeError unless every ProviderId has an entry."""
    missing = set(ProviderId) - set(registry)
    if missing:
        raise RuntimeError(
            f"provider registry is missing: {sorted(pid.value for pid in missing)}")


check_registry(PROVIDER_REGISTRY)


def get_provider(provider_id: str | ProviderId) -> ProviderSpec | None:
    """Look up a registry entry by id. Returns None for unknown ids."""
    try:
        return PROVIDER_REGISTRY[ProviderId(provider_id)]
    except ValueError:
        return None


def display_name(provider_id: str | ProviderId) -> str:
    """Human name for a provider, falling back to the raw id."""
    spec = get_provider(provider_id)
    if spec is not None:
        return spec.display_name
    return provider_id.value if isinstance(provider_id, ProviderId) else str(provider_id)
