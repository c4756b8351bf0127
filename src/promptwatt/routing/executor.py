"""Single-route execution for smart-routing mode.

Runs a prompt on the one provider the router picked. The simulated
web search never touches the network; every other provider goes
through the regular ProviderClient.

Unlike comparison mode there is no error row to fall back to: if the
chosen provider fails, execute() raises ExecutionError.
"""

import logging
import random
from dataclasses import dataclass
from typing import Any

from promptwatt.providers.client import ProviderClient, ProviderResult
from promptwatt.providers.registry import ProviderId
from promptwatt.providers.search import simulate_search
from promptwatt.routing.classifier import ComplexityClassification

logger = logging.getLogger(__name__)


class ExecutionError(Exception):
    """The selected provider did not return a usable response."""


@dataclass(frozen=True)
class RoutedResult:
    """A provider result plus the classification that chose the provider."""
    result: ProviderResult
    classification: ComplexityClassification | None = None

    def to_dict(self) -> dict[str, Any]:
        data = {
            "response": self.result.output_text,
            "inputTokens": self.result.input_tokens,
            "outputTokens": self.result.output_tokens,
            "responseTime": self.result.latency_ms,
        }
        if self.classification is not None:
            data["complexity"] = self.classification.label.value
            data["reasoning"] = self.classification.rationale
        return data


class RouteExecutor:
    """Executes a prompt on a single selected provider."""

    def __init__(
        self,
        client: ProviderClient,
        rng: random.Random | None = None,
    ):
        self.client = client
        self.rng = rng

    async def execute(
        self,
        prompt: str,
        provider_id: ProviderId | str,
        classification: ComplexityClassification | None = None,
    ) -> RoutedResult:
        provider_id = ProviderId(provider_id)

        if provider_id == ProviderId.GOOGLE_SEARCH:
            result = simulate_search(prompt, self.rng)
        else:
            result = await self.client.invoke(provider_id, prompt)

        if result.is_error:
            logger.error(f"Routed execution failed on {provider_id.value}: {result.output_text}")
            raise ExecutionError(result.output_text)

        return RoutedResult(result=result, classification=classification)
