"""Fan-out orchestrator for comparison mode.

Sends one prompt to several providers at once and collects exactly
one result per provider:

    orchestrator = CompareOrchestrator(client)
    results = await orchestrator.compare("What is 2+2?", COMPARISON_PROVIDERS)

All calls start together and the orchestrator waits for every one of
them. A provider that fails or times out shows up as an error row; it
never cancels its siblings.
"""

import asyncio
import logging
from typing import Sequence

from promptwatt.compare.ranking import rank_results
from promptwatt.providers.client import ProviderClient, ProviderResult, error_result
from promptwatt.providers.registry import ProviderId

logger = logging.getLogger(__name__)


class CompareOrchestrator:
    """Runs a prompt against a list of providers concurrently."""

    def __init__(self, client: ProviderClient, timeout_ms: int | None = None):
        self.client = client
        self.timeout_ms = timeout_ms or client.settings.timeout_ms

    async def compare(
        self,
        prompt: str,
        provider_ids: Sequence[str | ProviderId],
    ) -> list[ProviderResult]:
        """Invoke every provider and return one result each.

        The output has the same length and the same ids as
        ``provider_ids``; the order is not meaningful until ranked.
        """
        provider_ids = list(provider_ids)
        settled = await asyncio.gather(
            *(self._invoke(pid, prompt) for pid in provider_ids),
            return_exceptions=True,
        )

        results: list[ProviderResult] = []
        for pid, outcome in zip(provider_ids, settled):
            key = pid.value if isinstance(pid, ProviderId) else str(pid)
            if isinstance(outcome, ProviderResult):
                results.append(outcome)
                continue
            logger.error(f"Invocation failed for model {key}: {outcome!r}")
            if isinstance(outcome, BaseException):
                reason = str(outcome) or type(outcome).__name__
            else:
                reason = f"unexpected result {type(outcome).__name__}"
            results.append(error_result(key, f"Request failed. {reason}", latency_ms=0))
        return results

    async def _invoke(self, provider_id: str | ProviderId, prompt: str) -> ProviderResult:
        return await self.client.invoke(provider_id, prompt, self.timeout_ms)

    async def compare_ranked(
        self,
        prompt: str,
        provider_ids: Sequence[str | ProviderId],
    ) -> list[ProviderResult]:
        """compare() followed by the standard ranking."""
        return rank_results(await self.compare(prompt, provider_ids))
