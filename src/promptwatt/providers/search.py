"""Simulated web-search provider.

Stands in for a plain search engine on prompts too simple to justify
a model call. Nothing goes over the network: the response text is a
fixed template around the prompt, the latency is sampled, and the
token counts are whitespace splits.
"""

import random

from promptwatt.providers.client import ProviderResult
from promptwatt.providers.registry import ProviderId, display_name

MIN_LATENCY_MS = 200
MAX_LATENCY_MS = 700        # Exclusive
PREVIEW_CHARS = 20


def whitespace_tokens(text: str) -> int:
    """Number of whitespace-separated tokens in ``text``."""
    return len(text.split())


def render_search_response(prompt: str) -> str:
    preview = prompt[:PREVIEW_CHARS] + "..." if len(prompt) > PREVIEW_CHARS else prompt
    return (
        f'[Google Search Results for: "{prompt}"]\n'
        "\n"
        "Based on web search results, here are the most relevant answers:\n"
        "\n"
        f"1. {preview} - Top results from authoritative sources\n"
        "2. Additional context and information from search results\n"
        "3. Related questions and answers\n"
        "\n"
        "For more detailed information, you would need to visit the specific search results."
    )


def simulate_search(prompt: str, rng: random.Random | None = None) -> ProviderResult:
    """Synthesize a search result for ``prompt``.

    Args:
        prompt: The user's prompt.
        rng: Random source for the latency (defaults to the module RNG).

    Returns:
        ProviderResult with latency in [200, 700) ms.
    """
    rng = rng or random
    text = render_search_response(prompt)
    return ProviderResult(
        provider_id=ProviderId.GOOGLE_SEARCH.value,
        display_name=display_name(ProviderId.GOOGLE_SEARCH),
        output_text=text,
        input_tokens=whitespace_tokens(prompt),
        output_tokens=whitespace_tokens(text),
        latency_ms=rng.randrange(MIN_LATENCY_MS, MAX_LATENCY_MS),
    )
