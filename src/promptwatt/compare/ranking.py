"""Ordering of comparison results.

Successful, timed results come first, fastest first. Everything else
(errors, and results with no timing) sinks to the bottom in the order
it arrived. Python's sort is stable, so a two-part key is enough.
"""

from typing import Iterable

from promptwatt.providers.client import ProviderResult, Timing


def _rank_key(result: ProviderResult) -> tuple[int, int]:
    if result.timing == Timing.MEASURED:
        return (0, result.latency_ms)
    return (1, 0)


def rank_results(results: Iterable[ProviderResult]) -> list[ProviderResult]:
    """Return a new list sorted by the ranking rule."""
    return sorted(results, key=_rank_key)
