"""Comparison mode: fan a prompt out to several models and rank the rows."""

from promptwatt.compare.orchestrator import CompareOrchestrator
from promptwatt.compare.ranking import rank_results

__all__ = ["CompareOrchestrator", "rank_results"]
