"""Smart routing: classify a prompt, pick one provider, run it there.

Flow:
    classification = await ComplexityClassifier().classify(prompt)
    decision = select_route(classification.label, preference)
    routed = await RouteExecutor(client).execute(prompt, decision.provider_id, classification)

The route table is static; the only model call made for routing is
the classification itself.
"""

from promptwatt.routing.classifier import (
    ClassificationError,
    ComplexityClassification,
    ComplexityClassifier,
    ComplexityLabel,
)
from promptwatt.routing.executor import ExecutionError, RoutedResult, RouteExecutor
from promptwatt.routing.extraction import ExtractionError, extract_json
from promptwatt.routing.router import (
    RouteDecision,
    RoutingPreference,
    select_route,
)

__all__ = [
    "ClassificationError",
    "ComplexityClassification",
    "ComplexityClassifier",
    "ComplexityLabel",
    "ExecutionError",
    "RoutedResult",
    "RouteExecutor",
    "ExtractionError",
    "extract_json",
    "RouteDecision",
    "RoutingPreference",
    "select_route",
]
