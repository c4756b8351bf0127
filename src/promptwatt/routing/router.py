"""Route selection for smart-routing mode.

Maps (complexity label, user preference) to exactly one provider with
a static table. No scoring and no I/O happen here - the classifier
has already validated the label, so a missing table row is a bug and
is caught when this module is imported.

Usage:
    decision = select_route(ComplexityLabel.MODERATE,
                            RoutingPreference.from_flags(low_cost=True))
    # decision.provider_id == ProviderId.LLAMA_2
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from promptwatt.providers.registry import ProviderId
from promptwatt.routing.classifier import ComplexityLabel


class RoutingPreference(str, Enum):
    """What the user asked us to optimize for."""
    NONE = "default"
    LOW_LATENCY = "lowLatency"
    LOW_COST = "lowCost"
    LOW_ENERGY = "lowEnergy"

    @classmethod
    def from_flags(
        cls,
        low_latency: bool = False,
        low_cost: bool = False,
        low_energy: bool = False,
    ) -> "RoutingPreference":
        """Collapse the UI's independent checkboxes into one preference.

        When several flags are set the first one in PREFERENCE_PRIORITY wins.
        """
        flags = {
            cls.LOW_LATENCY: low_latency,
            cls.LOW_COST: low_cost,
            cls.LOW_ENERGY: low_energy,
        }
        for preference in PREFERENCE_PRIORITY:
            if flags[preference]:
                return preference
        return cls.NONE


# Highest priority first
PREFERENCE_PRIORITY: tuple[RoutingPreference, ...] = (
    RoutingPreference.LOW_LATENCY,
    RoutingPreference.LOW_COST,
    RoutingPreference.LOW_ENERGY,
)

PREFERENCE_REASONS: Mapping[RoutingPreference, str] = MappingProxyType({
    RoutingPreference.LOW_LATENCY: "Low latency was prioritized.",
    RoutingPreference.LOW_COST: "Low cost was prioritized.",
    RoutingPreference.LOW_ENERGY: "Low energy usage was prioritized.",
    RoutingPreference.NONE: "No specific preferences were prioritized.",
})


def _row(
    default: ProviderId,
    low_latency: ProviderId,
    low_cost: ProviderId,
    low_energy: ProviderId,
) -> Mapping[RoutingPreference, ProviderId]:
    return MappingProxyType({
        RoutingPreference.NONE: default,
        RoutingPreference.LOW_LATENCY: low_latency,
        RoutingPreference.LOW_COST: low_cost,
        RoutingPreference.LOW_ENERGY: low_energy,
    })


_SEARCH = ProviderId.GOOGLE_SEARCH
_LLAMA_2 = ProviderId.LLAMA_2
_LLAMA_3 = ProviderId.LLAMA_3
_DEEPSEEK = ProviderId.DEEPSEEK_R1

#                                  default    latency    cost      energy
ROUTE_TABLE: Mapping[ComplexityLabel, Mapping[RoutingPreference, ProviderId]] = MappingProxyType({
    ComplexityLabel.VERY_SIMPLE: _row(_SEARCH, _SEARCH, _SEARCH, _SEARCH),
    ComplexityLabel.SIMPLE: _row(_LLAMA_2, _LLAMA_2, _LLAMA_2, _LLAMA_2),
    ComplexityLabel.MODERATE: _row(_LLAMA_3, _LLAMA_2, _LLAMA_2, _LLAMA_2),
    ComplexityLabel.COMPLEX: _row(_DEEPSEEK, _LLAMA_3, _LLAMA_3, _LLAMA_3),
    ComplexityLabel.VERY_COMPLEX: _row(_DEEPSEEK, _DEEPSEEK, _LLAMA_3, _LLAMA_3),
})


def check_route_table(
    table: Mapping[ComplexityLabel, Mapping[RoutingPreference, ProviderId]],
) -> None:
    """Raise RuntimeError unless every (label, preference) pair has a provider."""
    for label in ComplexityLabel:
        row = table.get(label)
        if row is None:
            raise RuntimeError(f"route table has no row for {label.value!r}")
        for preference in RoutingPreference:
            if preference not in row:
                raise RuntimeError(
                    f"route table row {label.value!r} has no entry for {preference.value!r}")


check_route_table(ROUTE_TABLE)


@dataclass(frozen=True)
class RouteDecision:
    """The provider chosen for a classified prompt."""
    label: ComplexityLabel
    preference: RoutingPreference
    provider_id: ProviderId

    @property
    def preference_reason(self) -> str:
        return PREFERENCE_REASONS[self.preference]


def select_route(
    label: ComplexityLabel | str,
    preference: RoutingPreference = RoutingPreference.NONE,
) -> RouteDecision:
    """Look up the provider for ``label`` under ``preference``."""
    label = ComplexityLabel(label)
    return RouteDecision(
        label=label,
        preference=preference,
        provider_id=ROUTE_TABLE[label][preference],
    )
