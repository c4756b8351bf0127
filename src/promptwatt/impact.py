"""Energy, CO2 and water estimates for a model response.

All of this is linear arithmetic on token counts with fixed,
externally sourced factors:

- energy (Wh)  = tokens / 1000 * model Wh-per-1k-tokens
- CO2 (gCO2e)  = energy * 0.463 g/Wh (global data-centre average, IEA)
                 or energy / 1000 * grid intensity (gCO2e/kWh)
- water (L)    = kWh * 1.2 (direct cooling)
                 + kWh * (0.3 + 3 * intensity / 1000) (indirect, generation)

A model with no energy profile yields None everywhere, never zero.
"""

from dataclasses import dataclass
from typing import Any

from promptwatt.providers.client import ProviderResult
from promptwatt.providers.registry import get_provider

DEFAULT_CO2_G_PER_WH = 0.463
DIRECT_WATER_L_PER_KWH = 1.2
INDIRECT_WATER_BASE_L_PER_KWH = 0.3
INDIRECT_WATER_INTENSITY_FACTOR = 3.0

# Upper bounds (exclusive) for each impact level; anything above is "Very High"
CO2_LEVELS = ((0.1, "Very Low"), (0.5, "Low"), (1.0, "Moderate"), (5.0, "High"))
WATER_LEVELS = ((0.001, "Very Low"), (0.005, "Low"), (0.01, "Moderate"), (0.05, "High"))


def energy_wh(total_tokens: int, energy_per_k_token_wh: float | None) -> float | None:
    if energy_per_k_token_wh is None:
        return None
    return (total_tokens / 1000) * energy_per_k_token_wh


def co2_grams(energy: float | None, co2_intensity: float | None = None) -> float | None:
    """CO2 for ``energy`` Wh.

    Uses the grid intensity (gCO2e/kWh) when given, otherwise the
    global average factor.
    """
    if energy is None:
        return None
    if co2_intensity is None:
        return energy * DEFAULT_CO2_G_PER_WH
    return (energy / 1000) * co2_intensity


@dataclass(frozen=True)
class WaterFootprint:
    direct_l: float
    indirect_l: float

    @property
    def total_l(self) -> float:
        return self.direct_l + self.indirect_l


def water_liters(energy: float | None, co2_intensity: float | None) -> WaterFootprint | None:
    if energy is None or co2_intensity is None:
        return None
    kwh = energy / 1000
    return WaterFootprint(
        direct_l=kwh * DIRECT_WATER_L_PER_KWH,
        indirect_l=kwh * (INDIRECT_WATER_BASE_L_PER_KWH
                          + INDIRECT_WATER_INTENSITY_FACTOR * (co2_intensity / 1000)),
    )


def impact_level(value: float, levels: tuple[tuple[float, str], ...]) -> str:
    for bound, label in levels:
        if value < bound:
            return label
    return "Very High"


@dataclass(frozen=True)
class Footprint:
    """Estimated footprint of one result."""
    energy_wh: float | None
    co2_g: float | None
    water: WaterFootprint | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "energyWh": self.energy_wh,
            "co2Grams": self.co2_g,
            "co2Level": impact_level(self.co2_g, CO2_LEVELS) if self.co2_g is not None else None,
        }
        if self.water is not None:
            data["water"] = {
                "directLiters": self.water.direct_l,
                "indirectLiters": self.water.indirect_l,
                "totalLiters": self.water.total_l,
                "level": impact_level(self.water.total_l, WATER_LEVELS),
            }
        return data


def estimate_footprint(energy: float | None, co2_intensity: float | None = None) -> Footprint:
    return Footprint(
        energy_wh=energy,
        co2_g=co2_grams(energy, co2_intensity),
        water=water_liters(energy, co2_intensity),
    )


def footprint_for(result: ProviderResult, co2_intensity: float | None = None) -> Footprint:
    """Footprint of a provider result using the registry's energy profile."""
    spec = get_provider(result.provider_id)
    factor = spec.energy_per_k_token_wh if spec else None
    return estimate_footprint(energy_wh(result.total_tokens, factor), co2_intensity)
