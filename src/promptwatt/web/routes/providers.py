"""Reference API routes: provider registry, footprint estimates, health."""

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict, Field

from promptwatt import __version__
from promptwatt.impact import estimate_footprint
from promptwatt.providers.registry import PROVIDER_REGISTRY

router = APIRouter()


class ImpactRequest(BaseModel):
    """Energy figure to convert into CO2 and water estimates."""
    model_config = ConfigDict(populate_by_name=True)

    energy_wh: float = Field(..., ge=0, alias="energyWh")
    co2_intensity: float | None = Field(None, ge=0, alias="co2Intensity")  # gCO2e/kWh


@router.get("/providers")
async def list_providers():
    """List every known provider with its energy profile."""
    return {"providers": [spec.to_dict() for spec in PROVIDER_REGISTRY.values()]}


@router.post("/impact")
async def estimate_impact(req: ImpactRequest):
    """Estimate CO2 and water for an energy figure.

    Without ``co2Intensity`` the global average CO2 factor is used and
    no water estimate is produced.
    """
    return estimate_footprint(req.energy_wh, req.co2_intensity).to_dict()


@router.get("/health")
async def health():
    return {"status": "ok", "version": __version__}
