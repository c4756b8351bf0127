"""Smart-routing API routes.

Two steps, mirroring the UI:
- POST /route/analyze  classify the prompt and pick a model
- POST /route/execute  run the prompt on the picked model
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from promptwatt.config import ConfigurationError, Settings
from promptwatt.providers.client import ProviderClient
from promptwatt.providers.registry import ProviderId
from promptwatt.routing import (
    ClassificationError,
    ComplexityClassification,
    ComplexityClassifier,
    ComplexityLabel,
    ExecutionError,
    RouteExecutor,
    RoutingPreference,
    select_route,
)
from promptwatt.web.deps import get_classifier, get_provider_client, settings_dependency

logger = logging.getLogger(__name__)

router = APIRouter()


# ── Request Models ─────────────────────────────────────

class Preferences(BaseModel):
    """Routing preference checkboxes from the UI."""
    model_config = ConfigDict(populate_by_name=True)

    low_latency: bool = Field(False, alias="lowLatency")
    low_cost: bool = Field(False, alias="lowCost")
    low_energy: bool = Field(False, alias="lowEnergy")


class AnalyzeRequest(BaseModel):
    prompt: str | None = None
    preferences: Preferences = Field(default_factory=Preferences)


class ExecuteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    prompt: str | None = None
    selected_model: str | None = Field(None, alias="selectedModel")
    complexity: str | None = None
    reasoning: str | None = None


# ── Analyze ────────────────────────────────────────────

@router.post("/route/analyze")
async def analyze_prompt(
    req: AnalyzeRequest,
    classifier: ComplexityClassifier = Depends(get_classifier),
):
    """Classify prompt complexity and select a model for it."""
    if not req.prompt or not req.prompt.strip():
        raise HTTPException(status_code=400, detail="Prompt is required")

    try:
        classification = await classifier.classify(req.prompt)
    except ClassificationError as e:
        logger.error(f"Failed to analyze prompt: {e}")
        raise HTTPException(
            status_code=500, detail=f"Failed to analyze prompt: {e}")

    preference = RoutingPreference.from_flags(
        low_latency=req.preferences.low_latency,
        low_cost=req.preferences.low_cost,
        low_energy=req.preferences.low_energy,
    )
    decision = select_route(classification.label, preference)

    return {
        "complexity": classification.label.value,
        "selectedModel": decision.provider_id.value,
        "reasoning": f"{classification.rationale} {decision.preference_reason}".strip(),
    }


# ── Execute ────────────────────────────────────────────

@router.post("/route/execute")
async def execute_route(
    req: ExecuteRequest,
    settings: Settings = Depends(settings_dependency),
    client: ProviderClient = Depends(get_provider_client),
):
    """Run the prompt on the model chosen by /route/analyze."""
    if not req.prompt or not req.selected_model:
        raise HTTPException(
            status_code=400, detail="Prompt and selectedModel are required")

    try:
        provider_id = ProviderId(req.selected_model)
    except ValueError:
        raise HTTPException(
            status_code=400, detail=f"Unknown model: {req.selected_model}")

    classification = None
    if req.complexity:
        try:
            label = ComplexityLabel(req.complexity)
        except ValueError:
            raise HTTPException(
                status_code=400, detail=f"Invalid complexity level: {req.complexity}")
        classification = ComplexityClassification(label=label, rationale=req.reasoning or "")

    if provider_id != ProviderId.GOOGLE_SEARCH:
        try:
            settings.require_api_key()
        except ConfigurationError as e:
            raise HTTPException(status_code=500, detail=str(e))

    try:
        routed = await RouteExecutor(client).execute(req.prompt, provider_id, classification)
    except ExecutionError as e:
        raise HTTPException(
            status_code=500, detail=f"Failed to execute query: {e}")
    except Exception as e:
        logger.exception("Error in execute API")
        raise HTTPException(
            status_code=500, detail=f"Failed to execute query: {e}")

    return routed.to_dict()
