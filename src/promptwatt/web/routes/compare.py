"""Comparison API route: one prompt, every model, ranked rows."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from promptwatt.compare import CompareOrchestrator
from promptwatt.config import ConfigurationError, Settings
from promptwatt.impact import footprint_for
from promptwatt.providers.client import ProviderClient
from promptwatt.providers.registry import COMPARISON_PROVIDERS
from promptwatt.web.deps import get_provider_client, settings_dependency

logger = logging.getLogger(__name__)

router = APIRouter()


class CompareRequest(BaseModel):
    """Request to compare models on a prompt."""
    prompt: str | None = None


@router.post("/compare")
async def compare_models(
    req: CompareRequest,
    settings: Settings = Depends(settings_dependency),
    client: ProviderClient = Depends(get_provider_client),
):
    """Send the prompt to every comparison model.

    Always returns one row per model, fastest successful first and
    failed rows last.
    """
    try:
        settings.require_api_key()
    except ConfigurationError as e:
        logger.error("OPENROUTER_API_KEY environment variable is not set")
        raise HTTPException(status_code=500, detail=str(e))

    if not req.prompt or not req.prompt.strip():
        raise HTTPException(status_code=400, detail="Prompt is required")

    try:
        orchestrator = CompareOrchestrator(client, timeout_ms=settings.timeout_ms)
        results = await orchestrator.compare_ranked(req.prompt, COMPARISON_PROVIDERS)
    except Exception as e:
        logger.exception("Error in compare API")
        raise HTTPException(
            status_code=500, detail=f"Failed to process request: {e}")

    return [
        {**r.to_dict(), **footprint_for(r).to_dict()}
        for r in results
    ]
