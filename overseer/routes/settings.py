"""Health check and settings endpoints."""

from fastapi import APIRouter, HTTPException, Request
from pydantic import ValidationError

from overseer import settings as settings_store
from overseer.llm import create_llm
from overseer.presets import SETTING_SUGGESTIONS

router = APIRouter()


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.get("/settings")
async def get_settings():
    """Get persisted settings (provider, model, endpoint, feature toggles)."""
    return settings_store.get_settings()


@router.patch("/settings")
async def update_settings(body: dict, request: Request):
    """Update settings (partial merge). The session switches provider if it follows settings."""
    try:
        updated = settings_store.update_settings(body)
    except ValidationError as e:
        raise HTTPException(400, str(e))
    if getattr(request.app.state, "llm_from_settings", False):
        request.app.state.controller.replace_llm(create_llm(updated))
    return updated


@router.get("/settings/suggestions")
async def setting_suggestions():
    """Suggested campaign settings."""
    return SETTING_SUGGESTIONS
