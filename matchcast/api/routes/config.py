"""Configuration API endpoints."""

from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from matchcast.config import get_settings
from matchcast.config.analyst import load_presets

router = APIRouter(prefix="/api/config", tags=["config"])


class PresetResponse(BaseModel):
    """Bot configuration preset."""

    name: str
    description: str
    config: dict[str, Any]


@router.get("/prediction")
async def get_prediction_config():
    """Get current prediction constants."""
    settings = get_settings()
    defaults = settings.load_defaults_config()
    return defaults.get("prediction", {})


@router.get("/presets", response_model=list[PresetResponse])
async def list_presets():
    """List the named bot configuration presets."""
    return [
        PresetResponse(name=p.name, description=p.description, config=p.config.to_dict())
        for p in load_presets().values()
    ]


@router.get("/presets/{name}", response_model=PresetResponse)
async def get_preset(name: str):
    presets = load_presets()
    if name not in presets:
        raise HTTPException(status_code=404, detail="Preset not found")
    preset = presets[name]
    return PresetResponse(
        name=preset.name, description=preset.description, config=preset.config.to_dict()
    )
