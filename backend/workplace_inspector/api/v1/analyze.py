"""Workplace photo analysis endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import BaseModel

from workplace_inspector.core.config import Settings, get_settings
from workplace_inspector.services.ai.vision.contracts import DEFAULT_MODE, MODE_LABELS, AnalysisResult

router = APIRouter()


class ModeInfo(BaseModel):
    value: str
    label: str


class ModesResponse(BaseModel):
    modes: list[ModeInfo]
    default: str


@router.get("/modes", response_model=ModesResponse, summary="List analysis modes")
def list_modes():
    return ModesResponse(
        modes=[ModeInfo(value=mode.value, label=label) for mode, label in MODE_LABELS.items()],
        default=DEFAULT_MODE.value,
    )


@router.post(
    "/analyze",
    response_model=AnalysisResult,
    response_model_by_alias=True,
    response_model_exclude_none=True,
    summary="Analyze a workplace photo for safety issues",
)
async def analyze_endpoint(
    image: UploadFile | None = File(default=None),
    mode: str | None = Form(default=None),
    settings: Settings = Depends(get_settings),
):
    from workplace_inspector.services.ai.vision.service import analyze_workplace_photo

    content = await image.read() if image is not None else None
    content_type = image.content_type if image is not None else None

    result = await analyze_workplace_photo(content, content_type, mode, settings=settings)
    return result
