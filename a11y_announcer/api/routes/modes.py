"""
Mode Routes
===========

Endpoints for hosts that push their state over HTTP instead of
registering predicates in-process.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from a11y_announcer.api.dependencies import get_service
from a11y_announcer.modes.state import CoarseMode
from a11y_announcer.service import AccessibilityService
from a11y_announcer.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/modes", tags=["Modes"])


class CoarseModeRequest(BaseModel):
    """Coarse mode to record."""

    mode: CoarseMode


class FlagRequest(BaseModel):
    """Toggle for a pushed mode."""

    active: bool
    state: Optional[str] = Field(
        default=None,
        description="Description announced when the user asks for the current state",
    )


class ModeResponse(BaseModel):
    """Current mode classification."""

    mode: str
    coarse_mode: str


class KeyResponse(BaseModel):
    """Whether a key press was used."""

    handled: bool


@router.get("/current", response_model=ModeResponse)
async def current_mode(
    service: AccessibilityService = Depends(get_service),
) -> ModeResponse:
    """Return the mode that would win right now without switching to it."""
    return ModeResponse(
        mode=service.classify(),
        coarse_mode=service.mode_state.current.value,
    )


@router.put("/coarse", response_model=ModeResponse)
async def set_coarse_mode(
    request: CoarseModeRequest,
    service: AccessibilityService = Depends(get_service),
) -> ModeResponse:
    service.set_mode(request.mode)
    return ModeResponse(
        mode=service.tick(),
        coarse_mode=service.mode_state.current.value,
    )


@router.put("/flags/{name}", response_model=ModeResponse)
async def set_mode_flag(
    name: str,
    request: FlagRequest,
    service: AccessibilityService = Depends(get_service),
) -> ModeResponse:
    """
    Activate or deactivate a mode listed in ``MODE_FLAGS``.

    Raises:
        HTTPException: 404 if the mode is not configured.
    """
    try:
        service.set_mode_flag(name, request.active, request.state)
    except KeyError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Mode flag not configured: {name}",
        )
    return ModeResponse(
        mode=service.tick(),
        coarse_mode=service.mode_state.current.value,
    )


@router.post("/keys/{key}", response_model=KeyResponse)
async def press_key(
    key: str,
    service: AccessibilityService = Depends(get_service),
) -> KeyResponse:
    """Route a key press through global bindings and the active mode."""
    service.tick()
    return KeyResponse(handled=service.handle_key(key))


@router.post("/state", response_model=ModeResponse)
async def announce_state(
    service: AccessibilityService = Depends(get_service),
) -> ModeResponse:
    """Speak the active mode's description of the current state."""
    mode = service.tick()
    service.announce_state()
    return ModeResponse(mode=mode, coarse_mode=service.mode_state.current.value)
