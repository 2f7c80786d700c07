"""
Announcement Routes
===================

Endpoints for handing text to the announcement pipeline.

Includes:
- Immediate and queued announcements
- Repeat last utterance
- Delayed announcements
- Clipboard queue inspection and clearing
"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from a11y_announcer.api.dependencies import get_service
from a11y_announcer.categories import Category
from a11y_announcer.service import AccessibilityService
from a11y_announcer.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/announcements", tags=["Announcements"])

ChannelName = Literal["speech", "queue"]


# Request/Response Models
class AnnouncementRequest(BaseModel):
    """Text to announce."""

    text: str = Field(..., description="Raw text; markup and escapes are cleaned")
    speaker: Optional[str] = Field(
        default=None,
        description="Speaker name, prefixed for dialogue",
    )
    category: Category = Field(
        default=Category.SYSTEM_MESSAGE,
        description="Announcement category",
    )
    channel: ChannelName = Field(
        default="speech",
        description="'speech' speaks immediately, 'queue' goes to the clipboard queue",
    )


class DelayedAnnouncementRequest(BaseModel):
    """Text to announce after a delay."""

    text: str = Field(..., description="Text to speak when the delay elapses")
    delay: Optional[float] = Field(
        default=None,
        ge=0.0,
        le=60.0,
        description="Seconds to wait (default from configuration)",
    )
    category: Category = Field(default=Category.SYSTEM_MESSAGE)


class DeliveryResponse(BaseModel):
    """Whether the pipeline passed the text on."""

    delivered: bool


class DelayedResponse(BaseModel):
    """Generation tagging the scheduled announcement."""

    generation: int


class QueueResponse(BaseModel):
    """Clipboard queue status."""

    pending: int
    delivered: int
    dropped: int


class ClearQueueResponse(BaseModel):
    """Result of clearing the clipboard queue."""

    cleared: int


@router.post(
    "",
    response_model=DeliveryResponse,
    summary="Announce text",
)
async def create_announcement(
    request: AnnouncementRequest,
    service: AccessibilityService = Depends(get_service),
) -> DeliveryResponse:
    """
    Announce text on a channel.

    Returns ``delivered=false`` for blank text and for duplicates inside
    the suppression window.
    """
    delivered = service.output(
        request.speaker,
        request.text,
        request.category,
        channel=request.channel,
    )
    return DeliveryResponse(delivered=delivered)


@router.post(
    "/repeat",
    response_model=DeliveryResponse,
    summary="Repeat the last utterance",
)
async def repeat_last(
    channel: ChannelName = Query(default="speech"),
    service: AccessibilityService = Depends(get_service),
) -> DeliveryResponse:
    """Repeat the last dialogue/narration on a channel."""
    return DeliveryResponse(delivered=service.repeat_last(channel))


@router.post(
    "/delayed",
    response_model=DelayedResponse,
    summary="Schedule a delayed announcement",
)
async def schedule_delayed(
    request: DelayedAnnouncementRequest,
    service: AccessibilityService = Depends(get_service),
) -> DelayedResponse:
    """Speak text after a delay, replacing any pending delayed announcement."""
    text = request.text
    generation = service.schedule_delayed_announcement(
        request.delay,
        lambda: text,
        request.category,
    )
    return DelayedResponse(generation=generation)


@router.delete(
    "/delayed",
    response_model=DeliveryResponse,
    summary="Cancel the pending delayed announcement",
)
async def cancel_delayed(
    service: AccessibilityService = Depends(get_service),
) -> DeliveryResponse:
    """Cancel the pending delayed announcement, if any."""
    was_pending = service.scheduler.pending
    service.cancel_delayed_announcement()
    return DeliveryResponse(delivered=was_pending)


@router.get(
    "/queue",
    response_model=QueueResponse,
    summary="Clipboard queue status",
)
async def queue_status(
    service: AccessibilityService = Depends(get_service),
) -> QueueResponse:
    """Return pending, delivered and dropped counts for the clipboard queue."""
    return QueueResponse(**service.queue.get_stats())


@router.delete(
    "/queue",
    response_model=ClearQueueResponse,
    summary="Clear the clipboard queue",
)
async def clear_queue(
    service: AccessibilityService = Depends(get_service),
) -> ClearQueueResponse:
    """Discard clipboard output that has not been delivered yet."""
    cleared = service.clear_queue()
    logger.info("Clipboard queue cleared via API", cleared=cleared)
    return ClearQueueResponse(cleared=cleared)
