"""
API Dependencies
================

FastAPI dependencies shared by the route modules.
"""

from fastapi import HTTPException, Request, status

from a11y_announcer.service import AccessibilityService


def get_service(request: Request) -> AccessibilityService:
    """
    Return the service created by the application lifespan.

    Raises:
        HTTPException: 503 if the service has not been started.
    """
    service = getattr(request.app.state, "service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Accessibility service is not running",
        )
    return service
