"""FastAPI dependency injection for the shared session handler."""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request, status

from elicit.handler import SessionHandler

logger = logging.getLogger(__name__)


def get_handler(request: Request) -> SessionHandler:
    """Return the handler built during lifespan startup.

    Routes use it as:
        def my_route(handler: SessionHandler = Depends(get_handler)):
    """
    handler = getattr(request.app.state, "handler", None)
    if handler is None:
        logger.error("Session handler requested before startup completed")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service is starting up",
        )
    return handler
