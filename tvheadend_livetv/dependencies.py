"""
Dependency wiring for the HTTP surface

The LiveTvService instance is created by the application lifespan and stored
on app.state; routes receive it through FastAPI's dependency injection.
"""
import logging
from typing import Annotated

from fastapi import Depends, Request

from tvheadend_livetv.services import LiveTvService


logger = logging.getLogger(__name__)


def get_live_tv_service(request: Request) -> LiveTvService:
    """
    Get the service owned by the running application.

    Raises:
        RuntimeError: If the application lifespan has not created it
    """
    service = getattr(request.app.state, "live_tv_service", None)
    if service is None:
        raise RuntimeError("Live TV service not initialized. It is created during application startup.")
    return service


LiveTvServiceDep = Annotated[LiveTvService, Depends(get_live_tv_service)]
