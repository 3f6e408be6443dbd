from typing import Annotated, Any
import logging

from fastapi import APIRouter, Depends

from auth.session import SessionManager
from ..dependencies import get_session_manager

logger = logging.getLogger('accounts.service.routers.misc')

router = APIRouter()


@router.get("/status")
async def get_status(session_manager: Annotated[SessionManager, Depends(get_session_manager)]) -> dict[str, Any]:
    """Health check endpoint, including session store reachability."""
    store_ok = await session_manager.store.health_check()
    if not store_ok:
        logger.warning("Status check: session store unreachable")

    status_info = {
        "status": "ok",
        "session_store": store_ok,
    }

    return status_info
