"""FastAPI API endpoints under /api.

Endpoint groups: health + settings, and the single in-process session
(lifecycle commands plus read-only observers for phase, chronicle, roster
and world state).
"""

from fastapi import APIRouter

from .session import router as session_router
from .settings import router as settings_router

router = APIRouter()
router.include_router(settings_router)
router.include_router(session_router)
