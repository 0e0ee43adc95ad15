"""
API v1 Router

All endpoints are scoped to the calling user through the bearer token.
"""

from fastapi import APIRouter
from . import dependencies

router = APIRouter()

router.include_router(dependencies.router, prefix="/dependencies", tags=["Dependencies"])


@router.get("/", tags=["API"])
async def api_root():
    """API root: version and available endpoints."""
    return {
        "api": "v1",
        "version": "0.1.0",
        "endpoints": [
            "/dependencies",
            "/dependencies/batch",
            "/dependencies/tasks/{taskId}/blockers",
            "/dependencies/tasks/{taskId}/blocked",
            "/dependencies/tasks/{taskId}/available-blockers",
            "/dependencies/tasks/{taskId}/available-blocked",
        ],
    }
