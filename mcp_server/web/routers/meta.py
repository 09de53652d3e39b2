"""Meta router -- health check."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter

from mcp_server.web.models.api import HealthResponse

router = APIRouter(prefix="/api", tags=["meta"])


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(status="ok", timestamp=datetime.now(timezone.utc).isoformat())
