"""Health check endpoint."""

from fastapi import APIRouter
from pydantic import BaseModel

router = APIRouter(tags=["Default"])


class HealthResponse(BaseModel):
    """Health check response model."""
    message: str


@router.get("/", response_model=HealthResponse, summary="API Health check")
async def health_check():
    """Liveness probe, always 200."""
    return HealthResponse(message="API is Live!")
